"""
Pytest configuration and shared fixtures.
"""

import io
import sys
import os
import pytest
from PIL import Image

# Add repo root to path for imports
root_path = os.path.join(os.path.dirname(__file__), "..")
if root_path not in sys.path:
    sys.path.insert(0, root_path)


def make_image_bytes(width: int, height: int, format: str = "PNG", mode: str = "RGB", noise: bool = False) -> bytes:
    """Render a test image and return it encoded in the given format."""
    if noise:
        img = Image.effect_noise((width, height), 80).convert(mode)
    else:
        img = Image.linear_gradient("L").resize((width, height)).convert(mode)
    buffer = io.BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def image_factory():
    """Factory fixture producing encoded image bytes."""
    return make_image_bytes


@pytest.fixture
def png_bytes():
    """A 1600x1200 PNG, wider than the output width."""
    return make_image_bytes(1600, 1200, "PNG")


@pytest.fixture
def settings():
    """Settings isolated from the process environment."""
    from image_intake.config import Settings

    return Settings(
        host="127.0.0.1",
        port=7070,
        max_file_size=2 * 1024 * 1024,
        default_quality=80,
        allow_origin="http://localhost:8080",
    )


@pytest.fixture
def client(settings):
    """TestClient running the full app (lifespan included)."""
    from fastapi.testclient import TestClient
    from image_intake.server import create_app

    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
