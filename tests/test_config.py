"""
Tests for configuration management.
"""

import os
import pytest
from unittest.mock import patch
from pydantic import ValidationError


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self):
        """Settings should have correct default values."""
        with patch.dict(os.environ, {}, clear=True):
            from image_intake.config import Settings

            settings = Settings(_env_file=None)

            assert settings.host == "0.0.0.0"
            assert settings.port == 7070
            assert settings.debug is False
            assert settings.max_file_size == 10 * 1024 * 1024
            assert settings.default_quality == 80
            assert settings.allow_origin == "http://localhost:8080"
            assert settings.log_level == "INFO"

    def test_env_override(self):
        """Settings should be overridable via environment variables."""
        env_vars = {
            "HOST": "127.0.0.1",
            "PORT": "9000",
            "DEBUG": "true",
            "MAX_FILE_SIZE": "1048576",
            "DEFAULT_QUALITY": "55",
            "ALLOW_ORIGIN": "https://example.com",
            "LOG_LEVEL": "debug",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            from image_intake.config import Settings

            settings = Settings(_env_file=None)

            assert settings.host == "127.0.0.1"
            assert settings.port == 9000
            assert settings.debug is True
            assert settings.max_file_size == 1048576
            assert settings.default_quality == 55
            assert settings.allow_origin == "https://example.com"
            assert settings.log_level == "DEBUG"
            assert settings.bind_address == "127.0.0.1:9000"

    @pytest.mark.parametrize("quality", ["0", "101", "-5"])
    def test_default_quality_out_of_range(self, quality):
        """DEFAULT_QUALITY outside 1..100 should fail at startup."""
        with patch.dict(os.environ, {"DEFAULT_QUALITY": quality}, clear=True):
            from image_intake.config import Settings

            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_max_file_size_must_be_positive(self):
        """MAX_FILE_SIZE of zero should be rejected."""
        with patch.dict(os.environ, {"MAX_FILE_SIZE": "0"}, clear=True):
            from image_intake.config import Settings

            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_allowed_mime_types_fixed(self, settings):
        """Allowed types are the five image types and cannot be configured."""
        assert settings.allowed_mime_types == (
            "image/jpeg",
            "image/png",
            "image/jpg",
            "image/webp",
            "image/gif",
        )

    def test_settings_are_frozen(self, settings):
        """Settings should be read-only after construction."""
        with pytest.raises(ValidationError):
            settings.default_quality = 10
