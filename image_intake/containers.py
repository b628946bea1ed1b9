"""
Dependency injection container using dependency-injector.
"""

from dependency_injector import containers, providers

from .config import Settings
from .services.compressor import ImageCompressor


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration, built once and frozen
    config = providers.Singleton(Settings)

    # Stateless upload validator / image compressor
    compressor = providers.Singleton(
        ImageCompressor,
        max_file_size=config.provided.max_file_size,
        default_quality=config.provided.default_quality,
        allowed_mime_types=config.provided.allowed_mime_types,
    )
