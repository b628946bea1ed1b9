"""
Configuration management for the image intake service.
"""

from typing import Tuple
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

# Sniffed content types accepted by POST /compress. Not configurable.
ALLOWED_MIME_TYPES: Tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/jpg",
    "image/webp",
    "image/gif",
)

# Output width in pixels; height follows the source aspect ratio
TARGET_WIDTH = 800


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    # Server settings
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=7070, alias="PORT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Upload limit in bytes for the image field
    max_file_size: int = Field(default=10 * 1024 * 1024, alias="MAX_FILE_SIZE")

    # JPEG quality used when the request carries no quality field
    default_quality: int = Field(default=80, alias="DEFAULT_QUALITY")

    # Single origin allowed for cross-origin requests
    allow_origin: str = Field(default="http://localhost:8080", alias="ALLOW_ORIGIN")

    @field_validator("max_file_size")
    @classmethod
    def _check_max_file_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("MAX_FILE_SIZE must be positive")
        return value

    @field_validator("default_quality")
    @classmethod
    def _check_default_quality(cls, value: int) -> int:
        if not 1 <= value <= 100:
            raise ValueError("DEFAULT_QUALITY must be between 1 and 100")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def allowed_mime_types(self) -> Tuple[str, ...]:
        return ALLOWED_MIME_TYPES

    @property
    def bind_address(self) -> str:
        return f"{self.host}:{self.port}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True
        frozen = True
        extra = "ignore"
