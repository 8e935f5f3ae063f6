"""Portal configuration loaded from environment variables."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings


class ApiConfig(BaseSettings):
    """Remote claims and notifications API configuration."""

    model_config = {"env_prefix": "MUNICIPAL_PORTAL_API_"}

    base_url: str = "http://localhost:8080/api"
    timeout_seconds: int = 30


class UploadConfig(BaseSettings):
    """Attachment upload configuration."""

    model_config = {"env_prefix": "MUNICIPAL_PORTAL_UPLOAD_"}

    endpoint: str = "http://localhost:3000/api/upload"
    max_files: int = 5
    max_file_bytes: int = 5 * 1024 * 1024
    allowed_content_types: list[str] = Field(
        default_factory=lambda: [
            "image/jpeg",
            "image/jpg",
            "image/png",
            "image/gif",
            "image/webp",
        ]
    )
    timeout_seconds: int = 30


class SyncConfig(BaseSettings):
    """Polling synchronization configuration."""

    model_config = {"env_prefix": "MUNICIPAL_PORTAL_SYNC_"}

    poll_interval_seconds: float = 15.0
    claim_poll_interval_seconds: float = 5.0
    max_backoff_seconds: float = 120.0


class CatalogConfig(BaseSettings):
    """Service catalog configuration."""

    model_config = {"env_prefix": "MUNICIPAL_PORTAL_CATALOG_"}

    path: str | None = None


class MessagingConfig(BaseSettings):
    """Claim messaging configuration."""

    model_config = {"env_prefix": "MUNICIPAL_PORTAL_MESSAGING_"}

    optimistic_echo: bool = False


class Settings(BaseSettings):
    """Root portal settings."""

    model_config = {"env_prefix": "MUNICIPAL_PORTAL_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    api: ApiConfig = Field(default_factory=ApiConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
