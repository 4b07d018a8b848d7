"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from travel_admin.domain.uploads import (
    DEFAULT_ALLOWED_TYPES,
    DEFAULT_MAX_BYTES,
    UploadConstraints,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    identity_api_base_url: str = "https://ai-driven-travel.onrender.com/api"
    app_base_url: str = "http://localhost:8000"
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    environment: str = _ENVIRONMENT
    session_store_path: str = ".travel_admin/session.json"
    upload_max_bytes: int = DEFAULT_MAX_BYTES
    upload_allowed_types: str | None = None
    upload_default_folder: str = "ethiopian-travel"
    upload_retry_attempts: int = 3
    upload_retry_backoff_seconds: float = 1.0
    api_read_retry_attempts: int = 3
    api_read_retry_backoff_seconds: float = 1.0
    auth_cookie_max_age_seconds: int = 60 * 60 * 24
    gallery_max_files: int = 10

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def upload_constraints(self) -> UploadConstraints:
        """Build upload limits from the configured values."""
        return UploadConstraints(
            max_bytes=self.upload_max_bytes,
            allowed_types=parse_allowed_types(self.upload_allowed_types),
        )


def parse_allowed_types(raw: str | None) -> frozenset[str]:
    """Parse a comma-separated MIME allow-list, falling back to the defaults."""
    if raw is None:
        return DEFAULT_ALLOWED_TYPES
    types: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value and "/" in value:
            types.add(value)
    return frozenset(types) or DEFAULT_ALLOWED_TYPES
