"""
Centralized settings for the Seva complaint backend.

Provides a lightweight wrapper around environment variables (with `.env`
support for local development) so the rest of the codebase can import a single
`get_settings()` helper when configuration is needed. This avoids ad-hoc calls
to `os.environ` spread across modules and keeps defaults consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os

from dotenv import dotenv_values


@dataclass(frozen=True)
class Settings:
    """Immutable view of application configuration."""

    # General
    environment: str
    log_level: str
    cors_allow_origins: tuple[str, ...]

    # Database
    database_url: str

    # Media storage
    storage_provider: str
    local_storage_path: str
    public_base_url: str
    media_prefix: str

    # S3 / object storage
    s3_bucket: str
    s3_region: str
    s3_endpoint: Optional[str]
    s3_use_ssl: bool
    s3_access_key_id: Optional[str]
    s3_secret_access_key: Optional[str]
    kms_key_id: Optional[str]
    cloudfront_domain: Optional[str]
    media_public_url: Optional[str]

    # Uploads
    max_upload_bytes: int
    image_max_width: int
    allow_svg_uploads: bool

    # Observability
    sentry_dsn: Optional[str]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"production", "prod"}


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_lookup(key: str, env: dict[str, str], default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key) or env.get(key) or default


def _async_database_url(url: str) -> str:
    # The engine is async-only; map sync driver URLs onto their async drivers.
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process."""

    env_path = Path(__file__).resolve().parents[1] / ".env"
    env_file = dotenv_values(str(env_path)) if env_path.exists() else {}

    origins = _env_lookup("CORS_ALLOW_ORIGINS", env_file, "*")

    return Settings(
        environment=_env_lookup("APP_ENV", env_file, "development"),
        log_level=_env_lookup("LOG_LEVEL", env_file, "INFO").upper(),
        cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        database_url=_async_database_url(
            _env_lookup("DATABASE_URL", env_file, "sqlite+aiosqlite:///./seva.db")
        ),
        storage_provider=_env_lookup("STORAGE_PROVIDER", env_file, "local").lower(),
        local_storage_path=_env_lookup("LOCAL_STORAGE_PATH", env_file, "./storage"),
        public_base_url=(_env_lookup("PUBLIC_BASE_URL", env_file, "") or "").rstrip("/"),
        media_prefix=_env_lookup("MEDIA_PREFIX", env_file, "seva-complaints").strip("/"),
        s3_bucket=_env_lookup("S3_BUCKET", env_file, "seva-complaints"),
        s3_region=_env_lookup("S3_REGION", env_file, "us-east-1"),
        s3_endpoint=_env_lookup("S3_ENDPOINT", env_file) or _env_lookup("S3_ENDPOINT_URL", env_file),
        s3_use_ssl=_as_bool(_env_lookup("S3_USE_SSL", env_file, "true"), True),
        s3_access_key_id=_env_lookup("S3_ACCESS_KEY_ID", env_file) or _env_lookup("S3_ACCESS_KEY", env_file),
        s3_secret_access_key=_env_lookup("S3_SECRET_ACCESS_KEY", env_file) or _env_lookup("S3_SECRET_KEY", env_file),
        kms_key_id=_env_lookup("KMS_KEY_ID", env_file),
        cloudfront_domain=_env_lookup("CLOUDFRONT_DOMAIN", env_file),
        media_public_url=_env_lookup("MEDIA_PUBLIC_URL", env_file),
        max_upload_bytes=int(_env_lookup("MAX_UPLOAD_MB", env_file, "20")) * 1024 * 1024,
        image_max_width=int(_env_lookup("IMAGE_MAX_WIDTH", env_file, "1920")),
        allow_svg_uploads=_as_bool(_env_lookup("ALLOW_SVG_UPLOADS", env_file, "false")),
        sentry_dsn=_env_lookup("SENTRY_DSN", env_file),
    )


__all__ = ["Settings", "get_settings"]
