"""
VidTube Core Settings.

Every value can be overridden through a ``VIDTUBE_``-prefixed environment
variable or a ``.env`` file next to the process.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        env_prefix="VIDTUBE_", case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "VidTube"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # ── Database ─────────────────────────────────────────────────────────
    db_host: str = "postgres"
    db_port: int = 5432
    db_user: str = "vidtube"
    db_password: str = "vidtube_secret"
    db_name: str = "vidtube"
    db_url_override: Optional[str] = None
    db_echo: bool = False

    @property
    def database_url(self) -> str:
        if self.db_url_override:
            return self.db_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Auth ─────────────────────────────────────────────────────────────
    access_token_secret: str = "change-me-access-secret"
    access_token_expire_minutes: int = 15
    refresh_token_secret: str = "change-me-refresh-secret"
    refresh_token_expire_days: int = 10
    jwt_algorithm: str = "HS256"
    cookie_secure: bool = True

    # ── Object storage (MinIO / S3) ──────────────────────────────────────
    storage_endpoint: str = "minio:9000"
    storage_access_key: str = "vidtube_minio"
    storage_secret_key: str = "vidtube_minio_secret"
    storage_bucket: str = "vidtube-media"
    storage_region: str = "us-east-1"
    storage_secure: bool = False
    storage_public_url: Optional[str] = None

    # ── Uploads ──────────────────────────────────────────────────────────
    max_video_size_mb: int = 100
    max_image_size_mb: int = 5
    allowed_video_types: List[str] = ["video/mp4", "video/webm", "video/ogg"]
    allowed_image_types: List[str] = [
        "image/jpeg", "image/jpg", "image/png", "image/webp",
    ]

    # ── Pagination ───────────────────────────────────────────────────────
    default_page_size: int = 10
    max_page_size: int = 100


@lru_cache()
def get_settings() -> Settings:
    return Settings()
