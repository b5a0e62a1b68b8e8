"""Centralized configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings sourced from .env / environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────
    claims_env: str = "development"
    claims_log_level: str = "INFO"

    # ── Database ─────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///data/claims_portal.db"
    database_echo: bool = False
    seed_sample_data: bool = True

    # ── Attachments ──────────────────────────────────────────────────
    uploads_dir: str = "uploads"
    public_base_url: str = Field(
        default="http://localhost:3056/uploads",
        validation_alias=AliasChoices("claims_public_base_url", "public_base_url"),
    )
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Derived ──────────────────────────────────────────────────────
    @property
    def uploads_path(self) -> Path:
        """Return the uploads directory, creating it if needed."""
        path = Path(self.uploads_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def is_production(self) -> bool:
        return self.claims_env == "production"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the singleton Settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
