"""Application configuration."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and SVGMOTION_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="SVGMOTION_", env_file=".env", env_file_encoding="utf-8")

    default_duration_ms: float = Field(default=5000, gt=0)
    frame_ms: float = Field(default=16.67, gt=0)
    log_level: str = "INFO"
    id_prefix: str = "path"


settings = Settings()
