"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    pathanatomy_env: str = "development"
    pathanatomy_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Build guard: confirmation required above this many source vertices
    vertex_warning_threshold: int = 120

    # "minimal" (anatomy + grid) or "extended" (adds construction layers)
    construction_profile: str = "extended"

    # Label font (whitespace is stripped before use)
    default_font: str = "ArialMT"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
