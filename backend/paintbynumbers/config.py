"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    pbn_env: str = "development"
    pbn_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Clustering
    pbn_sample_size: int = 30000
    pbn_oversample_factor: int = 5
    pbn_max_candidates: int = 50
    pbn_max_iterations: int = 30
    pbn_random_seed: int | None = None

    # Rendering
    pbn_label_font_size: int = 8

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
