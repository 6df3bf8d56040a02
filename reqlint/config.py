"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Requirement Annotation Linter"

    # ── Corpus ───────────────────────────────────────────
    config_file_name: str = ".reqlint.json"
    includes_dir: str = "_includes"

    # ── Output ───────────────────────────────────────────
    output_format: str = "text"  # "text" | "json"
    fail_on: str = "error"  # "error" | "warning"

    # ── API ──────────────────────────────────────────────
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "REQLINT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
