"""
Configuration management for the codex runtime.
Uses pydantic-settings for environment-based configuration.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CODEX_",
        env_file=".env",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Codex Runtime"

    # Logging
    log_level: str = "INFO"

    # Codex document (None means the bundled reference codex)
    codex_path: Optional[str] = None

    # Raise on an invalid codex when opening a session instead of proceeding
    strict_validation: bool = False


settings = Settings()
