"""Global settings loaded from environment variables via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LINKSAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rules_path: str = ""  # empty = bundled rules.yaml
    max_redirect_depth: int = 5
    batch_workers: int = 4
    log_dir: str = ""  # empty = no JSON log file
    log_level: str = "WARNING"
