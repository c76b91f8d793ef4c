"""Configuration using Pydantic Settings.

Environment variables are loaded with the SELECTEST_ prefix, e.g.
SELECTEST_CACHE_DIR or SELECTEST_HASH_SEEDS='["xcode-16.1"]'.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "selectest"


class Settings(BaseSettings):
    """Settings loaded from environment variables and an optional .env file."""

    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="console for humans, json for CI log collectors"
    )

    cache_dir: Path = Field(
        default_factory=_default_cache_dir,
        description="Root directory of the local selective testing cache"
    )
    xcodebuild_command: str = Field(
        default="xcrun xcodebuild",
        description="Command used to invoke xcodebuild (split shell-style)"
    )
    hash_seeds: List[str] = Field(
        default_factory=list,
        description="Extra strings mixed into every target hash (toolchain, environment fingerprints)"
    )

    model_config = SettingsConfigDict(
        env_prefix="SELECTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
