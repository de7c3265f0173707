"""Engine settings using Pydantic Settings.

All values can be overridden with LIFECYCLE_* environment variables or a
local .env file.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class EngineSettings(BaseSettings):
    """Lifecycle engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="LIFECYCLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")
    scoring_rules_path: Optional[Path] = Field(
        default=None,
        description="YAML file overriding the bundled lead scoring rules",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level


@lru_cache
def get_settings() -> EngineSettings:
    """
    Get cached engine settings instance.

    Returns:
        EngineSettings: Cached settings loaded from environment.
    """
    return EngineSettings()
