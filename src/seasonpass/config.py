"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings

from seasonpass.models.constants import PLATFORM_ORIGIN

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """seasonpass service configuration.

    All values can be overridden via environment variables or .env file.
    Season data, the stale interval and the reload debounce are compiled in
    (see ``seasonpass.models.constants``) and are not configurable here.
    """

    # Storage
    database_url: str = "sqlite+aiosqlite:///seasonpass.db"

    # Environment
    seasonpass_env: str = "development"

    # Platform the extension intercepts
    seasonpass_platform_origin: str = PLATFORM_ORIGIN

    # Logging
    seasonpass_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @field_validator("seasonpass_platform_origin")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        """Origins are joined with absolute paths, so drop any trailing slash."""
        return value.rstrip("/")

    @field_validator("seasonpass_log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            msg = f"Unknown log level {value!r}. Valid values: {sorted(VALID_LOG_LEVELS)}"
            raise ValueError(msg)
        return level

