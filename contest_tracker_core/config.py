"""Process settings read from environment variables, and package log wiring.

Variables:
    APP_NAME, APP_VERSION: required
    APP_ENVIRONMENT: development (default), production or test
    DEBUG_ENABLED: 'true' / '1' forces DEBUG logging
    FLAG_THRESHOLD, COMMENT_MAX_LENGTH, COMMENT_PREVIEW_COUNT: integer limits
    LOG_LEVEL: package log level, INFO unless debug is enabled
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Literal, Mapping

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as SchemaError

from .errors import ConfigError
from .leaderboard import DEFAULT_FLAG_THRESHOLD
from .validation import COMMENT_MAX_LENGTH

Environment = Literal["development", "production", "test"]
ENVIRONMENTS: tuple[str, ...] = ("development", "production", "test")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_env_bool(value: str | None) -> bool:
    """'true' / '1' (any case) are true; everything else, including unset, is false."""
    if not value:
        return False
    return value.strip().lower() in ("true", "1")


def _required(environ: Mapping[str, str], key: str) -> str:
    value = environ.get(key)
    if value is None or not value.strip():
        raise ConfigError(f"Missing required environment variable: {key}")
    return value.strip()


class Settings(BaseModel):
    """Process configuration. Build once with ``from_env`` and pass it along."""

    app_name: str
    app_version: str
    environment: Environment = "development"
    debug_enabled: bool = False
    flag_threshold: int = Field(DEFAULT_FLAG_THRESHOLD, ge=1)
    comment_max_length: int = Field(COMMENT_MAX_LENGTH, ge=1, le=COMMENT_MAX_LENGTH)
    comment_preview_count: int = Field(3, ge=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {v}")
        return level

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        environment = env.get("APP_ENVIRONMENT", "development").strip()
        if environment not in ENVIRONMENTS:
            raise ConfigError(
                f"Invalid value for APP_ENVIRONMENT: {environment}. "
                f"Must be one of: {', '.join(ENVIRONMENTS)}"
            )

        app_name = _required(env, "APP_NAME")
        app_version = _required(env, "APP_VERSION")
        debug_enabled = parse_env_bool(env.get("DEBUG_ENABLED"))

        try:
            return cls(
                app_name=app_name,
                app_version=app_version,
                environment=environment,
                debug_enabled=debug_enabled,
                flag_threshold=int(env.get("FLAG_THRESHOLD", DEFAULT_FLAG_THRESHOLD)),
                comment_max_length=int(env.get("COMMENT_MAX_LENGTH", COMMENT_MAX_LENGTH)),
                comment_preview_count=int(env.get("COMMENT_PREVIEW_COUNT", "3")),
                log_level=env.get("LOG_LEVEL", "DEBUG" if debug_enabled else "INFO"),
            )
        except (SchemaError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def configure_logging(settings: Settings) -> None:
    """Route package logs to stdout.

    ``debug_enabled`` overrides ``log_level`` with DEBUG. Development runs also
    log the source location of each record.
    """
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if settings.is_development:
        fmt = "%(asctime)s %(levelname)s %(name)s [%(filename)s:%(lineno)d]: %(message)s"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    pkg_logger = logging.getLogger("contest_tracker_core")
    pkg_logger.handlers = [handler]
    pkg_logger.setLevel("DEBUG" if settings.debug_enabled else settings.log_level)
