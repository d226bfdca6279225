"""Environment-backed settings for id3kit."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "FIT",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]


class LoggingSettings(BaseSettings):
    """Default logging configuration, read from `ID3KIT_*` environment variables.

    Attributes:
        log_level (LogLevel): Minimum level shown by `enable_logging()` when no
            explicit level is given. Read from `ID3KIT_LOG_LEVEL`.
        log_format (LogFormat): Log line layout used by `enable_logging()` when
            no explicit format is given. Read from `ID3KIT_LOG_FORMAT`.

    Examples:
        >>> LoggingSettings(log_level="DEBUG").log_level
        'DEBUG'
    """

    model_config = SettingsConfigDict(env_prefix="ID3KIT_", extra="ignore")

    log_level: LogLevel = Field(default="FIT", description="Minimum log level shown by enable_logging().")
    log_format: LogFormat = Field(default="short", description="Log line layout: 'short' or 'full'.")
