"""Logging utilities for id3kit.

This module provides a custom FIT log level and a context manager for
enabling/disabling id3kit logging with loguru.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) to
    prevent duplicate output when ``enable_logging()`` adds its own handler.
    If your application configures loguru handlers *before* importing id3kit,
    handler 0 may no longer be the default; in that case the removal is a
    no-op (the ``ValueError`` is suppressed).
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final

from loguru import logger

from id3kit.config import LogFormat, LoggingSettings, LogLevel

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

# Custom FIT level marks public training and encoding entry points.
FIT_LEVEL: Final[str] = "FIT"
FIT_LEVEL_NUMBER: Final[int] = 25  # Between INFO (20) and WARNING (30)

_SHORT_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
    "<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)
_FULL_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)


def _register_fit_level() -> None:
    """Register the FIT custom log level with loguru.

    If the level already exists with a different numeric value, emits a
    UserWarning because loguru does not permit changing it.
    """
    try:
        existing_level = logger.level(FIT_LEVEL)
    except ValueError:
        logger.level(FIT_LEVEL, no=FIT_LEVEL_NUMBER, icon="🌳")
    else:
        if existing_level.no != FIT_LEVEL_NUMBER:
            msg = f"FIT level already registered with numeric value {existing_level.no}, expected {FIT_LEVEL_NUMBER}"
            warnings.warn(msg, stacklevel=2)


_register_fit_level()


class LoggingHandle:
    """One stderr sink opened by `enable_logging`.

    id3kit records flow while any handle is open. Closing the last open handle
    turns the package logger off again, so nested `with enable_logging():`
    blocks around `train` calls leave logging exactly as they found it.

    Attributes:
        sink_id (int | None): The loguru sink this handle owns; `None` once closed.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     tree = train(dataset, target_index=4)
    """

    _open_sinks: ClassVar[set[int]] = set()
    _sinks_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, sink_id: int) -> None:
        self.sink_id: int | None = sink_id
        with LoggingHandle._sinks_lock:
            LoggingHandle._open_sinks.add(sink_id)

    @property
    def is_open(self) -> bool:
        """Whether this handle still owns its sink."""
        return self.sink_id is not None

    def disable(self) -> None:
        """Close the sink; closing an already closed handle does nothing."""
        with LoggingHandle._sinks_lock:
            if self.sink_id is None:
                return
            LoggingHandle._open_sinks.discard(self.sink_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.sink_id)
            self.sink_id = None
            if not LoggingHandle._open_sinks:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def open_count(cls) -> int:
        """Number of handles whose sinks are still open."""
        with cls._sinks_lock:
            return len(cls._open_sinks)


def enable_logging(
    *,
    level: LogLevel | None = None,
    log_format: LogFormat | None = None,
) -> LoggingHandle:
    """Enable id3kit logging on stderr.

    Each call opens its own sink. Close it with the returned handle, either
    through `disable()` or by leaving a `with` block.

    Args:
        level (LogLevel | None): Minimum log level to display. `"FIT"` surfaces
            the public discretize/train calls; `"DEBUG"` adds per-column layout
            fitting and per-node split selection. `None` falls back to
            `ID3KIT_LOG_LEVEL` (default `"FIT"`).
        log_format (LogFormat | None): `"short"` shows only the function name,
            `"full"` adds module and line. `None` falls back to
            `ID3KIT_LOG_FORMAT` (default `"short"`).

    Returns:
        LoggingHandle: The handle owning the new sink.
    """
    settings = LoggingSettings()
    resolved_level = level if level is not None else settings.log_level
    resolved_format = log_format if log_format is not None else settings.log_format

    logger.enable(PACKAGE_NAME)
    sink_id = logger.add(
        sys.stderr,
        level=resolved_level,
        filter=_is_id3kit_record,
        format=_SHORT_FORMAT if resolved_format == "short" else _FULL_FORMAT,
    )
    return LoggingHandle(sink_id)


def _is_id3kit_record(record: Record) -> bool:
    """Filter to pass all id3kit module records.

    Args:
        record (Record): The loguru Record object to filter.

    Returns:
        bool: True if the record is from the id3kit package, False otherwise.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
