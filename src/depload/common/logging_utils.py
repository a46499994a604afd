"""Centralized logging helpers.

Components log through module loggers and attach structured fields with
``extra=extra_context(...)``. ``configure_logging`` is called once by the CLI;
library users keep whatever logging setup their host already has.
"""
from __future__ import annotations

import logging
import os
import time
import urllib.parse
from typing import Any, Dict, Optional

from depload.constants import Constants

ENV_LOG_LEVEL = "DEPLOAD_LOG_LEVEL"
ENV_LOG_FORMAT = "DEPLOAD_LOG_FORMAT"

_CONTEXT_KEYS = (
    "event",
    "component",
    "action",
    "outcome",
    "target",
    "package_id",
    "version",
    "source",
    "duration_ms",
    "status_code",
    "count",
)


class _ContextFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Guarantee context attributes exist so format strings never fail."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in _CONTEXT_KEYS:
            if not hasattr(record, key):
                setattr(record, key, None)
        return True


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger for CLI use.

    Args:
        level: Level name; falls back to DEPLOAD_LOG_LEVEL, then INFO.
        log_file: Optional file to log to instead of stderr.
    """
    level_name = (level or os.environ.get(ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    fmt = os.environ.get(ENV_LOG_FORMAT) or Constants.LOG_FORMAT

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(_ContextFilter())
    root.addHandler(handler)
    root.setLevel(level_value)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log fields, dropping None values."""
    return {k: v for k, v in kwargs.items() if v is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from this logger would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def safe_url(url: str) -> str:
    """Strip credentials and query strings from a URL before logging it."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urllib.parse.urlunsplit((parts.scheme, host, parts.path, "", ""))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed time so far (or total, once the block has exited)."""
        if self._start is None:
            return 0
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
