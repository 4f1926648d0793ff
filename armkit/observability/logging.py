"""Logging setup for armkit.

armkit modules log through ``logging.getLogger(__name__)`` under the
``armkit`` namespace and never configure handlers themselves. Applications
that want armkit's output formatted can call :func:`configure_logging`:

- JSON-formatted output for machine consumption
- Human-readable colored output for development
- Context fields bound with :func:`log_context` (propagated via ContextVar,
  so they follow asyncio tasks)
- Bearer tokens and secrets redacted before records are emitted

Example:
    Basic usage::

        from armkit.observability.logging import configure_logging, log_context

        configure_logging(level="DEBUG", json_format=True)

        with log_context(correlation_id="abc-123"):
            profile.refresh()  # pipeline logs carry correlation_id

Per-record structured data is passed through ``extra``::

    logger.info("Commit finished", extra={"structured_data": {"calls": 3}})
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "armkit"

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar("armkit_log_context", default=None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Attributes:
        include_location: Whether to include file/line/function in output.
        timestamp_format: Format for timestamp ('iso', 'unix', or strftime format).
        extra_fields: Additional fields to include in every log record.
    """

    def __init__(
        self,
        include_location: bool = False,
        timestamp_format: str = "iso",
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_location = include_location
        self.timestamp_format = timestamp_format
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {}

        if self.timestamp_format == "iso":
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()
        elif self.timestamp_format == "unix":
            log_data["timestamp"] = time.time()
        else:
            log_data["timestamp"] = self.formatTime(record, self.timestamp_format)

        log_data["level"] = record.levelname.lower()
        log_data["message"] = record.getMessage()
        log_data["logger"] = record.name

        if self.include_location:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        context = _context_fields.get()
        if context:
            log_data["context"] = dict(context)

        structured_data = getattr(record, "structured_data", None)
        if structured_data:
            log_data["data"] = dict(structured_data)

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in self.extra_fields.items():
            if key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            level = f"{color}{record.levelname:8}{self.RESET}"
        else:
            level = f"{record.levelname:8}"

        base = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        context = _context_fields.get()
        if context:
            base += f" | context={json.dumps(dict(context), default=str)}"

        structured_data = getattr(record, "structured_data", None)
        if structured_data:
            base += f" | data={json.dumps(structured_data, default=str)}"

        if record.exc_info:
            base += f"\n{self.formatException(record.exc_info)}"

        return base


class SensitiveDataFilter(logging.Filter):
    """Logging filter that redacts credentials from log records."""

    DEFAULT_PATTERNS = [
        (
            re.compile(r"(bearer|basic)\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
            r"\1 ***REDACTED***",
        ),
        (
            re.compile(
                r"(token|client_secret|secret|password)[\'\"]?\s*[:=]\s*[\'\"]?([^\s\'\",}]+)",
                re.IGNORECASE,
            ),
            r"\1=***REDACTED***",
        ),
    ]

    def __init__(
        self,
        additional_patterns: list[tuple[re.Pattern[str], str]] | None = None,
        custom_redactor: Callable[[str], str] | None = None,
    ) -> None:
        super().__init__()
        self.patterns = list(self.DEFAULT_PATTERNS)
        self.custom_redactor = custom_redactor
        if additional_patterns:
            self.patterns.extend(additional_patterns)

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self.redact(v) if isinstance(v, str) else v for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self.redact(arg) if isinstance(arg, str) else arg for arg in record.args
                )

        return True

    def redact(self, message: str) -> str:
        """Redact sensitive patterns from a message."""
        if self.custom_redactor:
            message = self.custom_redactor(message)
        for pattern, replacement in self.patterns:
            message = pattern.sub(replacement, message)
        return message


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    include_location: bool = False,
    extra_fields: dict[str, Any] | None = None,
    stream: Any | None = None,
) -> logging.Logger:
    """Configure the ``armkit`` logger hierarchy.

    Args:
        level: Minimum log level.
        json_format: Use JSON format for output.
        include_location: Include file/line/function in output.
        extra_fields: Static fields to include in every log record.
        stream: Output stream (defaults to sys.stderr).

    Returns:
        The configured ``armkit`` root logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.addFilter(SensitiveDataFilter())

    if json_format:
        formatter: logging.Formatter = StructuredFormatter(
            include_location=include_location,
            extra_fields=extra_fields,
        )
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to every armkit log record emitted inside the block.

    Example:
        >>> with log_context(correlation_id="abc-123"):
        ...     client.traffic_manager_profiles.list()
    """
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)


def get_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    current = _context_fields.get()
    return dict(current) if current else {}
