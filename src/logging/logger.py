# src/logging/logger.py - v3
"""Logger factory with JSON and text formatters.

Every record carries the run context (tenant, module, run id, step) set by
the orchestrator, so interleaved runs for different tenants stay separable
in a shared log stream.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from convocache.logging.context import LogContext, get_context

ROOT_LOGGER = "convocache"

# HTTP client libraries log every request at INFO.
DEFAULT_QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable single-line formatter for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc)
        line = (
            f"{stamp:%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] {record.name}"
            f"{_scope(get_context())} - {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _scope(ctx: LogContext) -> str:
    """Render " [tenant/module] (step)" for whatever context is set."""
    scope = ""
    if ctx.tenant_id:
        target = f"{ctx.tenant_id}/{ctx.module}" if ctx.module else ctx.tenant_id
        scope += f" [{target}]"
    if ctx.step:
        scope += f" ({ctx.step})"
    return scope


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the convocache hierarchy."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
    quiet_loggers: Sequence[str] = DEFAULT_QUIET_LOGGERS,
) -> logging.Logger:
    """Configure the convocache logger hierarchy.

    Safe to call more than once: previous handlers are replaced.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Optional log file, rotated by size.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
        quiet_loggers: Third-party loggers capped at WARNING.

    Returns:
        The configured root convocache logger.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        from convocache.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            str(log_file), rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
