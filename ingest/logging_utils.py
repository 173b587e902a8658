"""Logging setup and structured event helper for the projection pipeline."""

from __future__ import annotations

import json
import logging
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Configure root logging once; log records go to stderr."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _format_value(value: Any) -> str:
    # Tuples become JSON arrays, unknown objects their str().
    return json.dumps(value, default=str)


def log_event(
    logger: logging.Logger,
    event: str,
    message: str,
    *,
    level: str = "info",
    **fields: Any,
) -> None:
    """Emit `[event] message key=value ...` at `level`.

    Fields set to None are dropped; the rest are rendered in key order with
    JSON-encoded values and attached to the record as `record.fields`.
    """
    kept = {key: fields[key] for key in sorted(fields) if fields[key] is not None}
    line = f"[{event}] {message}"
    if kept:
        line += " " + " ".join(f"{key}={_format_value(value)}" for key, value in kept.items())

    emit = getattr(logger, level, logger.info)
    emit(line, extra={"event": event, "fields": kept})
