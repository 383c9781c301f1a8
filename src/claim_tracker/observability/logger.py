"""Stderr logging keyed on claim number and actor.

stdout belongs to MCP stdio frames and CLI JSON, so every handler installed
here writes to stderr.

- ``claim_context`` sets the claim number and actor for the current thread.
- ``ClaimLogger`` stamps that context onto each record when it is logged.
- ``log_claim_event`` logs a named lifecycle event with its fields.
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

_CONTEXT_KEYS = ("claim_number", "actor")

_context = threading.local()


def _get_claim_context() -> dict[str, Any]:
    return getattr(_context, "claim_data", {})


def _set_claim_context(data: dict[str, Any]) -> None:
    _context.claim_data = data


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    """claim_number/actor from the record, else from the active claim_context."""
    active = _get_claim_context()
    found = {}
    for key in _CONTEXT_KEYS:
        value = getattr(record, key, None) or active.get(key)
        if value:
            found[key] = value
    return found


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        entry.update(_context_of(record))
        if getattr(record, "extra_data", None):
            entry["data"] = record.extra_data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``<time> <LEVEL> [claim=..., actor=...] <logger>: <message>``"""

    _LABELS = {"claim_number": "claim", "actor": "actor"}

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        ctx = _context_of(record)
        prefix = ", ".join(f"{self._LABELS[k]}={v}" for k, v in ctx.items())
        prefix = f" [{prefix}]" if prefix else ""

        message = record.getMessage()
        if getattr(record, "extra_data", None):
            message += f" | {record.extra_data}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return f"{timestamp} {record.levelname:8}{prefix} {record.name}: {message}"


class ClaimLogger(logging.LoggerAdapter):
    """Copies the active claim_context onto each record at log time.

    Values passed explicitly through ``extra`` win over the context.
    """

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        active = _get_claim_context()
        for key in _CONTEXT_KEYS:
            if extra.get(key) is None and active.get(key) is not None:
                extra[key] = active[key]
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, structured: bool | None = None) -> ClaimLogger:
    """Return a ClaimLogger whose logger has one stderr handler.

    Args:
        name: Logger name (typically __name__)
        structured: JSON lines if True, human-readable if False. None reads
            CLAIM_TRACKER_LOG_FORMAT ("json" or "human", default human).
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        if structured is None:
            structured = os.environ.get("CLAIM_TRACKER_LOG_FORMAT", "human").lower() == "json"
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter() if structured else HumanReadableFormatter())
        logger.addHandler(handler)

        log_level = os.environ.get("CLAIM_TRACKER_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, log_level, logging.INFO))
        logger.propagate = False

    return ClaimLogger(logger)


@contextmanager
def claim_context(
    claim_number: str | None = None,
    actor: str | None = None,
    **extra: Any,
):
    """Set claim number and actor for every log call inside the block.

    Usage:
        with claim_context(claim_number="CLM-2025-00001", actor="admin:<id>"):
            logger.info("Updating progress")
    """
    previous = _get_claim_context()
    _set_claim_context({"claim_number": claim_number, "actor": actor, **extra})
    try:
        yield
    finally:
        _set_claim_context(previous)


def log_claim_event(
    logger: logging.Logger | ClaimLogger,
    event: str,
    claim_number: str | None = None,
    level: int = logging.INFO,
    **data: Any,
) -> None:
    """Log a lifecycle event (e.g. "claim_submitted", "member_verified") with structured data."""
    message = f"[{event}]"
    if data:
        message += " " + ", ".join(f"{k}={v}" for k, v in data.items())
    logger.log(level, message, extra={"claim_number": claim_number, "extra_data": {"event": event, **data}})
