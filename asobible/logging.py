"""
Structured Logging - JSON Output for Production

Every engine log line can carry the audit scope it was produced for
(vertical, market, organization, app) plus cache and fallback state, so
a single request can be followed through detection, pattern loading,
merging and leak detection.

Usage:
    from asobible.logging import get_logger, scope_context
    logger = get_logger("rulesets")
    logger.info("Rule set merged", extra=scope_context("finance", "us", cache="miss"))
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional


LOG_LEVEL = os.getenv("ASOBIBLE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("ASOBIBLE_LOG_FORMAT", "json")  # "json" or "text"

SCOPE_FIELDS = ("vertical", "market", "organization_id", "app_id")

_EXTRA_FIELDS = SCOPE_FIELDS + (
    "pattern_count", "fallback_mode", "cache", "warnings_count", "pattern",
    "source", "error", "error_type", "duration_ms", "status_code", "method", "path",
)


def scope_context(
    vertical: Optional[str] = None,
    market: Optional[str] = None,
    organization_id: Optional[str] = None,
    app_id: Optional[str] = None,
    **fields: Any,
) -> dict[str, Any]:
    """Build the ``extra`` dict for a log call about one audit scope.

    Unset scope members are omitted rather than logged as null.
    """
    scope = dict(zip(SCOPE_FIELDS, (vertical, market, organization_id, app_id)))
    context = {k: v for k, v in scope.items() if v is not None}
    context.update(fields)
    return context


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: getattr(record, key)
        for key in _EXTRA_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, known extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_record_fields(record),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development. Scope fields trail the message."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        scope = [f"{k}={getattr(record, k)}" for k in SCOPE_FIELDS
                 if getattr(record, k, None) is not None]
        return f"{line} [{' '.join(scope)}]" if scope else line


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """Configure the ``asobible`` logger. Arguments override the environment."""
    root = logging.getLogger("asobible")
    root.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if (fmt or LOG_FORMAT) == "json" else TextFormatter())
    root.addHandler(handler)

    # Per-request access lines come from our own middleware
    for noisy in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"asobible.{name}")
