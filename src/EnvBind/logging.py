# === NAVMAP v1 ===
# {
#   "module": "EnvBind.logging",
#   "purpose": "Structured logging adapters and formatters used by EnvBind.",
#   "sections": [
#     {
#       "id": "structuredlogger",
#       "name": "StructuredLogger",
#       "anchor": "class-structuredlogger",
#       "kind": "class"
#     },
#     {
#       "id": "jsonformatter",
#       "name": "JSONFormatter",
#       "anchor": "class-jsonformatter",
#       "kind": "class"
#     },
#     {
#       "id": "get-logger",
#       "name": "get_logger",
#       "anchor": "function-get-logger",
#       "kind": "function"
#     },
#     {
#       "id": "configure-logging",
#       "name": "configure_logging",
#       "anchor": "function-configure-logging",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Structured logging utilities for the loader, doc collector and CLI.

Library modules obtain a :class:`StructuredLogger` through :func:`get_logger`
and attach context (``prefix``, ``key``, ``record``) as structured fields
rather than formatting it into the message. The library never installs
handlers on its own; the ``envbind`` CLI calls :func:`configure_logging` to
emit either console text or JSON lines on stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

__all__ = ["JSONFormatter", "StructuredLogger", "configure_logging", "get_logger"]

ROOT_LOGGER_NAME = "EnvBind"
_MANAGED_ATTR = "_envbind_managed"


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter that enriches structured logs with shared context."""

    def __init__(
        self, logger: logging.Logger, base_fields: Optional[Dict[str, Any]] = None
    ) -> None:
        """Store underlying logger and initial structured ``base_fields``."""

        super().__init__(logger, {})
        self.base_fields: Dict[str, Any] = dict(base_fields or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        """Merge adapter context into ``extra`` metadata for structured output."""

        extra = kwargs.setdefault("extra", {})
        fields = dict(self.base_fields)
        extra_fields = extra.get("extra_fields")
        if isinstance(extra_fields, dict):
            fields.update(extra_fields)
        extra["extra_fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs

    def child(self, **fields: object) -> "StructuredLogger":
        """Return an adapter that also attaches ``fields``; ``None`` values are dropped."""

        merged = dict(self.base_fields)
        merged.update((key, value) for key, value in fields.items() if value is not None)
        return StructuredLogger(self.logger, merged)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _ConsoleFormatter(logging.Formatter):
    """Plain console output with structured fields appended as ``k=v`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict) and extra_fields:
            pairs = " ".join(f"{key}={value}" for key, value in extra_fields.items())
            text = f"{text} [{pairs}]"
        return text


def get_logger(name: str) -> StructuredLogger:
    """Return a :class:`StructuredLogger` for ``name`` without touching handlers."""

    return StructuredLogger(logging.getLogger(name))


def configure_logging(level: str = "WARNING", fmt: str = "console") -> logging.Logger:
    """Install a stderr handler on the ``EnvBind`` logger hierarchy.

    Repeated calls replace the handler installed by a previous call instead of
    stacking duplicates.
    """

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_ATTR, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(_ConsoleFormatter("%(levelname)s: %(message)s"))
    setattr(handler, _MANAGED_ATTR, True)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
