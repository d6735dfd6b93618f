"""Structured JSON logging configuration.

Configures Python logging to emit JSON-formatted entries with the fields
timestamp, level, logger and message. Request fields (url, method, status,
duration_ms) and fallback fields (operation, fallback_reason) are added when
a log call passes them via ``extra``.

SECURITY: Never logs signatures, signed messages or auth headers. Anything
that looks like one is redacted before output.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

# Patterns that should be redacted from log output
_SENSITIVE_PATTERNS = re.compile(
    r"(x.signature|x.message|signature|signed.message|authorization|token|secret|password)"
    r"[\s]*[=:]\s*\S+",
    re.IGNORECASE,
)

_EXTRA_FIELDS = ("url", "method", "status", "duration_ms", "operation")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
        }

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if hasattr(record, "fallback_reason"):
            entry["fallback_reason"] = self._sanitize(str(getattr(record, "fallback_reason")))

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove sensitive values from log text."""
        return _SENSITIVE_PATTERNS.sub("[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
