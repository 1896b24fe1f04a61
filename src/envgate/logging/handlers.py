"""Formatters for envgate log output.

Evaluator diagnostics attach the flag being evaluated, the current
environment and the caller's user id through ``extra=``. Both formatters
render those three attributes as first-class fields so a warning about an
unknown flag can be traced back to the lookup that caused it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Record attributes set by evaluator diagnostics, in output order
FLAG_FIELDS: tuple[str, ...] = ("flag", "environment", "user")

# Attributes every LogRecord has; anything else came from extra=
_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def flag_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the flag/environment/user attributes present on a record."""
    return {
        key: getattr(record, key)
        for key in FLAG_FIELDS
        if getattr(record, key, None) is not None
    }


class TextFormatter(logging.Formatter):
    """Plain text formatter that appends flag fields in brackets.

    Example:
        2026-01-01T00:00:00+0000 - envgate.evaluator - WARNING - Feature
        flag 'ghost' not found ... [flag=ghost environment=dev]
    """

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = flag_fields(record)
        if not fields:
            return text
        rendered = " ".join(f"{key}={value}" for key, value in fields.items())
        # Keep the suffix on the message line, ahead of any traceback
        head, sep, tail = text.partition("\n")
        return f"{head} [{rendered}]{sep}{tail}"


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Keys:
    - timestamp: ISO-8601 UTC
    - level: Log level name
    - logger: Logger name (omitted for the root logger)
    - flag, environment, user: Evaluation fields, when the record has them
    - message: Log message
    - context: Any other attributes passed through ``extra=``
    - exception: Formatted traceback, when present
    """

    def format(self, record: logging.LogRecord) -> str:
        record_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: dict[str, Any] = {
            "timestamp": record_time.isoformat(),
            "level": record.levelname,
        }
        if record.name and record.name != "root":
            log_entry["logger"] = record.name
        log_entry.update(flag_fields(record))
        log_entry["message"] = record.getMessage()

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
            and key not in FLAG_FIELDS
            and not key.startswith("_")
        }
        if context:
            log_entry["context"] = context

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)
