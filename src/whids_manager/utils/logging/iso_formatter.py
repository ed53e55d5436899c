"""JSONL log formatting with ISO 8601 timestamps."""

from __future__ import annotations

__all__ = ["ISO8601Formatter"]

import json
import logging
from datetime import datetime, timezone


class ISO8601Formatter(logging.Formatter):
    """Formatter writing one JSON object per record, UTC timestamps first.

    Format: {"time": "YYYY-MM-DDTHH:MM:SS.sssZ", "level": "INFO", ...}

    Dict messages (structured events) are merged into the entry as-is;
    anything else becomes the "message" field.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line.

        Args:
            record: The log record to format.

        Returns:
            str: JSON-formatted log entry.
        """
        timestamp = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        if isinstance(record.msg, dict):
            payload = dict(record.msg)
        else:
            payload = {"message": record.getMessage()}

        if record.exc_info and "traceback" not in payload:
            payload["traceback"] = self.formatException(record.exc_info)

        entry = {"time": timestamp, "level": record.levelname, **payload}
        return json.dumps(entry, default=str)
