"""Manager logging configuration.

Owns the whids-manager logger configuration (handlers, formatters).
Other modules get their own logger reference via:
    _logger = logging.getLogger(APP_NAME)

Python loggers are singletons by name, so all modules share the same
logger instance. This module owns the configuration; others just call
log_event().
"""

from __future__ import annotations

__all__ = [
    "configure_manager_logging",
    "log_event",
]

import logging
import sys
from pathlib import Path

from whids_manager.config import ManagerConfig
from whids_manager.constants import APP_NAME
from whids_manager.manager.models import ManagerSystemEvent
from whids_manager.utils.file_helpers import set_secure_permissions
from whids_manager.utils.logging.iso_formatter import ISO8601Formatter

# stderr only until a config with a logfile is loaded
_logger = logging.getLogger(APP_NAME)
_logger.setLevel(logging.INFO)
_logger.propagate = False


class _StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever sys.stderr is at emit time."""

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value: object) -> None:
        pass


class _ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


if not _logger.handlers:
    _stderr_handler = _StderrHandler()
    _stderr_handler.setFormatter(_ConsoleFormatter())
    _logger.addHandler(_stderr_handler)


def configure_manager_logging(config: ManagerConfig) -> None:
    """Attach a JSONL file handler when the config names a logfile.

    Sets up:
    - stderr handler: INFO+ for the operator running the manager
    - file handler: INFO+ as JSONL with ISO 8601 timestamps (if logfile set)

    Calling it again replaces previously configured handlers.

    Args:
        config: Manager configuration.
    """
    for handler in _logger.handlers:
        handler.close()
    _logger.handlers.clear()

    stderr_handler = _StderrHandler()
    stderr_handler.setLevel(logging.INFO)
    stderr_handler.setFormatter(_ConsoleFormatter())
    _logger.addHandler(stderr_handler)

    if not config.logfile:
        return

    log_path = Path(config.logfile).expanduser()
    file_handler: logging.FileHandler | None = None
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        set_secure_permissions(log_path)
    except OSError as e:
        if file_handler is not None:
            file_handler.close()
        # stderr still works
        log_event(
            logging.WARNING,
            ManagerSystemEvent(
                event="file_logging_failed",
                message=f"Failed to configure file logging to {log_path}",
                path=str(log_path),
                error_type=type(e).__name__,
                error_message=str(e),
            ),
        )
        return

    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(ISO8601Formatter())
    _logger.addHandler(file_handler)


def log_event(level: int, event: ManagerSystemEvent) -> None:
    """Log a ManagerSystemEvent at the specified level.

    Serializes the event to a dict (excluding None values) and logs it.

    Args:
        level: Logging level (e.g., logging.INFO, logging.WARNING).
        event: The event to log.
    """
    _logger.log(level, event.model_dump(mode="json", exclude_none=True))
