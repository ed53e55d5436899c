"""Pydantic models for the manager lifecycle.

- ManagerState: Lifecycle states of a managed manager instance
- ManagerSystemEvent: Structured log entry for manager events
"""

from __future__ import annotations

__all__ = [
    "ManagerState",
    "ManagerSystemEvent",
]

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ManagerState(str, Enum):
    """Lifecycle state of a manager owned by the LifecycleController.

    Transitions only move forward:
        CREATED -> RUNNING -> SHUTTING_DOWN -> STOPPED
    """

    CREATED = "created"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ManagerSystemEvent(BaseModel):
    """One manager system log entry.

    Used for INFO, WARNING, ERROR, and CRITICAL events related to key
    generation, certificate generation and the manager run lifecycle.

    Note: 'time' is None when created, populated by ISO8601Formatter during logging.
    """

    # --- core ---
    time: Optional[str] = Field(
        None,
        description="ISO 8601 timestamp (UTC), added by formatter during serialization",
    )
    event: Optional[str] = Field(
        None,
        description="Machine-friendly event name, e.g. 'manager_starting', 'cert_written'",
    )
    message: str = Field(description="Human-readable log message")

    # --- lifecycle context ---
    state: Optional[ManagerState] = Field(
        None,
        description="Manager state after the event",
    )
    path: Optional[str] = Field(
        None,
        description="File involved, e.g. 'cert.pem'",
    )

    # --- error details ---
    error_type: Optional[str] = Field(
        None,
        description="Exception class name, e.g. 'PermissionError'",
    )
    error_message: Optional[str] = Field(
        None,
        description="Short error text from exception",
    )

    # --- additional structured details ---
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context as key-value pairs",
    )

    model_config = ConfigDict(extra="allow")
