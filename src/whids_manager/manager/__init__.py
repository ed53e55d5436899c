"""Manager run lifecycle.

- protocol.py: Interface of the manager collaborator (run, shutdown, wait)
- lifecycle.py: LifecycleController and ManagerHandle state machine
- server.py: Default HTTPS manager collaborator (FastAPI + uvicorn)
- log_config.py: Manager logger configuration and structured events
- models.py: ManagerState and ManagerSystemEvent

Lifecycle:
    CREATED -> RUNNING -> SHUTTING_DOWN -> STOPPED
"""

from .lifecycle import LifecycleController, ManagerHandle
from .models import ManagerState, ManagerSystemEvent
from .protocol import Manager, ManagerFactory

__all__ = [
    "LifecycleController",
    "Manager",
    "ManagerFactory",
    "ManagerHandle",
    "ManagerState",
    "ManagerSystemEvent",
]
