"""Interface of the manager collaborator.

The manager itself (network listener, collector protocol, detection engine,
storage) lives outside this package. The lifecycle controller only needs
the narrow surface below.
"""

from __future__ import annotations

__all__ = [
    "Manager",
    "ManagerFactory",
]

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from whids_manager.config import ManagerConfig


@runtime_checkable
class Manager(Protocol):
    """A running manager, as seen by the LifecycleController.

    run() and wait() are called from one worker thread at a time, shutdown()
    possibly from another while run() is still blocking. Implementations must
    tolerate shutdown() being called before run() has started.
    """

    def run(self) -> None:
        """Serve until the manager stops on its own or is shut down."""
        ...

    def shutdown(self) -> None:
        """Request a graceful stop. Must not block until the stop completes."""
        ...

    def wait(self) -> None:
        """Block until the manager has fully stopped."""
        ...


# Builds a manager from a validated configuration; raises on failure
ManagerFactory = Callable[["ManagerConfig"], Manager]
