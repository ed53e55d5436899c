"""Run lifecycle of the manager process.

The LifecycleController builds the manager from the loaded configuration,
runs it, and coordinates a graceful stop:

    CREATED -> RUNNING -> SHUTTING_DOWN -> STOPPED

Two activities run concurrently:
- the manager's run loop, an opaque blocking call executed in a worker thread
- an interrupt listener task waiting for SIGINT

Whichever finishes first decides the exit path. An interrupt asks the manager
to shut down (exactly once); the run loop returning on its own moves straight
to SHUTTING_DOWN. In both cases the controller then blocks on the manager's
wait() until it reports a full stop. There is no timeout: stopping is
cooperative and can block as long as the manager takes.

A second interrupt while a shutdown is already in progress is logged and
ignored. Cancelling run() (asyncio.run does so on Ctrl+C where no SIGINT
handler could be installed) also shuts the manager down and waits for it
before the cancellation propagates.
"""

from __future__ import annotations

__all__ = [
    "LifecycleController",
    "ManagerHandle",
]

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from whids_manager.exceptions import ManagerConstructionError, ManagerRuntimeError
from whids_manager.manager.log_config import log_event
from whids_manager.manager.models import ManagerState, ManagerSystemEvent

if TYPE_CHECKING:
    from whids_manager.config import ManagerConfig
    from whids_manager.manager.protocol import Manager, ManagerFactory

# Allowed forward transitions
_TRANSITIONS: dict[ManagerState, ManagerState] = {
    ManagerState.CREATED: ManagerState.RUNNING,
    ManagerState.RUNNING: ManagerState.SHUTTING_DOWN,
    ManagerState.SHUTTING_DOWN: ManagerState.STOPPED,
}


class ManagerHandle:
    """A constructed manager and its lifecycle state.

    Owned by exactly one LifecycleController for the process lifetime.
    """

    def __init__(self, manager: "Manager") -> None:
        self.manager = manager
        self._state = ManagerState.CREATED

    @property
    def state(self) -> ManagerState:
        return self._state

    def transition(self, new_state: ManagerState) -> None:
        """Move to the next lifecycle state.

        Args:
            new_state: State to enter; must directly follow the current one.

        Raises:
            RuntimeError: If the transition skips or reverses a state.
        """
        if _TRANSITIONS.get(self._state) is not new_state:
            raise RuntimeError(
                f"Invalid manager state transition: {self._state.value} -> {new_state.value}"
            )
        self._state = new_state


class LifecycleController:
    """Builds, runs and stops the manager.

    Holds everything the run needs (configuration, manager handle, interrupt
    event) as instance state; nothing is shared at module level.

    Example:
        controller = LifecycleController(HTTPSManager)
        asyncio.run(controller.run(config))
    """

    def __init__(self, factory: "ManagerFactory") -> None:
        """Initialize the controller.

        Args:
            factory: Builds a manager from a validated configuration.
        """
        self._factory = factory
        self._config: "ManagerConfig | None" = None
        self._handle: ManagerHandle | None = None
        self._interrupted: asyncio.Event | None = None
        self._shutdown_requested = False

    @property
    def config(self) -> "ManagerConfig | None":
        return self._config

    @property
    def handle(self) -> ManagerHandle | None:
        return self._handle

    @property
    def state(self) -> ManagerState | None:
        """Current manager state, or None before start()."""
        return self._handle.state if self._handle is not None else None

    def start(self, config: "ManagerConfig") -> ManagerHandle:
        """Construct the manager from configuration.

        Args:
            config: Validated manager configuration.

        Returns:
            Handle in state CREATED.

        Raises:
            ManagerConstructionError: If the factory fails (message kept verbatim).
            RuntimeError: If this controller already started a manager.
        """
        if self._handle is not None:
            raise RuntimeError("Manager already started by this controller")

        try:
            manager = self._factory(config)
        except Exception as e:
            raise ManagerConstructionError(str(e)) from e

        self._config = config
        self._handle = ManagerHandle(manager)
        log_event(
            logging.INFO,
            ManagerSystemEvent(
                event="manager_created",
                message=f"Manager created for {config.host}:{config.port}",
                state=self._handle.state,
            ),
        )
        return self._handle

    def interrupt(self) -> None:
        """Deliver an interrupt to the running manager.

        Installed as the SIGINT handler on the event loop; may also be called
        directly from the loop thread. Only the first call has an effect.
        """
        if self._interrupted is None or self.state is ManagerState.STOPPED:
            log_event(
                logging.WARNING,
                ManagerSystemEvent(
                    event="shutdown_signal_ignored",
                    message="Received SIGINT but no manager is running",
                ),
            )
            return

        if self._interrupted.is_set():
            log_event(
                logging.WARNING,
                ManagerSystemEvent(
                    event="shutdown_signal_ignored",
                    message="Received SIGINT again, shutdown already in progress",
                    state=self.state,
                ),
            )
            return

        log_event(
            logging.INFO,
            ManagerSystemEvent(
                event="shutdown_signal_received",
                message="Received SIGINT, shutting the manager down properly",
                state=self.state,
            ),
        )
        self._interrupted.set()

    async def run(self, config: "ManagerConfig") -> None:
        """Start the manager and block until it has fully stopped.

        Args:
            config: Validated manager configuration.

        Raises:
            ManagerConstructionError: If the manager cannot be constructed.
            ManagerRuntimeError: If the manager's run loop or shutdown raised.
        """
        handle = self.start(config)
        loop = asyncio.get_running_loop()
        self._interrupted = asyncio.Event()
        sigint_registered = self._subscribe_interrupt(loop)

        handle.transition(ManagerState.RUNNING)
        log_event(
            logging.INFO,
            ManagerSystemEvent(
                event="manager_running",
                message="Manager running, press Ctrl+C to stop",
                state=handle.state,
            ),
        )

        listener = asyncio.create_task(self._listen_for_interrupt())
        run_error: Exception | None = None
        try:
            try:
                await asyncio.to_thread(handle.manager.run)
            except asyncio.CancelledError:
                # The worker thread outlives the cancelled await
                log_event(
                    logging.WARNING,
                    ManagerSystemEvent(
                        event="manager_run_cancelled",
                        message="Manager run cancelled, shutting the manager down",
                        state=handle.state,
                    ),
                )
                await asyncio.shield(self._request_shutdown("run cancelled"))
                await asyncio.shield(asyncio.to_thread(handle.manager.wait))
                handle.transition(ManagerState.STOPPED)
                log_event(
                    logging.INFO,
                    ManagerSystemEvent(
                        event="manager_stopped",
                        message="Manager stopped",
                        state=handle.state,
                    ),
                )
                raise
            except Exception as e:
                run_error = e
                log_event(
                    logging.ERROR,
                    ManagerSystemEvent(
                        event="manager_run_failed",
                        message=f"Manager run loop failed: {e}",
                        error_type=type(e).__name__,
                        error_message=str(e),
                    ),
                )
            else:
                log_event(
                    logging.INFO,
                    ManagerSystemEvent(
                        event="manager_run_returned",
                        message="Manager run loop returned",
                    ),
                )

            if handle.state is ManagerState.RUNNING:
                handle.transition(ManagerState.SHUTTING_DOWN)

            # A failed run loop may still hold resources
            if run_error is not None:
                await self._request_shutdown("run loop failed")

            await asyncio.to_thread(handle.manager.wait)
            handle.transition(ManagerState.STOPPED)
            log_event(
                logging.INFO,
                ManagerSystemEvent(
                    event="manager_stopped",
                    message="Manager stopped",
                    state=handle.state,
                ),
            )
        finally:
            listener.cancel()
            try:
                await listener
            except asyncio.CancelledError:
                pass
            if sigint_registered:
                loop.remove_signal_handler(signal.SIGINT)

        if run_error is not None:
            raise ManagerRuntimeError(f"Manager run loop failed: {run_error}") from run_error

    def _subscribe_interrupt(self, loop: asyncio.AbstractEventLoop) -> bool:
        """Route SIGINT to interrupt(). Returns False where unsupported."""
        try:
            loop.add_signal_handler(signal.SIGINT, self.interrupt)
        except (NotImplementedError, RuntimeError, ValueError) as e:
            # Windows loops, or not running in the main thread
            log_event(
                logging.WARNING,
                ManagerSystemEvent(
                    event="sigint_handler_not_available",
                    message="SIGINT handler could not be installed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
            return False
        return True

    async def _listen_for_interrupt(self) -> None:
        """Wait for the first interrupt, then ask the manager to stop."""
        assert self._interrupted is not None
        await self._interrupted.wait()
        await self._request_shutdown("interrupt")

    async def _request_shutdown(self, reason: str) -> None:
        """Invoke the manager's shutdown at most once.

        Raises:
            ManagerRuntimeError: If the manager's shutdown raised.
        """
        handle = self._handle
        if handle is None or self._shutdown_requested:
            return
        self._shutdown_requested = True

        if handle.state is ManagerState.RUNNING:
            handle.transition(ManagerState.SHUTTING_DOWN)
        log_event(
            logging.INFO,
            ManagerSystemEvent(
                event="manager_shutting_down",
                message=f"Shutting the manager down ({reason})",
                state=handle.state,
            ),
        )

        try:
            await asyncio.to_thread(handle.manager.shutdown)
        except Exception as e:
            log_event(
                logging.ERROR,
                ManagerSystemEvent(
                    event="manager_shutdown_failed",
                    message=f"Manager shutdown failed: {e}",
                    error_type=type(e).__name__,
                    error_message=str(e),
                ),
            )
            raise ManagerRuntimeError(f"Manager shutdown failed: {e}") from e
