"""Default manager collaborator: an HTTPS endpoint for collectors.

HTTPSManager implements the Manager protocol on top of uvicorn. It serves a
small FastAPI app:
- GET /health: liveness, unauthenticated
- GET /api/v1/ping: requires the collector API key in the Api-Key header

The collector protocol, detection engine and event storage are not part of
this package; this listener only proves the TLS material and API key work
end to end.
"""

from __future__ import annotations

__all__ = [
    "HTTPSManager",
    "create_manager_app",
]

import asyncio
import hmac
import logging
import threading
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, status

from whids_manager import __version__
from whids_manager.config import ManagerConfig
from whids_manager.constants import API_KEY_HEADER, APP_NAME
from whids_manager.manager.log_config import log_event
from whids_manager.manager.models import ManagerSystemEvent


def create_manager_app(api_key: str) -> FastAPI:
    """Create the FastAPI app served to collectors.

    Args:
        api_key: Key collectors must present in the Api-Key header.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title=APP_NAME,
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    expected = api_key.encode("utf-8")

    def require_api_key(provided: str | None = Header(None, alias=API_KEY_HEADER)) -> None:
        """Reject requests without the collector API key (constant-time compare)."""
        if provided is None or not hmac.compare_digest(provided.encode("utf-8"), expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing API key",
            )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/v1/ping", dependencies=[Depends(require_api_key)])
    async def ping() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


def _validate(config: ManagerConfig) -> None:
    """Check the fields this manager needs.

    Raises:
        ValueError: On the first invalid field.
    """
    if not config.host:
        raise ValueError("Manager host is not configured")
    if not 1 <= config.port <= 65535:
        raise ValueError(f"Manager port must be between 1 and 65535, got {config.port}")
    if not config.key:
        raise ValueError("Collector API key is not configured (generate one with --key)")
    if bool(config.tls.cert) != bool(config.tls.key):
        raise ValueError("TLS requires both tls.cert and tls.key")
    for label, value in (("certificate", config.tls.cert), ("key", config.tls.key)):
        if value and not Path(value).expanduser().is_file():
            raise ValueError(f"TLS {label} not found: {value}")


class HTTPSManager:
    """Manager serving collectors over HTTPS with uvicorn.

    run() drives uvicorn's serve loop on its own event loop (it is called
    from a worker thread), shutdown() flips uvicorn's exit flag, and wait()
    blocks until run() has returned.
    """

    def __init__(self, config: ManagerConfig) -> None:
        """Build the manager.

        Args:
            config: Validated manager configuration.

        Raises:
            ValueError: If host, port, key or TLS settings are unusable.
        """
        _validate(config)
        self.config = config
        self.app = create_manager_app(config.key)

        uvicorn_kwargs: dict[str, str] = {}
        if config.tls.cert and config.tls.key:
            uvicorn_kwargs["ssl_certfile"] = str(Path(config.tls.cert).expanduser())
            uvicorn_kwargs["ssl_keyfile"] = str(Path(config.tls.key).expanduser())
        else:
            log_event(
                logging.WARNING,
                ManagerSystemEvent(
                    event="tls_disabled",
                    message="Starting manager without TLS; collectors will connect in clear text",
                ),
            )

        self._server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=config.host,
                port=config.port,
                log_config=None,
                log_level="warning",
                **uvicorn_kwargs,
            )
        )
        self._shutdown_requested = threading.Event()
        self._stopped = threading.Event()

    def run(self) -> None:
        """Serve until shut down. Returns immediately if already shut down."""
        try:
            if self._shutdown_requested.is_set():
                return
            # _serve() skips uvicorn's own signal capture; SIGINT is
            # handled by the LifecycleController
            asyncio.run(self._server._serve())
        except SystemExit as e:
            # uvicorn exits the process when it cannot bind
            raise RuntimeError(
                f"Listener on {self.config.host}:{self.config.port} failed to start"
            ) from e
        finally:
            self._stopped.set()

    def shutdown(self) -> None:
        self._shutdown_requested.set()
        self._server.should_exit = True

    def wait(self) -> None:
        self._stopped.wait()
