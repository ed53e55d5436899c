"""Tests for the default HTTPS manager collaborator."""

from __future__ import annotations

import logging
import socket
import threading
import time
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from whids_manager.config import ManagerConfig, TLSConfig
from whids_manager.constants import API_KEY_HEADER
from whids_manager.manager.protocol import Manager
from whids_manager.manager.server import HTTPSManager, create_manager_app

API_KEY = "a" * 64


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


# ============================================================================
# App
# ============================================================================


class TestManagerApp:
    """create_manager_app route tests."""

    @pytest.fixture
    def client(self) -> TestClient:
        return TestClient(create_manager_app(API_KEY))

    def test_health_is_public(self, client: TestClient) -> None:
        # Act
        response = client.get("/health")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ping_without_key_is_rejected(self, client: TestClient) -> None:
        # Act
        response = client.get("/api/v1/ping")

        # Assert
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or missing API key"

    @pytest.mark.parametrize("key", ["", "b" * 64, "a" * 63, "a" * 65, "ä" * 64])
    def test_ping_with_wrong_key_is_rejected(self, client: TestClient, key: str) -> None:
        # Act
        response = client.get("/api/v1/ping", headers={API_KEY_HEADER: key.encode("utf-8")})

        # Assert
        assert response.status_code == 401

    def test_ping_with_key(self, client: TestClient) -> None:
        # Act
        response = client.get("/api/v1/ping", headers={API_KEY_HEADER: API_KEY})

        # Assert
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_docs_are_disabled(self, client: TestClient) -> None:
        # Act & Assert
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404


# ============================================================================
# Construction
# ============================================================================


class TestHTTPSManagerConstruction:
    """HTTPSManager validation tests."""

    def test_implements_manager_protocol(self, manager_config: ManagerConfig) -> None:
        # Act
        manager = HTTPSManager(manager_config)

        # Assert
        assert isinstance(manager, Manager)

    def test_warns_when_tls_disabled(self, manager_config: ManagerConfig) -> None:
        # Act
        with patch("whids_manager.manager.server.log_event") as mock_log_event:
            manager = HTTPSManager(manager_config)

        # Assert
        level, event = mock_log_event.call_args.args
        assert level == logging.WARNING
        assert event.event == "tls_disabled"
        assert manager._server.config.ssl_certfile is None

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"host": ""}, "host is not configured"),
            ({"port": 0}, "port must be between 1 and 65535"),
            ({"port": 70000}, "port must be between 1 and 65535"),
            ({"key": ""}, "API key is not configured"),
            ({"tls": TLSConfig(cert="cert.pem")}, "requires both tls.cert and tls.key"),
            ({"tls": TLSConfig(key="key.pem")}, "requires both tls.cert and tls.key"),
        ],
    )
    def test_rejects_unusable_config(
        self, manager_config: ManagerConfig, overrides: dict, message: str
    ) -> None:
        # Arrange
        config = manager_config.model_copy(update=overrides)

        # Act & Assert
        with pytest.raises(ValueError, match=message):
            HTTPSManager(config)

    def test_rejects_missing_tls_files(self, manager_config: ManagerConfig, tmp_path: Path) -> None:
        # Arrange
        config = manager_config.model_copy(
            update={"tls": TLSConfig(cert=str(tmp_path / "cert.pem"), key=str(tmp_path / "key.pem"))}
        )

        # Act & Assert
        with pytest.raises(ValueError, match="TLS certificate not found"):
            HTTPSManager(config)

    def test_serves_tls_with_both_files(self, manager_config: ManagerConfig, tmp_path: Path) -> None:
        # Arrange
        (tmp_path / "cert.pem").write_text("cert")
        (tmp_path / "key.pem").write_text("key")
        config = manager_config.model_copy(
            update={"tls": TLSConfig(cert=str(tmp_path / "cert.pem"), key=str(tmp_path / "key.pem"))}
        )

        # Act
        with patch("whids_manager.manager.server.log_event") as mock_log_event:
            manager = HTTPSManager(config)

        # Assert
        mock_log_event.assert_not_called()
        assert manager._server.config.ssl_certfile == str(tmp_path / "cert.pem")
        assert manager._server.config.ssl_keyfile == str(tmp_path / "key.pem")


# ============================================================================
# Run / Shutdown / Wait
# ============================================================================


class TestHTTPSManagerLifecycle:
    """HTTPSManager run/shutdown/wait tests."""

    def test_shutdown_before_run(self, manager_config: ManagerConfig) -> None:
        # Arrange
        manager = HTTPSManager(manager_config)

        # Act
        manager.shutdown()
        manager.run()
        manager.wait()

        # Assert
        assert manager._stopped.is_set()

    def test_serves_until_shutdown(self, manager_config: ManagerConfig) -> None:
        # Arrange
        port = _free_port()
        manager = HTTPSManager(manager_config.model_copy(update={"port": port}))
        thread = threading.Thread(target=manager.run, daemon=True)
        thread.start()

        # Act
        status = None
        deadline = time.monotonic() + 10
        while time.monotonic() < deadline:
            try:
                status = httpx.get(f"http://127.0.0.1:{port}/health", timeout=1).status_code
                break
            except httpx.TransportError:
                time.sleep(0.05)
        manager.shutdown()
        manager.wait()
        thread.join(timeout=10)

        # Assert
        assert status == 200
        assert not thread.is_alive()

    def test_bind_failure_raises(self, manager_config: ManagerConfig) -> None:
        # Arrange
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen()
            port = taken.getsockname()[1]
            manager = HTTPSManager(manager_config.model_copy(update={"port": port}))

            # Act & Assert
            with pytest.raises(RuntimeError, match="failed to start"):
                manager.run()

        manager.wait()
