"""Shared fixtures for whids-manager tests."""

from __future__ import annotations

import threading
from typing import Callable

import pytest

from whids_manager.config import ManagerConfig
from whids_manager.security.certgen import ECKey, RSAKey, generate_private_key


class FakeManager:
    """In-memory Manager collaborator recording how it was driven.

    By default run() blocks until shutdown() is called. With
    finish_on_own=True it returns immediately; with run_error set it raises.
    With a gate, run() is submitted but does not start until the gate opens.
    """

    def __init__(
        self,
        *,
        finish_on_own: bool = False,
        run_error: Exception | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.finish_on_own = finish_on_own
        self.run_error = run_error
        self.gate = gate
        self.run_calls = 0
        self.shutdown_calls = 0
        self.wait_calls = 0
        self.run_started = threading.Event()
        self._stop = threading.Event()
        self._stopped = threading.Event()

    def run(self) -> None:
        self.run_calls += 1
        if self.gate is not None:
            self.gate.wait()
        self.run_started.set()
        try:
            if self.run_error is not None:
                raise self.run_error
            if not self.finish_on_own:
                self._stop.wait()
        finally:
            self._stopped.set()

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self._stop.set()

    def wait(self) -> None:
        self.wait_calls += 1
        self._stopped.wait()


@pytest.fixture
def make_fake_manager() -> Callable[..., FakeManager]:
    """Factory for FakeManager instances."""
    return FakeManager


@pytest.fixture
def manager_config() -> ManagerConfig:
    """A complete, valid manager configuration without TLS."""
    return ManagerConfig(host="127.0.0.1", port=8000, key="a" * 64)


@pytest.fixture(scope="session")
def rsa_key() -> RSAKey:
    """One RSA-4096 key for the whole session (generation is slow)."""
    key = generate_private_key("rsa")
    assert isinstance(key, RSAKey)
    return key


@pytest.fixture
def ec_key() -> ECKey:
    """A fresh P-256 key (fast to generate)."""
    key = generate_private_key("ecdsa")
    assert isinstance(key, ECKey)
    return key
