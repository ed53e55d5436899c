"""Custom exceptions for whids-manager.

All errors raised by this package derive from WhidsManagerError and carry
the process exit code the CLI uses when the error reaches it. Nothing below
the CLI terminates the process; errors propagate up to cli.main, which owns
the decision to exit.

Configuration Errors:
    - ConfigurationError: Config file cannot be opened, read, or parsed

Certificate Generation Errors:
    - CertGenError: Missing hosts, key generation, signing or file I/O failure
    - KeyMarshalError: Private key cannot be encoded (exit code 2)

Manager Lifecycle Errors:
    - ManagerConstructionError: Manager collaborator could not be built
    - ManagerRuntimeError: Manager run loop failed

Usage:
    from whids_manager.exceptions import CertGenError, ConfigurationError
"""

from __future__ import annotations

__all__ = [
    "CertGenError",
    "ConfigurationError",
    "KeyMarshalError",
    "ManagerConstructionError",
    "ManagerRuntimeError",
    "WhidsManagerError",
]

from pathlib import Path

from whids_manager.constants import EXIT_FAILURE, EXIT_KEY_MARSHAL_FAILURE


class WhidsManagerError(Exception):
    """Base class for all fatal whids-manager errors.

    Attributes:
        exit_code: Process exit code used by the CLI boundary.
    """

    exit_code: int = EXIT_FAILURE


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(WhidsManagerError):
    """Raised when the manager configuration cannot be loaded.

    Attributes:
        path: Configuration file involved, if any.
    """

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


# =============================================================================
# Certificate Generation
# =============================================================================


class CertGenError(WhidsManagerError):
    """Raised when the key/certificate pair cannot be generated.

    Attributes:
        step: Short name of the failing step (e.g. "open", "write").
        path: File being written when the failure occurred, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        path: Path | str | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.path = Path(path) if path is not None else None


class KeyMarshalError(CertGenError):
    """Raised when a private key cannot be encoded to PEM."""

    exit_code: int = EXIT_KEY_MARSHAL_FAILURE


# =============================================================================
# Manager Lifecycle
# =============================================================================


class ManagerConstructionError(WhidsManagerError):
    """Raised when the manager collaborator cannot be constructed.

    The message is the underlying error's message, unchanged.
    """


class ManagerRuntimeError(WhidsManagerError):
    """Raised when the manager's run loop fails instead of returning."""
