"""Manager configuration for whids-manager.

Defines the configuration model for the manager and the loader used at
startup. The configuration is a JSON file given on the command line; it is
loaded once and never reloaded.

Example usage:
    # Load from config file (raises ConfigurationError on any failure)
    config = load_manager_config(Path("manager.json"))

    # Print a template for operators to fill in
    print(dump_config_skeleton())
"""

from __future__ import annotations

__all__ = [
    "ManagerConfig",
    "TLSConfig",
    "dump_config_skeleton",
    "load_manager_config",
]

import json
from typing import Any
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from whids_manager.exceptions import ConfigurationError

# Indentation of the skeleton printed by --dump-config
SKELETON_INDENT = 4


def _fold_key_case(data: Any) -> Any:
    """Lowercase top-level keys so "Host" and "host" name the same field."""
    if isinstance(data, dict):
        return {k.lower() if isinstance(k, str) else k: v for k, v in data.items()}
    return data


class TLSConfig(BaseModel):
    """TLS material used by the manager's listener.

    Attributes:
        cert: Path to the PEM certificate (e.g. cert.pem from --certgen).
        key: Path to the PEM private key (e.g. key.pem from --certgen).
    """

    cert: str = ""
    key: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def fold_key_case(cls, data: Any) -> Any:
        return _fold_key_case(data)


class ManagerConfig(BaseModel):
    """Manager configuration.

    Only `host` is consumed directly by this package (certificate generation).
    The remaining fields are passed through to the manager collaborator,
    which validates them when it is constructed.

    Attributes:
        host: Address or DNS name the manager is reachable at. Certificates
            are issued for this host.
        port: TCP port the manager listens on.
        key: API key collectors must present (see --key).
        logfile: Optional JSONL log file for manager events.
        tls: Certificate and key used by the listener.
    """

    host: str = ""
    port: int = 0
    key: str = ""
    logfile: str = ""
    tls: TLSConfig = Field(default_factory=TLSConfig)

    # Unknown fields belong to other components; ignore them
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def fold_key_case(cls, data: Any) -> Any:
        return _fold_key_case(data)


def load_manager_config(path: Path | str) -> ManagerConfig:
    """Load and validate the manager configuration file.

    Open, read and parse failures are reported separately so operators can
    tell a missing file from a malformed one.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        ManagerConfig: Validated configuration.

    Raises:
        ConfigurationError: If the file cannot be opened, read, or parsed.
    """
    config_path = Path(path)

    try:
        f = config_path.open("rb")
    except OSError as e:
        raise ConfigurationError(
            f"Failed to open configuration file {config_path}: {e}", path=config_path
        ) from e

    with f:
        try:
            raw = f.read()
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read configuration file {config_path}: {e}", path=config_path
            ) from e

    try:
        data = json.loads(raw)
        return ManagerConfig.model_validate(data)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise ConfigurationError(
            f"Failed to parse configuration data in {config_path}: {e}", path=config_path
        ) from e


def dump_config_skeleton() -> str:
    """Serialize a zero-valued configuration as a copy-and-edit template.

    Fields appear in declaration order. Performs no I/O.

    Returns:
        Indented JSON document.
    """
    return json.dumps(ManagerConfig().model_dump(mode="json"), indent=SKELETON_INDENT)
