"""Command-line interface for whids-manager.

Generates API keys and TLS material, dumps a configuration skeleton,
and runs the manager.
"""

from .main import cli, main

__all__ = ["cli", "main"]
