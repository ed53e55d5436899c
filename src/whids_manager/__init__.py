"""whids-manager: security bootstrap and run lifecycle for the WHIDS manager.

Generates the API key and self-signed TLS material securing the
manager/collector channel, and runs the manager until it is interrupted
or stops on its own.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
