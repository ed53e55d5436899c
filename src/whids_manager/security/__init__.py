"""Security material for the manager/collector channel.

- keygen: API key generation
- certgen: Self-signed TLS certificate and private key generation

Import directly from submodules:
    from whids_manager.security.certgen import generate_self_signed
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
