"""API key generation.

The API key is a shared secret: the operator copies it into both the
manager and the collector configuration files. It is printed once and
never stored by this package.
"""

from __future__ import annotations

__all__ = ["generate_api_key"]

import secrets

from whids_manager.constants import DEFAULT_KEY_SIZE


def generate_api_key(size: int = DEFAULT_KEY_SIZE) -> str:
    """Generate a random API key.

    Bytes come from the OS CSPRNG (secrets). If that source is unavailable
    the error propagates; there is no weaker fallback.

    Args:
        size: Number of random bytes in the key.

    Returns:
        Lowercase hex string decoding to exactly `size` bytes.

    Raises:
        ValueError: If size is not positive.
    """
    if size <= 0:
        raise ValueError(f"API key size must be positive, got {size}")
    return secrets.token_hex(size)
