"""Tests for API key generation."""

from __future__ import annotations

import pytest

from whids_manager.constants import DEFAULT_KEY_SIZE
from whids_manager.security.keygen import generate_api_key


class TestGenerateApiKey:
    """generate_api_key tests."""

    @pytest.mark.parametrize("size", [1, 16, 32, 64, 255])
    def test_decodes_to_requested_size(self, size: int) -> None:
        # Act
        key = generate_api_key(size)

        # Assert
        assert len(bytes.fromhex(key)) == size

    def test_default_size(self) -> None:
        # Act
        key = generate_api_key()

        # Assert
        assert len(bytes.fromhex(key)) == DEFAULT_KEY_SIZE

    def test_is_lowercase_hex(self) -> None:
        # Act
        key = generate_api_key()

        # Assert
        assert key == key.lower()
        assert all(c in "0123456789abcdef" for c in key)

    def test_keys_are_unique(self) -> None:
        """10,000 generated keys contain no duplicates."""
        # Act
        keys = {generate_api_key() for _ in range(10_000)}

        # Assert
        assert len(keys) == 10_000

    @pytest.mark.parametrize("size", [0, -1, -32])
    def test_rejects_non_positive_size(self, size: int) -> None:
        # Act & Assert
        with pytest.raises(ValueError, match="must be positive"):
            generate_api_key(size)
