"""Shared file utilities for whids-manager.

Provides helpers for writing files that must only be readable by their owner:
- set_secure_permissions: Owner-only file/directory permissions
- write_secure_file: Create or truncate a file with owner-only permissions
"""

from __future__ import annotations

__all__ = [
    "set_secure_permissions",
    "write_secure_file",
]

import os
import sys
from pathlib import Path

from whids_manager.constants import SECURE_DIR_PERMISSIONS, SECURE_FILE_PERMISSIONS


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Set secure permissions on file or directory.

    Sets permissions to restrict access to owner only:
    - Directory: 0o700 (rwx------)
    - File: 0o600 (rw-------)

    Does nothing on Windows.

    Args:
        path: Path to file or directory.
        is_directory: If True, use directory permissions (0o700).

    Raises:
        OSError: If permissions cannot be changed.
    """
    if sys.platform == "win32":
        return

    mode = SECURE_DIR_PERMISSIONS if is_directory else SECURE_FILE_PERMISSIONS
    path.chmod(mode)


def write_secure_file(path: Path, data: bytes) -> None:
    """Write data to a file readable and writable by its owner only.

    The file is created with mode 0o600. An existing file is truncated and
    its permissions are tightened to 0o600 before any data is written.

    Args:
        path: Destination file.
        data: Bytes to write.

    Raises:
        OSError: If the file cannot be opened, chmod'ed, or written.
    """
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECURE_FILE_PERMISSIONS)
    with os.fdopen(fd, "wb") as f:
        set_secure_permissions(path)
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
