"""Application-wide constants for whids-manager.

Constants that define application behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "COPYRIGHT",
    "LICENSE",
    # API keys
    "DEFAULT_KEY_SIZE",
    "API_KEY_HEADER",
    # Certificate generation
    "DEFAULT_ORGANIZATION",
    "CERT_VALIDITY_DAYS",
    "RSA_KEY_SIZE",
    "RSA_PUBLIC_EXPONENT",
    "SERIAL_NUMBER_BITS",
    "CERT_FILENAME",
    "KEY_FILENAME",
    # File permissions
    "SECURE_FILE_PERMISSIONS",
    "SECURE_DIR_PERMISSIONS",
    # Exit codes
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_KEY_MARSHAL_FAILURE",
]

# ============================================================================
# Application Identity
# ============================================================================

APP_NAME: str = "whids-manager"

COPYRIGHT: str = "WHIDS Copyright (C) 2017 RawSec SARL (@0xrawsec)"
LICENSE: str = "License Apache 2.0: This program comes with ABSOLUTELY NO WARRANTY."

# ============================================================================
# API Keys
# ============================================================================

# Random bytes per API key (hex encoded, so 64 characters)
DEFAULT_KEY_SIZE: int = 32

# Header collectors present their API key in
API_KEY_HEADER: str = "Api-Key"

# ============================================================================
# Certificate Generation
# ============================================================================

DEFAULT_ORGANIZATION: str = "WHIDS Manager"
CERT_VALIDITY_DAYS: int = 365

RSA_KEY_SIZE: int = 4096
RSA_PUBLIC_EXPONENT: int = 65537

# Serial numbers are drawn uniformly from [1, 2**128)
SERIAL_NUMBER_BITS: int = 128

# Written to the current working directory by --certgen
CERT_FILENAME: str = "cert.pem"
KEY_FILENAME: str = "key.pem"

# ============================================================================
# File Permissions
# ============================================================================

SECURE_FILE_PERMISSIONS: int = 0o600  # Owner rw only
SECURE_DIR_PERMISSIONS: int = 0o700  # Owner rwx only

# ============================================================================
# Exit Codes
# ============================================================================

EXIT_OK: int = 0
EXIT_FAILURE: int = 1
EXIT_KEY_MARSHAL_FAILURE: int = 2
