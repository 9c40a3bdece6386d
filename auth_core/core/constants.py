"""
Constants for the authentication core

Module: core.constants
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial constants definition
  - Token defaults (TTL, algorithm, skew)
  - Hashing defaults (bcrypt cost bounds)
  - Input limits
  - Environment variable names

SECURITY NOTES:
- Defaults are conservative
- Input limits bound the work done on untrusted data
"""

from typing import Final

# ============================================================================
# Tokens
# ============================================================================

TOKEN_ALGORITHM: Final[str] = "HS256"
DEFAULT_TOKEN_TTL_SECONDS: Final[int] = 3600
DEFAULT_CLOCK_SKEW_SECONDS: Final[int] = 0

# HMAC-SHA256 key should carry at least 256 bits
MIN_SIGNING_SECRET_BYTES: Final[int] = 32

# Anything longer is rejected as malformed before parsing
MAX_TOKEN_LENGTH: Final[int] = 8192

# ============================================================================
# Password hashing (bcrypt)
# ============================================================================

DEFAULT_HASH_COST: Final[int] = 12
MIN_HASH_COST: Final[int] = 4
MAX_HASH_COST: Final[int] = 31

# bcrypt only reads the first 72 bytes of its input
MAX_SECRET_BYTES: Final[int] = 72

# ============================================================================
# Identifiers
# ============================================================================

MAX_IDENTIFIER_LENGTH: Final[int] = 256

# ============================================================================
# Audit
# ============================================================================

# Oldest entries are dropped beyond this many
DEFAULT_AUDIT_MAX_ENTRIES: Final[int] = 10000

# ============================================================================
# Environment
# ============================================================================

ENV_SIGNING_SECRET: Final[str] = "AUTH_SIGNING_SECRET"
ENV_TOKEN_TTL_SECONDS: Final[str] = "AUTH_TOKEN_TTL_SECONDS"
ENV_HASH_COST: Final[str] = "AUTH_HASH_COST"
ENV_CLOCK_SKEW_SECONDS: Final[str] = "AUTH_CLOCK_SKEW_SECONDS"
