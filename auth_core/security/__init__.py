"""
Security module - Hashing, signing secrets and tokens

Provides:
- PasswordHasher: bcrypt secret hashing
- TokenCodec: HS256 JWT issuance and verification
- KeyProvider: Signing secret sources
"""

from .password_hasher import PasswordHasher, SecretHasher
from .token_codec import (
    TokenCodec,
    TokenClaims,
    TokenError,
    TokenMalformedError,
    TokenBadSignatureError,
    TokenExpiredError,
)
from .key_provider import (
    KeyProvider,
    KeyProviderError,
    StaticKeyProvider,
    EnvKeyProvider,
)

__all__ = [
    "PasswordHasher",
    "SecretHasher",
    "TokenCodec",
    "TokenClaims",
    "TokenError",
    "TokenMalformedError",
    "TokenBadSignatureError",
    "TokenExpiredError",
    "KeyProvider",
    "KeyProviderError",
    "StaticKeyProvider",
    "EnvKeyProvider",
]
