"""
auth_core - Credential authentication core

Registers principals with hashed secrets, authenticates login attempts
and issues/verifies signed, expiring bearer tokens.

CHANGELOG:
[2026-10-19 v0.1.0] Initial release
  - AuthSystem orchestration and public error taxonomy
  - bcrypt PasswordHasher
  - HS256 TokenCodec
  - In-memory and JSON file credential stores
  - Append-only audit trail

ARCHITECTURE:
- Layer 1 : Persistence (CredentialStore, JSONStore, AuditLogger)
- Layer 2 : Security (PasswordHasher, TokenCodec, KeyProvider)
- Layer 3 : Core (AuthSystem, AuthConfig, errors)

SECURITY NOTES:
- Secrets are only ever stored as salted bcrypt hashes
- Login failures do not reveal whether the identifier exists
- Token failures do not reveal their cause to callers
"""

__version__ = "0.1.0"

from .core.auth_system import AuthSystem, AuthConfig
from .core.errors import (
    AuthError,
    InvalidInputError,
    EmptySecretError,
    UserAlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from .persistence import (
    CredentialStore,
    InMemoryCredentialStore,
    JSONCredentialStore,
    AuditLogger,
)
from .security import (
    PasswordHasher,
    TokenCodec,
    TokenClaims,
    KeyProvider,
    StaticKeyProvider,
    EnvKeyProvider,
)

__all__ = [
    "AuthSystem",
    "AuthConfig",
    "AuthError",
    "InvalidInputError",
    "EmptySecretError",
    "UserAlreadyExistsError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "CredentialStore",
    "InMemoryCredentialStore",
    "JSONCredentialStore",
    "AuditLogger",
    "PasswordHasher",
    "TokenCodec",
    "TokenClaims",
    "KeyProvider",
    "StaticKeyProvider",
    "EnvKeyProvider",
]
