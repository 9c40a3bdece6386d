"""
Persistence module - Principal and audit storage

Provides:
- CredentialStore: Abstract principal store
- InMemoryCredentialStore: Lock-guarded in-process store
- JSONCredentialStore: File-backed store
- JSONStore: Atomic JSON file helper
- AuditLogger: Append-only audit trail
"""

from .json_store import JSONStore, JSONStoreError
from .credential_store import (
    CredentialStore,
    CredentialStoreError,
    AlreadyExistsError,
    NotFoundError,
    PrincipalRecord,
    InMemoryCredentialStore,
)
from .json_credential_store import JSONCredentialStore
from .audit_store import AuditLogger, AuditEntry, EventType

__all__ = [
    "JSONStore",
    "JSONStoreError",
    "CredentialStore",
    "CredentialStoreError",
    "AlreadyExistsError",
    "NotFoundError",
    "PrincipalRecord",
    "InMemoryCredentialStore",
    "JSONCredentialStore",
    "AuditLogger",
    "AuditEntry",
    "EventType",
]
