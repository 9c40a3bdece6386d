"""
Credential Store - Principal records keyed by identifier

Module: persistence.credential_store
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - CredentialStore abstract interface
  - PrincipalRecord (opaque hash material, redacted repr)
  - InMemoryCredentialStore with atomic check-and-insert

ARCHITECTURE:
CredentialStore holds identifier -> (credential hash, hash parameters).
Records are never mutated in place: replace() swaps the whole pair,
remove() deletes the record.

SECURITY NOTES:
- Hash material never appears in repr, logs or exception messages
- register() is a single locked check-and-insert, never lookup-then-insert
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace as dc_replace
from datetime import datetime, timezone
from typing import Dict, List, Optional


class CredentialStoreError(Exception):
    """Base credential store error"""
    pass


class AlreadyExistsError(CredentialStoreError):
    """Identifier already registered"""
    pass


class NotFoundError(CredentialStoreError):
    """Identifier not registered"""
    pass


@dataclass(frozen=True)
class PrincipalRecord:
    """Stored principal. Hash fields are excluded from repr."""
    identifier: str
    credential_hash: bytes = field(repr=False)
    hash_parameters: bytes = field(repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None


class CredentialStore(ABC):
    """
    Abstract principal store.

    Implementations must make register() an atomic check-and-insert:
    of two concurrent registrations of one identifier exactly one wins.
    """

    @abstractmethod
    def register(
        self,
        identifier: str,
        credential_hash: bytes,
        hash_parameters: bytes,
    ) -> PrincipalRecord:
        """
        Insert a new record

        Raises:
            AlreadyExistsError: If identifier is already present
        """

    @abstractmethod
    def lookup(self, identifier: str) -> Optional[PrincipalRecord]:
        """Return the record for identifier, or None"""

    @abstractmethod
    def replace(
        self,
        identifier: str,
        credential_hash: bytes,
        hash_parameters: bytes,
    ) -> PrincipalRecord:
        """
        Swap the credential hash and parameters of an existing record

        Raises:
            NotFoundError: If identifier is absent
        """

    @abstractmethod
    def remove(self, identifier: str) -> None:
        """
        Delete a record

        Raises:
            NotFoundError: If identifier is absent
        """

    @abstractmethod
    def identifiers(self) -> List[str]:
        """List registered identifiers"""

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.lookup(identifier) is not None

    def __len__(self) -> int:
        return len(self.identifiers())


class InMemoryCredentialStore(CredentialStore):
    """Dict-backed store guarded by a single lock"""

    def __init__(self):
        self.logger = logging.getLogger("persistence.credential_store")
        self._records: Dict[str, PrincipalRecord] = {}
        self._lock = threading.Lock()

    def register(
        self,
        identifier: str,
        credential_hash: bytes,
        hash_parameters: bytes,
    ) -> PrincipalRecord:
        record = PrincipalRecord(
            identifier=identifier,
            credential_hash=bytes(credential_hash),
            hash_parameters=bytes(hash_parameters),
        )
        with self._lock:
            if identifier in self._records:
                raise AlreadyExistsError(f"Principal '{identifier}' already exists")
            self._records[identifier] = record

        self.logger.info(f"Principal registered: {identifier}")
        return record

    def lookup(self, identifier: str) -> Optional[PrincipalRecord]:
        with self._lock:
            return self._records.get(identifier)

    def replace(
        self,
        identifier: str,
        credential_hash: bytes,
        hash_parameters: bytes,
    ) -> PrincipalRecord:
        with self._lock:
            current = self._records.get(identifier)
            if current is None:
                raise NotFoundError(f"Principal '{identifier}' not found")
            record = dc_replace(
                current,
                credential_hash=bytes(credential_hash),
                hash_parameters=bytes(hash_parameters),
                updated_at=datetime.now(timezone.utc),
            )
            self._records[identifier] = record

        self.logger.info(f"Credential replaced: {identifier}")
        return record

    def remove(self, identifier: str) -> None:
        with self._lock:
            if self._records.pop(identifier, None) is None:
                raise NotFoundError(f"Principal '{identifier}' not found")

        self.logger.info(f"Principal removed: {identifier}")

    def identifiers(self) -> List[str]:
        with self._lock:
            return list(self._records)
