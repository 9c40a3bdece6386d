"""
JSON Credential Store - File-backed principal registry

Module: persistence.json_credential_store
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Principal records persisted in principals.json
  - Hash material stored base64-encoded
  - Check-and-insert inside a single JSONStore transaction

SECURITY NOTES:
- principals.json is written 0600
- Only hashes and salt/cost parameters are stored, never secrets
"""

import base64
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .credential_store import (
    AlreadyExistsError,
    CredentialStore,
    NotFoundError,
    PrincipalRecord,
)
from .json_store import JSONStore


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def record_to_dict(record: PrincipalRecord) -> Dict[str, Any]:
    """Convert record to dictionary for JSON storage"""
    return {
        "identifier": record.identifier,
        "credential_hash": _b64(record.credential_hash),
        "hash_parameters": _b64(record.hash_parameters),
        "created_at": record.created_at.isoformat(),
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def record_from_dict(data: Dict[str, Any]) -> PrincipalRecord:
    """Create record from dictionary (from JSON)"""
    return PrincipalRecord(
        identifier=data["identifier"],
        credential_hash=base64.b64decode(data["credential_hash"]),
        hash_parameters=base64.b64decode(data["hash_parameters"]),
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None,
    )


class JSONCredentialStore(CredentialStore):
    """
    Credential store persisted to <data_dir>/principals.json.

    Every mutation runs inside one JSONStore transaction so the
    existence check and the write happen under the same lock.
    """

    def __init__(self, data_dir: str = "./data"):
        """
        Initialize file-backed store

        Args:
            data_dir: Directory for data files
        """
        self.logger = logging.getLogger("persistence.json_credential_store")
        self.data_dir = Path(data_dir)
        self.principals_file = self.data_dir / "principals.json"
        self.store = JSONStore(str(self.principals_file), {"principals": {}})
        self.logger.info(f"JSONCredentialStore initialized (file={self.principals_file})")

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
        with self.store.transaction() as data:
            principals = data.setdefault("principals", {})
            if identifier in principals:
                raise AlreadyExistsError(f"Principal '{identifier}' already exists")
            principals[identifier] = record_to_dict(record)

        self.logger.info(f"Principal registered: {identifier}")
        return record

    def lookup(self, identifier: str) -> Optional[PrincipalRecord]:
        entry = self.store.load().get("principals", {}).get(identifier)
        if entry is None:
            return None
        return record_from_dict(entry)

    def replace(
        self,
        identifier: str,
        credential_hash: bytes,
        hash_parameters: bytes,
    ) -> PrincipalRecord:
        with self.store.transaction() as data:
            entry = data.get("principals", {}).get(identifier)
            if entry is None:
                raise NotFoundError(f"Principal '{identifier}' not found")
            current = record_from_dict(entry)
            record = PrincipalRecord(
                identifier=identifier,
                credential_hash=bytes(credential_hash),
                hash_parameters=bytes(hash_parameters),
                created_at=current.created_at,
                updated_at=datetime.now(timezone.utc),
            )
            data["principals"][identifier] = record_to_dict(record)

        self.logger.info(f"Credential replaced: {identifier}")
        return record

    def remove(self, identifier: str) -> None:
        with self.store.transaction() as data:
            if data.get("principals", {}).pop(identifier, None) is None:
                raise NotFoundError(f"Principal '{identifier}' not found")

        self.logger.info(f"Principal removed: {identifier}")

    def identifiers(self) -> List[str]:
        return list(self.store.load().get("principals", {}))
