"""
Audit Logger - Append-only authentication audit trail

Module: persistence.audit_store
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Append-only audit.json
  - Registration, login and token verification events
  - Operator-side token rejection reasons

[2026-10-20 v0.1.1] Bounded trail
  - Oldest entries dropped beyond max_entries

ARCHITECTURE:
AuditLogger is an optional AuthSystem collaborator. It is operator
facing: token rejections keep their sub-cause here (malformed, bad
signature, expired) while callers only ever see InvalidTokenError.

SECURITY NOTES:
- Entries never carry secrets, hashes or signing keys
- Login failures are recorded without saying whether the identifier exists
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.constants import DEFAULT_AUDIT_MAX_ENTRIES
from .json_store import JSONStore


class EventType(Enum):
    """Audit event types"""
    PRINCIPAL_REGISTERED = "principal_registered"
    PRINCIPAL_REMOVED = "principal_removed"
    REGISTRATION_REJECTED = "registration_rejected"
    SECRET_CHANGED = "secret_changed"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    TOKEN_REJECTED = "token_rejected"


class AuditEntry:
    """Represents an audit log entry"""

    def __init__(
        self,
        timestamp: datetime,
        event_type: str,
        identifier: Optional[str] = None,
        status: str = "success",
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.timestamp = timestamp
        self.event_type = event_type
        self.identifier = identifier
        self.status = status
        self.reason = reason
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "identifier": self.identifier,
            "status": self.status,
            "reason": self.reason,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEntry":
        """Create from dictionary (from JSON)"""
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            event_type=data["event_type"],
            identifier=data.get("identifier"),
            status=data.get("status", "success"),
            reason=data.get("reason"),
            details=data.get("details", {}),
        )


class AuditLogger:
    """
    Append-only audit trail logger.

    Writes to <data_dir>/audit.json. Every event rewrites the whole file,
    and failed logins are recorded under caller-chosen identifiers, so the
    trail is capped at max_entries with the oldest entries dropped first.
    """

    def __init__(self, data_dir: str = "./data", max_entries: int = DEFAULT_AUDIT_MAX_ENTRIES):
        """
        Initialize audit logger

        Args:
            data_dir: Directory for audit file
            max_entries: Most entries kept (oldest dropped first)

        Raises:
            ValueError: If max_entries is not positive
        """
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.logger = logging.getLogger("persistence.audit_logger")
        self.data_dir = Path(data_dir)
        self.audit_file = self.data_dir / "audit.json"
        self.max_entries = max_entries
        self.store = JSONStore(str(self.audit_file), {"entries": []})
        self.logger.info(f"AuditLogger initialized (file={self.audit_file}, max_entries={max_entries})")

    def log_event(
        self,
        event_type: EventType,
        identifier: Optional[str] = None,
        status: str = "success",
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        """
        Log an audit event (append-only)

        Args:
            event_type: Type of event
            identifier: Principal identifier, if known
            status: success or failure
            reason: Short machine-readable reason code
            details: Extra non-secret details

        Returns:
            AuditEntry that was logged
        """
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc),
            event_type=event_type.value,
            identifier=identifier,
            status=status,
            reason=reason,
            details=details,
        )
        self.store.append_entry("entries", entry.to_dict(), max_entries=self.max_entries)
        return entry

    def log_registered(self, identifier: str) -> AuditEntry:
        return self.log_event(EventType.PRINCIPAL_REGISTERED, identifier)

    def log_registration_rejected(self, identifier: str, reason: str) -> AuditEntry:
        return self.log_event(
            EventType.REGISTRATION_REJECTED, identifier, status="failure", reason=reason
        )

    def log_removed(self, identifier: str) -> AuditEntry:
        return self.log_event(EventType.PRINCIPAL_REMOVED, identifier)

    def log_secret_changed(self, identifier: str) -> AuditEntry:
        return self.log_event(EventType.SECRET_CHANGED, identifier)

    def log_login_success(self, identifier: str) -> AuditEntry:
        return self.log_event(EventType.LOGIN_SUCCESS, identifier)

    def log_login_failed(self, identifier: str) -> AuditEntry:
        """Log failed login (no distinction between unknown user and bad secret)"""
        return self.log_event(
            EventType.LOGIN_FAILED, identifier, status="failure", reason="invalid_credentials"
        )

    def log_token_rejected(self, reason: str, subject: Optional[str] = None) -> AuditEntry:
        """Log token rejection with its internal sub-cause"""
        return self.log_event(
            EventType.TOKEN_REJECTED, subject, status="failure", reason=reason
        )

    def query_by_identifier(
        self,
        identifier: str,
        limit: Optional[int] = None,
    ) -> List[AuditEntry]:
        """
        Query audit entries by identifier

        Args:
            identifier: Principal identifier
            limit: Max results (most recent)

        Returns:
            List of matching AuditEntry objects
        """
        entries = [
            AuditEntry.from_dict(e)
            for e in self.store.load()["entries"]
            if e.get("identifier") == identifier
        ]
        if limit:
            return entries[-limit:]
        return entries

    def query_by_event_type(
        self,
        event_type: EventType,
        limit: Optional[int] = None,
    ) -> List[AuditEntry]:
        """
        Query audit entries by event type

        Args:
            event_type: Event type
            limit: Max results (most recent)

        Returns:
            List of matching AuditEntry objects
        """
        entries = [
            AuditEntry.from_dict(e)
            for e in self.store.load()["entries"]
            if e.get("event_type") == event_type.value
        ]
        if limit:
            return entries[-limit:]
        return entries
