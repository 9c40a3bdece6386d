"""
JSON Store - Lock-guarded JSON file handling

Module: persistence.json_store
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Atomic writes (temp file + replace)
  - Owner-only file permissions (0600)
  - Read-modify-write transactions under a process lock
  - Append helper for list-shaped documents

[2026-10-20 v0.1.1] Write hardening
  - Temp files created 0600 with unique names (mkstemp)
  - append_entry() takes an optional max_entries cap

ARCHITECTURE:
JSONStore is the file layer under the file-backed stores:
  - load() returns a fresh copy of the document
  - transaction() yields the document and writes it back on clean exit
  - A failed transaction leaves the file untouched

SECURITY NOTES:
- Temp files are created 0600 (mkstemp), so the replaced file is too
- Document contents are never logged
"""

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional


class JSONStoreError(Exception):
    """Base JSON store error"""
    pass


class JSONStoreIOError(JSONStoreError):
    """File I/O error"""
    pass


class JSONStoreFormatError(JSONStoreError):
    """JSON format error"""
    pass


class JSONStore:
    """
    JSON document persisted to a single file.

    All mutation goes through transaction(), which holds the store lock
    for the whole read-modify-write so concurrent writers in the same
    process cannot interleave.
    """

    def __init__(self, file_path: str, default_data: Optional[Dict[str, Any]] = None):
        """
        Initialize JSON store

        Args:
            file_path: Path to JSON file
            default_data: Document written when the file doesn't exist
        """
        self.logger = logging.getLogger(f"persistence.{self.__class__.__name__}")
        self.file_path = Path(file_path)
        self.default_data = default_data or {}
        self._lock = threading.RLock()

        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.file_path.exists():
            self._write_atomic(self.default_data)
            self.logger.info(f"Created new store: {self.file_path}")

    def load(self) -> Dict[str, Any]:
        """
        Load data from JSON file

        Returns:
            Parsed JSON document

        Raises:
            JSONStoreIOError: If file cannot be read
            JSONStoreFormatError: If JSON is invalid
        """
        with self._lock:
            return self._read()

    def save(self, data: Dict[str, Any]) -> None:
        """Replace the whole document (atomic write)"""
        with self._lock:
            self._write_atomic(data)

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Any]]:
        """
        Read-modify-write under the store lock.

        The yielded document is written back only if the block exits
        without raising.
        """
        with self._lock:
            data = self._read()
            yield data
            self._write_atomic(data)

    def append_entry(
        self,
        entries_key: str,
        entry: Dict[str, Any],
        max_entries: Optional[int] = None,
    ) -> None:
        """
        Append entry to a list in the document (audit trails, etc)

        Args:
            entries_key: Key containing the list
            entry: Entry to append
            max_entries: If set, oldest entries are dropped to keep at most this many
        """
        with self.transaction() as data:
            entries = data.setdefault(entries_key, [])
            entries.append(entry)
            if max_entries is not None and len(entries) > max_entries:
                del entries[:len(entries) - max_entries]

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            self.logger.warning("File not found, returning default data")
            return copy.deepcopy(self.default_data)
        except json.JSONDecodeError as e:
            raise JSONStoreFormatError(f"Invalid JSON in {self.file_path}: {e}") from e
        except OSError as e:
            raise JSONStoreIOError(f"Failed to read {self.file_path}: {e}") from e

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        try:
            # mkstemp creates the file 0600 with a unique name
            fd, temp_name = tempfile.mkstemp(
                dir=self.file_path.parent,
                prefix=f".{self.file_path.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise JSONStoreIOError(f"Failed to write {self.file_path}: {e}") from e

        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            temp_path.replace(self.file_path)
        except (OSError, TypeError, ValueError) as e:
            temp_path.unlink(missing_ok=True)
            raise JSONStoreIOError(f"Failed to write {self.file_path}: {e}") from e
