"""
Unit Tests - JSONStore

Module: tests.test_json_store
Date: 2026-10-19
Version: 0.1.0
"""

import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from auth_core.persistence.json_store import JSONStore, JSONStoreFormatError, JSONStoreIOError


class TestJSONStore(unittest.TestCase):
    """Test suite for JSONStore"""

    def setUp(self):
        """Setup before each test"""
        self.test_dir = tempfile.mkdtemp()
        self.store_path = os.path.join(self.test_dir, "nested", "test.json")

    def tearDown(self):
        """Cleanup after each test"""
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_initialization_creates_file(self):
        """Initialization creates directory and file with default data"""
        store = JSONStore(self.store_path, {"key": "value"})
        self.assertTrue(os.path.exists(self.store_path))
        self.assertEqual(store.load(), {"key": "value"})

    def test_save_and_load(self):
        """Saved document is loaded back"""
        store = JSONStore(self.store_path)
        store.save({"name": "alice", "count": 3})
        self.assertEqual(store.load(), {"name": "alice", "count": 3})

    def test_no_temp_file_left(self):
        """Atomic write leaves no temp file"""
        store = JSONStore(self.store_path)
        store.save({"value": 42})
        leftovers = [n for n in os.listdir(os.path.dirname(self.store_path)) if n.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    def test_temp_file_owner_only_while_writing(self):
        """Temp file is already 0600 when the document is written into it"""
        store = JSONStore(self.store_path)
        modes = []
        real_dump = json.dump

        def recording_dump(obj, fp, **kwargs):
            modes.append(os.fstat(fp.fileno()).st_mode & 0o777)
            return real_dump(obj, fp, **kwargs)

        with patch("auth_core.persistence.json_store.json.dump", side_effect=recording_dump):
            store.save({"credential_hash": "c2VjcmV0"})

        self.assertEqual(modes, [0o600])
        self.assertEqual(store.load(), {"credential_hash": "c2VjcmV0"})

    def test_failed_write_cleans_up(self):
        """Unserializable document raises and leaves file and directory clean"""
        store = JSONStore(self.store_path, {"items": []})
        circular = {}
        circular["self"] = circular

        with self.assertRaises(JSONStoreIOError):
            store.save(circular)

        self.assertEqual(store.load(), {"items": []})
        leftovers = [n for n in os.listdir(os.path.dirname(self.store_path)) if n.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    def test_file_permissions(self):
        """File is owner read/write only"""
        store = JSONStore(self.store_path)
        store.save({"data": "test"})
        mode = os.stat(self.store_path).st_mode & 0o777
        self.assertEqual(mode, 0o600)

    def test_transaction_commits(self):
        """Changes made in a transaction are written"""
        store = JSONStore(self.store_path, {"items": {}})
        with store.transaction() as data:
            data["items"]["a"] = 1
        self.assertEqual(store.load(), {"items": {"a": 1}})

    def test_transaction_rolls_back_on_error(self):
        """A raising transaction leaves the file untouched"""
        store = JSONStore(self.store_path, {"items": {}})

        with self.assertRaises(RuntimeError):
            with store.transaction() as data:
                data["items"]["a"] = 1
                raise RuntimeError("abort")

        self.assertEqual(store.load(), {"items": {}})

    def test_append_entry(self):
        """append_entry() extends a list, creating it if missing"""
        store = JSONStore(self.store_path)
        store.append_entry("entries", {"id": 1})
        store.append_entry("entries", {"id": 2})
        self.assertEqual([e["id"] for e in store.load()["entries"]], [1, 2])

    def test_append_entry_max_entries(self):
        """append_entry() with max_entries drops the oldest entries"""
        store = JSONStore(self.store_path)
        for i in range(5):
            store.append_entry("entries", {"id": i}, max_entries=3)
        self.assertEqual([e["id"] for e in store.load()["entries"]], [2, 3, 4])

    def test_invalid_json_raises(self):
        """Corrupt file raises a format error"""
        store = JSONStore(self.store_path)
        with open(self.store_path, "w") as f:
            f.write("{invalid json}")

        with self.assertRaises(JSONStoreFormatError):
            store.load()


if __name__ == "__main__":
    unittest.main(verbosity=2)
