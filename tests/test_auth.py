"""Tests for credential stores."""

import json
import tempfile
import unittest
from pathlib import Path

from goalwire import ChainedCredentialStore, FileCredentialStore, InMemoryCredentialStore


class TestInMemoryCredentialStore(unittest.TestCase):
    """Tests for InMemoryCredentialStore."""

    def test_set_get_remove(self):
        """Should store, return and remove values."""
        store = InMemoryCredentialStore()

        store.set("auth_token", "abc")
        self.assertEqual(store.get("auth_token"), "abc")

        store.remove("auth_token")
        self.assertIsNone(store.get("auth_token"))

    def test_remove_missing_key_is_noop(self):
        """Should ignore removal of unknown keys."""
        InMemoryCredentialStore().remove("missing")

    def test_initial_values(self):
        """Should start with the given values."""
        self.assertEqual(InMemoryCredentialStore({"k": "v"}).get("k"), "v")


class TestFileCredentialStore(unittest.TestCase):
    """Tests for FileCredentialStore."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "goalwire" / "credentials.json"

    def test_missing_file_returns_none(self):
        """Should return None when the file does not exist yet."""
        self.assertIsNone(FileCredentialStore(self.path).get("auth_token"))

    def test_set_persists_to_disk(self):
        """Should write the value as a JSON object."""
        FileCredentialStore(self.path).set("auth_token", "abc")

        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8")), {"auth_token": "abc"})
        self.assertEqual(FileCredentialStore(self.path).get("auth_token"), "abc")

    def test_remove_keeps_other_keys(self):
        """Should only drop the removed key."""
        store = FileCredentialStore(self.path)
        store.set("auth_token", "abc")
        store.set("refresh_token", "def")

        store.remove("auth_token")

        self.assertIsNone(store.get("auth_token"))
        self.assertEqual(store.get("refresh_token"), "def")

    def test_remove_missing_key_does_not_create_file(self):
        """Should not touch the disk when nothing is removed."""
        FileCredentialStore(self.path).remove("auth_token")

        self.assertFalse(self.path.exists())


class TestChainedCredentialStore(unittest.TestCase):
    """Tests for ChainedCredentialStore."""

    def test_get_returns_first_hit(self):
        """Should look up stores in order."""
        first = InMemoryCredentialStore()
        second = InMemoryCredentialStore({"auth_token": "from-second"})
        chained = ChainedCredentialStore([first, second])

        self.assertEqual(chained.get("auth_token"), "from-second")

        first.set("auth_token", "from-first")
        self.assertEqual(chained.get("auth_token"), "from-first")

    def test_set_writes_to_first_store(self):
        """Should only write to the first store."""
        first, second = InMemoryCredentialStore(), InMemoryCredentialStore()

        ChainedCredentialStore([first, second]).set("auth_token", "abc")

        self.assertEqual(first.get("auth_token"), "abc")
        self.assertIsNone(second.get("auth_token"))

    def test_remove_clears_every_store(self):
        """Should remove the key from all stores."""
        first = InMemoryCredentialStore({"auth_token": "a"})
        second = InMemoryCredentialStore({"auth_token": "b"})

        ChainedCredentialStore([first, second]).remove("auth_token")

        self.assertIsNone(first.get("auth_token"))
        self.assertIsNone(second.get("auth_token"))

    def test_requires_at_least_one_store(self):
        """Should reject an empty chain."""
        with self.assertRaises(AssertionError):
            ChainedCredentialStore([])


if __name__ == "__main__":
    unittest.main()
