import os
import tempfile
import unittest

from hubsync.local import FileKeyValueStore, MemoryKeyValueStore


class TestMemoryKeyValueStore(unittest.TestCase):
    def test_get_set_delete(self) -> None:
        store = MemoryKeyValueStore({"a": "1"})
        self.assertEqual(store.get("a"), "1")
        store.set("b", "2")
        self.assertEqual(store.get("b"), "2")
        store.delete("a")
        store.delete("missing")
        self.assertIsNone(store.get("a"))


class TestFileKeyValueStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = os.path.join(self._tmp.name, "slots")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_key_is_none(self) -> None:
        self.assertIsNone(FileKeyValueStore(self.directory).get("nothing"))

    def test_set_creates_directory_and_persists(self) -> None:
        FileKeyValueStore(self.directory).set("queue", '[{"id": "1"}]')

        self.assertTrue(os.path.exists(os.path.join(self.directory, "queue.json")))
        # A fresh instance sees the same data (survives a restart).
        self.assertEqual(FileKeyValueStore(self.directory).get("queue"), '[{"id": "1"}]')

    def test_set_overwrites_without_leaving_temp_files(self) -> None:
        store = FileKeyValueStore(self.directory)
        store.set("k", "one")
        store.set("k", "two")
        self.assertEqual(store.get("k"), "two")
        self.assertEqual(os.listdir(self.directory), ["k.json"])

    def test_delete(self) -> None:
        store = FileKeyValueStore(self.directory)
        store.set("k", "v")
        store.delete("k")
        store.delete("k")
        self.assertIsNone(store.get("k"))

    def test_rejects_path_like_keys(self) -> None:
        store = FileKeyValueStore(self.directory)
        with self.assertRaises(ValueError):
            store.get("../escape")
        with self.assertRaises(ValueError):
            store.set(".hidden", "v")

    def test_rejects_empty_directory(self) -> None:
        with self.assertRaises(ValueError):
            FileKeyValueStore("")


if __name__ == "__main__":
    unittest.main()
