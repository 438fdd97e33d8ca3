import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from hubsync.cli import main
from hubsync.local import FileKeyValueStore, OfflineQueue
from hubsync.models import EntityType
from hubsync.ops import OperationAction


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.storage_dir = self._tmp.name
        patcher = patch("hubsync.cli.RemoteConfig.from_env", return_value=None)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(["--storage-dir", self.storage_dir, *argv])
        return code, out.getvalue(), err.getvalue()

    def test_queue_prints_json_lines(self) -> None:
        queue = OfflineQueue(FileKeyValueStore(self.storage_dir))
        queue.enqueue(EntityType.LOG, OperationAction.DELETE, {"id": "l1"})
        queue.enqueue(EntityType.EXPENSE, OperationAction.UPDATE, {"id": "e1", "amount": 5})

        code, out, _ = self._run("queue")

        self.assertEqual(code, 0)
        lines = [json.loads(line) for line in out.splitlines()]
        self.assertEqual([line["entity_type"] for line in lines], ["log", "expense"])

    def test_status_in_local_only_mode(self) -> None:
        code, out, _ = self._run("status")
        self.assertEqual(code, 0)
        self.assertIn("Local only", out)
        self.assertIn("pending: 0", out)

    def test_drain_requires_remote_store(self) -> None:
        code, _, err = self._run("drain")
        self.assertEqual(code, 1)
        self.assertIn("not configured", err)

    def test_command_is_required(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main([])


if __name__ == "__main__":
    unittest.main()
