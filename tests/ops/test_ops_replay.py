import unittest
from datetime import datetime, timezone
from unittest.mock import Mock

from hubsync.errors import ApiError, ConflictError, NetworkError
from hubsync.models import EntityType, Expense, WriteResult
from hubsync.ops import (
    RETRY_NOT_SUPPORTED_MESSAGE,
    OperationAction,
    OperationReplayer,
    QueuedOperation,
    is_replayable,
)
from hubsync.remote import MOODBOARD_BUCKET


class FakeStore:
    def __init__(self) -> None:
        self.calls = []
        self.next_result = WriteResult(ok=True)

    def add(self, entity_type, entity):
        self.calls.append(("add", entity_type, entity.id))
        return self.next_result

    def update(self, entity_type, entity_id, changes):
        self.calls.append(("update", entity_type, entity_id, changes))
        return self.next_result

    def delete(self, entity_type, entity_id):
        self.calls.append(("delete", entity_type, entity_id))
        return self.next_result

    def update_project(self, *, project_name=None, total_budget=None):
        self.calls.append(("update_project", project_name, total_budget))
        return self.next_result


def _op(entity_type: EntityType, action: OperationAction, payload: dict, op_id: str = "o1") -> QueuedOperation:
    return QueuedOperation(
        op_id=op_id,
        entity_type=entity_type,
        action=action,
        payload=payload,
        enqueued_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def _expense_payload(eid: str = "e1") -> dict:
    return Expense(id=eid, name="Nails", amount=3.5, category="Materials", date="2025-01-01", author="a").to_dict()


class TestOperationReplayer(unittest.TestCase):
    def test_add_dispatches_to_store(self) -> None:
        store = FakeStore()
        result = OperationReplayer(store)(_op(EntityType.EXPENSE, OperationAction.ADD, _expense_payload()))

        self.assertTrue(result.succeeded)
        self.assertEqual(store.calls, [("add", EntityType.EXPENSE, "e1")])

    def test_update_and_project_update(self) -> None:
        store = FakeStore()
        replayer = OperationReplayer(store)
        replayer(_op(EntityType.LOG, OperationAction.UPDATE, {"id": "l1", "content": "c"}))
        replayer(_op(EntityType.PROJECT, OperationAction.UPDATE, {"project_name": "Loft"}))

        self.assertEqual(store.calls[0], ("update", EntityType.LOG, "l1", {"content": "c"}))
        self.assertEqual(store.calls[1], ("update_project", "Loft", None))

    def test_design_add_is_unsupported(self) -> None:
        store = FakeStore()
        op = _op(EntityType.DESIGN, OperationAction.ADD, {"id": "d1", "url": "", "caption": "c"})
        self.assertFalse(is_replayable(op))

        result = OperationReplayer(store)(op)
        self.assertEqual(result.status, "unsupported")
        self.assertEqual(result.error_type, "ReplayNotSupportedError")
        self.assertEqual(result.error_message, RETRY_NOT_SUPPORTED_MESSAGE)
        self.assertEqual(store.calls, [])

    def test_design_add_with_uploaded_url_is_replayed(self) -> None:
        store = FakeStore()
        url = f"https://abc.supabase.co/storage/v1/object/public/{MOODBOARD_BUCKET}/moodboard/p/lamp.png"
        payload = {"id": "d1", "url": url, "caption": "Lamp", "timestamp": "t", "author": "Cy"}
        op = _op(EntityType.DESIGN, OperationAction.ADD, payload)
        self.assertTrue(is_replayable(op))

        result = OperationReplayer(store)(op)
        self.assertEqual(result.status, "success")
        self.assertEqual(store.calls, [("add", EntityType.DESIGN, "d1")])

    def test_message_update_has_no_handler(self) -> None:
        result = OperationReplayer(FakeStore())(
            _op(EntityType.MESSAGE, OperationAction.UPDATE, {"id": "m1", "text": "x"})
        )
        self.assertEqual(result.status, "unsupported")
        self.assertIn("No replay handler", result.error_message)

    def test_failed_write_is_failed(self) -> None:
        store = FakeStore()
        store.next_result = WriteResult(ok=False, error=ApiError("boom", details={"status_code": 500}))
        result = OperationReplayer(store)(_op(EntityType.EXPENSE, OperationAction.DELETE, {"id": "e1"}))

        self.assertEqual(result.status, "failed")
        self.assertEqual(result.error_type, "ApiError")
        self.assertEqual(result.error_details, {"status_code": 500})

    def test_conflict_on_add_counts_as_success(self) -> None:
        store = FakeStore()
        store.next_result = WriteResult(ok=False, error=ConflictError("duplicate key"))
        result = OperationReplayer(store)(_op(EntityType.EXPENSE, OperationAction.ADD, _expense_payload()))
        self.assertTrue(result.succeeded)

    def test_conflict_on_update_is_failed(self) -> None:
        store = FakeStore()
        store.next_result = WriteResult(ok=False, error=ConflictError("conflict"))
        result = OperationReplayer(store)(
            _op(EntityType.EXPENSE, OperationAction.UPDATE, {"id": "e1", "amount": 1})
        )
        self.assertEqual(result.status, "failed")

    def test_raising_store_never_propagates(self) -> None:
        store = Mock()
        store.delete.side_effect = NetworkError("offline")
        result = OperationReplayer(store)(_op(EntityType.LOG, OperationAction.DELETE, {"id": "l1"}))
        self.assertEqual(result.status, "failed")
        self.assertEqual(result.error_type, "NetworkError")

    def test_malformed_entity_is_failed(self) -> None:
        payload = {"id": "l1", "author": "a", "timestamp": "t", "content": "c", "type": "bogus"}
        result = OperationReplayer(FakeStore())(_op(EntityType.LOG, OperationAction.ADD, payload))
        self.assertEqual(result.status, "failed")
        self.assertEqual(result.error_type, "ValueError")

    def test_design_delete_removes_blob_first(self) -> None:
        store = FakeStore()
        blobs = Mock()
        url = "https://x.supabase.co/storage/v1/object/public/moodboard-images/moodboard/p/a.png"
        OperationReplayer(store, blobs=blobs)(
            _op(EntityType.DESIGN, OperationAction.DELETE, {"id": "d1", "url": url})
        )

        blobs.remove_by_url.assert_called_once_with(MOODBOARD_BUCKET, url)
        self.assertEqual(store.calls, [("delete", EntityType.DESIGN, "d1")])


if __name__ == "__main__":
    unittest.main()
