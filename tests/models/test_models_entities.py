import unittest

from hubsync.models import (
    ChatMessage,
    DesignItem,
    EntityType,
    Expense,
    LogEntry,
    TimelineMilestone,
    entity_from_dict,
    entity_from_record,
)


class TestEntities(unittest.TestCase):
    def test_expense_to_record_adds_project_id(self) -> None:
        e = Expense(id="e1", name="Tiles", amount=120.5, category="Materials", date="2025-01-02", author="Ana")
        record = e.to_record("p1")
        self.assertEqual(record["project_id"], "p1")
        self.assertEqual(record["amount"], 120.5)
        self.assertIsNone(record["notes"])

    def test_from_dict_ignores_unknown_keys(self) -> None:
        log = LogEntry.from_dict(
            {
                "id": "l1",
                "author": "Ben",
                "timestamp": "2025-01-01T00:00:00Z",
                "content": "Drywall done",
                "type": "issue",
                "created_at": "ignored",
                "project_id": "p1",
            }
        )
        self.assertEqual(log.type, "issue")
        self.assertEqual(log.id, "l1")

    def test_log_type_is_validated(self) -> None:
        with self.assertRaises(ValueError):
            LogEntry(id="l1", author="a", timestamp="t", content="c", type="rant")

    def test_message_type_is_validated(self) -> None:
        with self.assertRaises(ValueError):
            ChatMessage(id="m1", sender="a", timestamp="t", type="video")

    def test_milestone_status_is_validated(self) -> None:
        with self.assertRaises(ValueError):
            TimelineMilestone(id="t1", title="x", start_date="2025-01-01", end_date="2025-01-02", status="done")

    def test_design_record_uses_image_url_column(self) -> None:
        d = DesignItem(id="d1", url="https://x/img.png", caption="Lamp", timestamp="t", author="Cy")
        record = d.to_record("p1")
        self.assertEqual(record["image_url"], "https://x/img.png")
        self.assertNotIn("url", record)

        back = DesignItem.from_record(record)
        self.assertEqual(back.url, "https://x/img.png")

    def test_design_from_record_falls_back_to_url(self) -> None:
        back = DesignItem.from_record({"id": "d1", "url": "u", "caption": "c", "timestamp": "t", "author": "a"})
        self.assertEqual(back.url, "u")

    def test_entity_from_dict_dispatches_on_type(self) -> None:
        m = entity_from_dict(EntityType.MESSAGE, {"id": "m1", "sender": "a", "timestamp": "t", "text": "hi"})
        self.assertIsInstance(m, ChatMessage)
        self.assertEqual(m.type, "text")

    def test_entity_from_record_rejects_project(self) -> None:
        with self.assertRaises(ValueError):
            entity_from_record(EntityType.PROJECT, {"id": "p1"})


if __name__ == "__main__":
    unittest.main()
