import unittest

from hubsync.models import ConnectivityState, EntityType, SyncStatus
from hubsync.session import SyncSession


class FakeSubscription:
    def __init__(self, entity_type) -> None:
        self.entity_type = entity_type
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeRealtime:
    def __init__(self) -> None:
        self.subscribed = []

    def subscribe(self, entity_type, handler):
        sub = FakeSubscription(entity_type)
        self.subscribed.append(sub)
        return sub


class TestSyncSession(unittest.TestCase):
    def test_start_subscribes_each_handler(self) -> None:
        realtime = FakeRealtime()
        session = SyncSession()
        session.start(realtime, {EntityType.EXPENSE: print, EntityType.LOG: print})

        self.assertTrue(session.started)
        self.assertEqual(len(session.subscriptions), 2)

    def test_restart_tears_down_previous_subscriptions(self) -> None:
        realtime = FakeRealtime()
        session = SyncSession()
        session.start(realtime, {EntityType.EXPENSE: print})
        first = session.subscriptions[0]

        session.start(realtime, {EntityType.EXPENSE: print})

        self.assertFalse(first.active)
        self.assertEqual(len(session.subscriptions), 1)
        self.assertEqual(sum(1 for s in realtime.subscribed if s.active), 1)

    def test_stop(self) -> None:
        realtime = FakeRealtime()
        session = SyncSession()
        session.start(realtime, {EntityType.MESSAGE: print})
        session.stop()

        self.assertFalse(session.started)
        self.assertEqual(session.subscriptions, [])
        self.assertFalse(realtime.subscribed[0].active)

    def test_status_priority(self) -> None:
        self.assertIs(SyncSession(remote_configured=False).status().status, SyncStatus.LOCAL_ONLY)

        session = SyncSession()
        self.assertIs(session.status().status, SyncStatus.OFFLINE)

        session.connectivity = ConnectivityState.ONLINE
        session.syncing = True
        self.assertIs(session.status().status, SyncStatus.SYNCING)

        session.syncing = False
        session.mark_synced()
        snap = session.status(pending=3)
        self.assertIs(snap.status, SyncStatus.SYNCED)
        self.assertIsNotNone(snap.last_synced_at)
        self.assertEqual(snap.pending, 3)


if __name__ == "__main__":
    unittest.main()
