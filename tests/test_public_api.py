import unittest

import hubsync


class TestPublicApi(unittest.TestCase):
    def test_top_level_exports_exist(self) -> None:
        self.assertTrue(hasattr(hubsync, "SyncController"))
        self.assertTrue(hasattr(hubsync, "SyncSession"))
        self.assertTrue(hasattr(hubsync, "OfflineQueue"))
        self.assertTrue(hasattr(hubsync, "ProjectStateCache"))

        self.assertTrue(hasattr(hubsync, "RemoteConfig"))
        self.assertTrue(hasattr(hubsync, "RemoteStore"))
        self.assertTrue(hasattr(hubsync, "RealtimeClient"))
        self.assertTrue(hasattr(hubsync, "DrainResult"))

        self.assertTrue(hasattr(hubsync, "HubSyncError"))
        self.assertTrue(hasattr(hubsync, "ReplayNotSupportedError"))

    def test___all___is_defined(self) -> None:
        self.assertTrue(hasattr(hubsync, "__all__"))
        self.assertIn("SyncController", hubsync.__all__)
        self.assertIn("HubSyncError", hubsync.__all__)
        for name in hubsync.__all__:
            self.assertTrue(hasattr(hubsync, name), name)


if __name__ == "__main__":
    unittest.main()
