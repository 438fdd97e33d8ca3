import unittest
from unittest.mock import MagicMock, patch

from hubsync.connectivity import ConnectivityMonitor
from hubsync.models import ConnectivityState
from hubsync.remote import RemoteConfig


class TestConnectivityMonitor(unittest.TestCase):
    def test_for_config_uses_host_and_port(self) -> None:
        monitor = ConnectivityMonitor.for_config(RemoteConfig(url="http://localhost:54321", anon_key="k"))
        with patch("hubsync.connectivity.socket.create_connection") as create:
            create.return_value = MagicMock()
            self.assertIs(monitor.probe(), ConnectivityState.ONLINE)
        self.assertEqual(create.call_args.args[0], ("localhost", 54321))

    def test_probe_offline_on_os_error(self) -> None:
        monitor = ConnectivityMonitor("abc.supabase.co")
        with patch("hubsync.connectivity.socket.create_connection", side_effect=OSError("unreachable")):
            self.assertIs(monitor.probe(), ConnectivityState.OFFLINE)

    def test_rejects_empty_host(self) -> None:
        with self.assertRaises(ValueError):
            ConnectivityMonitor("")


if __name__ == "__main__":
    unittest.main()
