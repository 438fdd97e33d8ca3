import os
import tempfile
import unittest

from hubsync.remote import DEFAULT_PROJECT_ID, RemoteConfig


class TestRemoteConfig(unittest.TestCase):
    def test_endpoints_are_derived_from_url(self) -> None:
        config = RemoteConfig(url="https://abc.supabase.co/", anon_key="KEY")
        self.assertEqual(config.project_id, DEFAULT_PROJECT_ID)
        self.assertEqual(config.rest_url, "https://abc.supabase.co/rest/v1")
        self.assertEqual(config.storage_url, "https://abc.supabase.co/storage/v1")
        self.assertEqual(
            config.realtime_url,
            "wss://abc.supabase.co/realtime/v1/websocket?apikey=KEY&vsn=1.0.0",
        )
        self.assertEqual(config.host, "abc.supabase.co")
        self.assertEqual(config.port, 443)

    def test_plain_http_uses_ws_and_explicit_port(self) -> None:
        config = RemoteConfig(url="http://localhost:54321", anon_key="k")
        self.assertTrue(config.realtime_url.startswith("ws://localhost:54321/"))
        self.assertEqual(config.port, 54321)

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            RemoteConfig(url="", anon_key="k")
        with self.assertRaises(ValueError):
            RemoteConfig(url="https://x.co", anon_key=" ")
        with self.assertRaises(ValueError):
            RemoteConfig(url="ftp://x.co", anon_key="k")
        with self.assertRaises(ValueError):
            RemoteConfig(url="https://x.co", anon_key="k", timeout=0)

    def test_from_env_missing_values_means_local_only(self) -> None:
        self.assertIsNone(RemoteConfig.from_env({}))
        self.assertIsNone(RemoteConfig.from_env({"HUBSYNC_SUPABASE_URL": "https://x.co"}))

    def test_from_env_reads_values(self) -> None:
        config = RemoteConfig.from_env(
            {
                "HUBSYNC_SUPABASE_URL": "https://x.co",
                "HUBSYNC_SUPABASE_ANON_KEY": "k",
                "HUBSYNC_PROJECT_ID": "site-42",
            }
        )
        self.assertEqual(config.project_id, "site-42")
        self.assertEqual(config.anon_key, "k")

    def test_from_env_loads_dotenv_file(self) -> None:
        names = ("HUBSYNC_SUPABASE_URL", "HUBSYNC_SUPABASE_ANON_KEY", "HUBSYNC_PROJECT_ID")
        saved = {name: os.environ.pop(name, None) for name in names}
        try:
            with tempfile.TemporaryDirectory() as tmp:
                path = os.path.join(tmp, ".env")
                with open(path, "w", encoding="utf-8") as f:
                    f.write("HUBSYNC_SUPABASE_URL=https://dotenv.supabase.co\n")
                    f.write("HUBSYNC_SUPABASE_ANON_KEY=from-file\n")

                config = RemoteConfig.from_env(dotenv_path=path)
        finally:
            for name in names:
                os.environ.pop(name, None)
                if saved[name] is not None:
                    os.environ[name] = saved[name]

        self.assertEqual(config.url, "https://dotenv.supabase.co")
        self.assertEqual(config.anon_key, "from-file")
        self.assertEqual(config.project_id, DEFAULT_PROJECT_ID)


if __name__ == "__main__":
    unittest.main()
