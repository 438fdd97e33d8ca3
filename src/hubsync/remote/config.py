"""Remote store configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlencode, urlparse

from dotenv import load_dotenv

from .tables import DEFAULT_PROJECT_ID

ENV_URL = "HUBSYNC_SUPABASE_URL"
ENV_ANON_KEY = "HUBSYNC_SUPABASE_ANON_KEY"
ENV_PROJECT_ID = "HUBSYNC_PROJECT_ID"


@dataclass(slots=True, frozen=True)
class RemoteConfig:
    """
    Connection settings for the managed database.

    url is the project base URL (https://<ref>.supabase.co); REST, storage
    and realtime endpoints are derived from it.
    """

    url: str
    anon_key: str
    project_id: str = DEFAULT_PROJECT_ID
    timeout: float = 30.0

    def __post_init__(self) -> None:
        for name in ("url", "anon_key", "project_id"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"RemoteConfig.{name} must be a non-empty string")

        parsed = urlparse(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"RemoteConfig.url must be an http(s) URL: {self.url!r}")

        if self.timeout <= 0:
            raise ValueError("RemoteConfig.timeout must be positive")

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    @property
    def storage_url(self) -> str:
        return f"{self.base_url}/storage/v1"

    @property
    def realtime_url(self) -> str:
        parsed = urlparse(self.base_url)
        scheme = "wss" if parsed.scheme == "https" else "ws"
        query = urlencode({"apikey": self.anon_key, "vsn": "1.0.0"})
        return f"{scheme}://{parsed.netloc}/realtime/v1/websocket?{query}"

    @property
    def host(self) -> str:
        return urlparse(self.base_url).hostname or ""

    @property
    def port(self) -> int:
        parsed = urlparse(self.base_url)
        if parsed.port:
            return parsed.port
        return 443 if parsed.scheme == "https" else 80

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[str] = None,
    ) -> Optional[RemoteConfig]:
        """
        Read configuration from the environment (and a .env file).

        Returns None when URL or key is missing: the caller runs local-only.
        """
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        url = environ.get(ENV_URL, "").strip()
        key = environ.get(ENV_ANON_KEY, "").strip()
        if not url or not key:
            return None

        project_id = environ.get(ENV_PROJECT_ID, "").strip() or DEFAULT_PROJECT_ID
        return cls(url=url, anon_key=key, project_id=project_id)
