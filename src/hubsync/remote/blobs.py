"""BlobStore: binary assets (images, voice notes) in object storage."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from hubsync.errors import HubSyncError
from hubsync.util.ids import new_uuid

from .config import RemoteConfig
from .http import HttpClient
from .tables import MOODBOARD_BUCKET, VOICE_NOTES_BUCKET

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Object-storage boundary: bytes + metadata in, stable public URL out.

    Paths:
        - moodboard/<project_id>/<uuid>.<ext> in MOODBOARD_BUCKET
        - voice-notes/<project_id>/<uuid>.webm in VOICE_NOTES_BUCKET
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._http = HttpClient(config, session=session)
        self._config = config

    @classmethod
    def from_session(cls, config: RemoteConfig, session: Any) -> "BlobStore":
        return cls(config, session=session)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._config.storage_url}/object/public/{bucket}/{path}"

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """
        Upload bytes and return their public URL.

        Raises:
            HubSyncError: on network or HTTP failure.
        """
        self._http.request(
            "POST",
            f"{self._config.storage_url}/object/{bucket}/{path}",
            data=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        return self.public_url(bucket, path)

    def upload_design_image(self, data: bytes, filename: str, content_type: str) -> str:
        ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
        path = f"moodboard/{self._config.project_id}/{new_uuid()}.{ext}"
        return self.upload(MOODBOARD_BUCKET, path, data, content_type)

    def upload_voice_note(self, data: bytes) -> str:
        path = f"voice-notes/{self._config.project_id}/{new_uuid()}.webm"
        return self.upload(VOICE_NOTES_BUCKET, path, data, "audio/webm")

    def remove(self, bucket: str, paths: list[str]) -> None:
        self._http.request(
            "DELETE",
            f"{self._config.storage_url}/object/{bucket}",
            json={"prefixes": paths},
        )

    def remove_by_url(self, bucket: str, url: str) -> bool:
        """
        Remove the object behind a public URL. Never raises.

        Returns False when the URL is not in bucket or removal fails; the
        database row is still deleted by the caller.
        """
        marker = f"/{bucket}/"
        if marker not in url:
            return False
        path = url.split(marker, 1)[1]
        try:
            self.remove(bucket, [path])
        except HubSyncError as exc:
            logger.warning("Failed to remove %s from %s: %s", path, bucket, exc)
            return False
        return True
