"""Network reachability probe for the remote store."""

from __future__ import annotations

import logging
import socket

from hubsync.models import ConnectivityState
from hubsync.remote import RemoteConfig

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """
    Derives ConnectivityState from a TCP connect to the remote host.

    probe() is cheap enough to call before a sync decision; it does not run
    in the background.
    """

    def __init__(self, host: str, port: int = 443, *, timeout: float = 3.0) -> None:
        if not host:
            raise ValueError("host must be a non-empty string")
        self._host = host
        self._port = port
        self._timeout = timeout

    @classmethod
    def for_config(cls, config: RemoteConfig, *, timeout: float = 3.0) -> "ConnectivityMonitor":
        return cls(config.host, config.port, timeout=timeout)

    def probe(self) -> ConnectivityState:
        try:
            with socket.create_connection((self._host, self._port), timeout=self._timeout):
                return ConnectivityState.ONLINE
        except OSError as exc:
            logger.debug("Probe %s:%d failed: %s", self._host, self._port, exc)
            return ConnectivityState.OFFLINE
