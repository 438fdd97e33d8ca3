"""Shared HTTP plumbing for the REST and storage endpoints."""

from __future__ import annotations

from typing import Any, Optional

import requests

from hubsync.errors import ApiError, HttpErrorInfo, NetworkError, map_http_error

from .config import RemoteConfig


class HttpClient:
    """
    requests.Session wrapper with API-key headers and error mapping.

    Notes:
        - No retry: failed writes are deferred to the offline queue instead.
        - All failures surface as hubsync errors (NetworkError for transport
          problems, map_http_error for HTTP status codes).
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "apikey": config.anon_key,
                "Authorization": f"Bearer {config.anon_key}",
            }
        )

    @property
    def config(self) -> RemoteConfig:
        return self._config

    def close(self) -> None:
        self._session.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        data: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                headers=headers,
                timeout=self._config.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise NetworkError(
                "Network error",
                details={"method": method, "url": url},
                cause=exc,
            ) from exc
        except requests.RequestException as exc:
            raise ApiError("Request failed", details={"method": method, "url": url}, cause=exc) from exc

        if resp.status_code >= 400:
            raise map_http_error(_response_to_info(resp))
        return resp


def _response_to_info(resp: requests.Response) -> HttpErrorInfo:
    code = None
    message = None
    details: dict[str, Any] = {}

    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        if isinstance(payload.get("code"), str):
            code = payload["code"]
        msg = payload.get("message") or payload.get("error")
        if isinstance(msg, str):
            message = msg
        for key in ("details", "hint"):
            if payload.get(key):
                details[key] = payload[key]

    return HttpErrorInfo(
        status_code=resp.status_code,
        code=code,
        message=message,
        details=details or None,
    )
