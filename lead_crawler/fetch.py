"""HTTP page fetching with per-request identity rotation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

from .identity import IdentityPool

LOGGER = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a page could not be retrieved at the network level."""


@dataclass
class PageSnapshot:
    url: str
    status: int
    content_type: str
    body: str

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500


class PageFetcher:
    """Issues GET requests with a freshly rotated identity for every call.

    Non-2xx responses are returned as snapshots rather than raised: callers
    parse whatever the target rendered. Only transport failures raise
    :class:`FetchError`.
    """

    def __init__(
        self,
        identity: Optional[IdentityPool] = None,
        *,
        timeout: float = 8.0,
        max_redirects: int = 3,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.identity = identity or IdentityPool()
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.max_redirects = max_redirects

    def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> PageSnapshot:
        headers = self.identity.next_headers()
        proxies = self.identity.next_proxy()
        try:
            response = self._session.get(
                url,
                params=params,
                headers=headers,
                proxies=proxies,
                timeout=timeout if timeout is not None else self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise FetchError(f"GET {url} failed: {exc}") from exc

        snapshot = PageSnapshot(
            url=response.url or url,
            status=response.status_code,
            content_type=(response.headers.get("Content-Type") or "").lower(),
            body=response.text or "",
        )
        if snapshot.is_server_error:
            LOGGER.warning("Server error %s from %s", snapshot.status, snapshot.url)
        elif snapshot.is_client_error:
            LOGGER.debug("Client error %s from %s", snapshot.status, snapshot.url)
        return snapshot

    def close(self) -> None:
        self._session.close()
