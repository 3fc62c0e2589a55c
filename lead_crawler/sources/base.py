"""Common utilities shared by the discovery sources."""
from __future__ import annotations

import logging
import re
from typing import ClassVar, FrozenSet, List, Optional, Protocol
from urllib.parse import parse_qs, urlparse

from ..fetch import FetchError, PageFetcher
from ..models import LeadSource, RawLead

LOGGER = logging.getLogger(__name__)

SNIPPET_LIMIT = 200
ENTITY_LIMIT = 100

# aggregator and social domains that never count as a business website
DEFAULT_BLOCKED_DOMAINS: FrozenSet[str] = frozenset(
    {
        "facebook.com",
        "linkedin.com",
        "instagram.com",
        "yelp.com",
        "yellowpages.com",
        "bbb.org",
        "wikipedia.org",
        "youtube.com",
        "twitter.com",
        "x.com",
        "tiktok.com",
        "pinterest.com",
        "amazon.com",
        "ebay.com",
        "google.com",
        "bing.com",
        "microsoft.com",
    }
)

_TITLE_SUFFIX_RE = re.compile(r"\s*(?:\||\s[–—-]\s|\s::\s).*$")


class SourceProtocol(Protocol):
    """Interface that discovery sources must follow."""

    name: str

    def search(self, niche: str, location: str, limit: int) -> List[RawLead]:  # pragma: no cover - runtime protocol
        """Return up to ``limit`` raw leads; an empty list is a valid outcome."""


def clean_title(title: str) -> str:
    """Collapse whitespace and drop a trailing " | Site Name" or " - Site Name" suffix."""

    text = " ".join((title or "").split())
    text = _TITLE_SUFFIX_RE.sub("", text).strip()
    return text[:ENTITY_LIMIT]


def host_of(url: str) -> str:
    try:
        host = urlparse(url).netloc.lower()
    except ValueError:
        return ""
    host = host.rsplit("@", 1)[-1].split(":", 1)[0]
    return host[4:] if host.startswith("www.") else host


def unwrap_redirect(href: str) -> str:
    """Resolve search-engine redirect links such as ``/url?q=https://...``."""

    if href.startswith("/url?") or "google.com/url?" in href:
        target = parse_qs(urlparse(href).query).get("q")
        if target:
            return target[0]
    return href


class SearchSource:
    """Base class exposing shared fetching and filtering helpers for sources."""

    name: ClassVar[str] = "source"
    kind: ClassVar[LeadSource] = LeadSource.GENERAL_SEARCH
    blocked_domains: FrozenSet[str] = DEFAULT_BLOCKED_DOMAINS

    def __init__(self, fetcher: Optional[PageFetcher] = None, *, timeout: Optional[float] = None) -> None:
        self.fetcher = fetcher or PageFetcher()
        self.timeout = timeout

    def search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        if limit <= 0:
            return []
        try:
            leads = self._search(niche, location, limit)
        except FetchError as exc:
            LOGGER.warning("%s search failed: %s", self.name, exc)
            return []
        return leads[:limit]

    def _search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        raise NotImplementedError

    def is_blocked(self, url: str) -> bool:
        host = host_of(url)
        if not host:
            return True
        return any(host == domain or host.endswith("." + domain) for domain in self.blocked_domains)

    def _fetch(self, url: str, **params) -> str:
        snapshot = self.fetcher.get(url, params=params or None, timeout=self.timeout)
        return snapshot.body
