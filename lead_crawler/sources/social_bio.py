"""Social bio source: profiles under a topic tag whose bio exposes an email address."""
from __future__ import annotations

import json
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from ..fetch import FetchError, PageFetcher
from ..models import LeadSource, RawLead
from ..rate_limit import DelayPolicy
from .base import SNIPPET_LIMIT, SearchSource

LOGGER = logging.getLogger(__name__)

_USERNAME_RE = re.compile(r'"username":"([A-Za-z0-9._]{1,30})"')
_BIOGRAPHY_RE = re.compile(r'"biography":"((?:[^"\\]|\\.)*)"')
_FULL_NAME_RE = re.compile(r'"full_name":"((?:[^"\\]|\\.)*)"')
_BIO_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

ROLE_KEYWORDS: Sequence[Tuple[str, Sequence[str]]] = (
    ("CEO", ("ceo", "chief executive")),
    ("Founder", ("founder", "co-founder")),
    ("CTO", ("cto", "chief technology")),
    ("CMO", ("cmo", "chief marketing")),
    ("Owner", ("owner",)),
    ("Sales", ("sales", "business development")),
    ("Marketing", ("marketing", "growth")),
    ("Developer", ("developer", "engineer", "programmer")),
)
DEFAULT_ROLE = "Professional"


def infer_role(bio: str) -> str:
    words = set(re.findall(r"[a-z][a-z\-]*", (bio or "").lower()))
    lowered = (bio or "").lower()
    for role, keywords in ROLE_KEYWORDS:
        for keyword in keywords:
            if (" " in keyword and keyword in lowered) or keyword in words:
                return role
    return DEFAULT_ROLE


def _decode(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


class SocialBioSource(SearchSource):
    """Two-stage source: collect handles from a tag page, then read each profile's bio.

    Handle collection is capped at ``handle_multiplier * limit`` because most
    bios carry no email. Profiles are fetched ``batch_size`` at a time with a
    ``batch_pause_seconds`` pause between batches.
    """

    name = "Instagram"
    kind = LeadSource.SOCIAL_BIO
    BASE_URL = "https://www.instagram.com"

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        *,
        timeout: Optional[float] = None,
        profile_timeout: float = 5.0,
        batch_size: int = 10,
        batch_pause_seconds: float = 0.5,
        handle_multiplier: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(fetcher, timeout=timeout)
        self.profile_timeout = profile_timeout
        self.batch_size = max(1, int(batch_size))
        self.batch_pause = DelayPolicy(delay_seconds=float(batch_pause_seconds))
        self.handle_multiplier = max(1, int(handle_multiplier))
        self._sleep = sleep

    @staticmethod
    def tag_for(niche: str) -> str:
        return re.sub(r"[^a-z0-9_]", "", (niche or "").lower())

    def _search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        handles = self.collect_handles(niche, limit * self.handle_multiplier)
        LOGGER.info("%s: collected %s handles for #%s", self.name, len(handles), self.tag_for(niche))
        return self.batched_enrich_handles(handles, limit)

    def collect_handles(self, niche: str, cap: int) -> List[str]:
        tag = self.tag_for(niche)
        if not tag or cap <= 0:
            return []
        body = self._fetch(f"{self.BASE_URL}/explore/tags/{tag}/")
        return self.parse_handles(body, cap)

    @staticmethod
    def parse_handles(body: str, cap: int) -> List[str]:
        handles: dict[str, None] = {}
        for match in _USERNAME_RE.finditer(body or ""):
            if len(handles) >= cap:
                break
            handles.setdefault(match.group(1), None)
        return list(handles)

    def batched_enrich_handles(self, handles: Sequence[str], limit: int) -> List[RawLead]:
        results: List[RawLead] = []
        if not handles:
            return results
        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for start in range(0, len(handles), self.batch_size):
                if len(results) >= limit:
                    break
                batch = handles[start : start + self.batch_size]
                for lead in executor.map(self.fetch_profile, batch):
                    if lead is not None and lead.email:
                        results.append(lead)
                if start + self.batch_size < len(handles) and len(results) < limit:
                    self.batch_pause.pause(self._sleep)
        return results[:limit]

    def fetch_profile(self, handle: str) -> Optional[RawLead]:
        profile_url = f"{self.BASE_URL}/{handle}/"
        try:
            snapshot = self.fetcher.get(profile_url, timeout=self.profile_timeout)
        except FetchError as exc:
            LOGGER.debug("Profile %s unavailable: %s", handle, exc)
            return None
        return self.parse_profile(handle, profile_url, snapshot.body)

    def parse_profile(self, handle: str, profile_url: str, body: str) -> Optional[RawLead]:
        bio, full_name = self._extract_bio(body)
        if not bio:
            return None
        emails = _BIO_EMAIL_RE.findall(bio)
        if not emails:
            return None
        return RawLead(
            entity=full_name or handle,
            website=profile_url,
            snippet=bio[:SNIPPET_LIMIT],
            source=self.kind,
            email=emails[0].lower(),
            role=infer_role(bio),
            social_profiles={"instagram": profile_url},
        )

    @staticmethod
    def _extract_bio(body: str) -> Tuple[str, str]:
        text = body or ""
        bio_match = _BIOGRAPHY_RE.search(text)
        name_match = _FULL_NAME_RE.search(text)
        full_name = _decode(name_match.group(1)).strip() if name_match else ""
        if bio_match:
            bio = _decode(bio_match.group(1))
        else:
            meta = BeautifulSoup(text, "html.parser").select_one('meta[property="og:description"]')
            bio = (meta.get("content") or "") if meta is not None else ""
        return " ".join(bio.split()), full_name
