"""Video platform source: channel results from a YouTube channel search."""
from __future__ import annotations

import json
import re
from typing import Dict, List, Tuple

from bs4 import BeautifulSoup

from ..models import LeadSource, RawLead
from .base import SearchSource, clean_title

_CHANNEL_URL_RE = re.compile(r'"url":"(/(?:channel/[A-Za-z0-9_\-]+|@[A-Za-z0-9_.\-]+))"')
_CHANNEL_TITLE_RE = re.compile(r'"title":\{"simpleText":"((?:[^"\\]|\\.)*)"\}|"title":\{"runs":\[\{"text":"((?:[^"\\]|\\.)*)"')


def _decode_json_string(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


class VideoChannelSource(SearchSource):
    """Collects channel names and URLs; the channel URL doubles as the ``video`` profile."""

    name = "YouTube"
    kind = LeadSource.VIDEO
    BASE_URL = "https://www.youtube.com"
    SEARCH_URL = "https://www.youtube.com/results"
    CHANNEL_FILTER = "EgIQAg%3D%3D"

    def _search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        query = f"{niche} {location} contact".replace("  ", " ").strip()
        body = self._fetch(self.SEARCH_URL, search_query=query, sp=self.CHANNEL_FILTER)
        return self.parse_results(body, limit)

    def parse_results(self, body: str, limit: int) -> List[RawLead]:
        channels = self._channels_from_markup(body) or self._channels_from_embedded_data(body)
        results: List[RawLead] = []
        seen: set[str] = set()
        for title, path in channels:
            if len(results) >= limit:
                break
            url = path if path.startswith("http") else f"{self.BASE_URL}{path}"
            entity = clean_title(title)
            if not entity or url in seen:
                continue
            seen.add(url)
            results.append(
                RawLead(
                    entity=entity,
                    website=url,
                    snippet="",
                    source=self.kind,
                    social_profiles={"video": url},
                )
            )
        return results

    def _channels_from_markup(self, body: str) -> List[Tuple[str, str]]:
        document = BeautifulSoup(body or "", "html.parser")
        pairs: List[Tuple[str, str]] = []
        for anchor in document.select("a#channel-title[href], ytd-channel-renderer a[href]"):
            href = anchor.get("href") or ""
            text = anchor.get_text(" ", strip=True)
            if text and (href.startswith("/channel/") or href.startswith("/@")):
                pairs.append((text, href))
        return pairs

    def _channels_from_embedded_data(self, body: str) -> List[Tuple[str, str]]:
        """Pair channel URLs with titles from the ``ytInitialData`` JSON blob, in page order."""

        text = body or ""
        urls = [match.group(1) for match in _CHANNEL_URL_RE.finditer(text)]
        titles = [
            _decode_json_string(match.group(1) or match.group(2) or "")
            for match in _CHANNEL_TITLE_RE.finditer(text)
        ]
        unique_urls: Dict[str, None] = dict.fromkeys(urls)
        return list(zip(titles, unique_urls))
