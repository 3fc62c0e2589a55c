"""Map listing source: business cards from a maps search page."""
from __future__ import annotations

from typing import List
from urllib.parse import quote

from bs4 import BeautifulSoup

from ..models import LeadSource, RawLead
from .base import SNIPPET_LIMIT, SearchSource, clean_title


class MapsListingSource(SearchSource):
    """Reads name and address text from ``[role=article]`` listing cards.

    Listings carry no website at this stage, so every lead has an empty
    ``website`` and is deduplicated by name.
    """

    name = "Google Maps"
    kind = LeadSource.MAPS
    SEARCH_URL = "https://www.google.com/maps/search/"

    def _search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        query = f"{niche} {location}".strip()
        body = self._fetch(self.SEARCH_URL + quote(query))
        return self.parse_results(body, limit)

    def parse_results(self, body: str, limit: int) -> List[RawLead]:
        document = BeautifulSoup(body or "", "html.parser")
        results: List[RawLead] = []
        for card in document.select('[role="article"]'):
            if len(results) >= limit:
                break
            name_node = card.select_one('[class*="fontHeadline"]')
            name = name_node.get_text(" ", strip=True) if name_node else (card.get("aria-label") or "")
            name = clean_title(name)
            if not name:
                continue
            address_node = card.select_one('[class*="fontBody"]')
            address = address_node.get_text(" ", strip=True) if address_node else ""
            results.append(RawLead(entity=name, website="", snippet=address[:SNIPPET_LIMIT], source=self.kind))
        return results
