"""Organic web search sources (Google and Bing result pages)."""
from __future__ import annotations

import logging
from typing import List

from bs4 import BeautifulSoup

from ..models import LeadSource, RawLead
from .base import SNIPPET_LIMIT, SearchSource, clean_title, unwrap_redirect

LOGGER = logging.getLogger(__name__)


class GoogleSearchSource(SearchSource):
    """Parses organic ``.g`` result blocks from a Google results page."""

    name = "Google"
    kind = LeadSource.GENERAL_SEARCH
    SEARCH_URL = "https://www.google.com/search"

    def build_query(self, niche: str, location: str) -> str:
        return f"{niche} {location} contact email -linkedin -facebook -yelp".replace("  ", " ").strip()

    def _search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        body = self._fetch(self.SEARCH_URL, q=self.build_query(niche, location), num=limit, hl="en")
        return self.parse_results(body, limit)

    def parse_results(self, body: str, limit: int) -> List[RawLead]:
        document = BeautifulSoup(body or "", "html.parser")
        results: List[RawLead] = []
        for block in document.select("div.g"):
            if len(results) >= limit:
                break
            heading = block.find("h3")
            anchor = block.find("a", href=True)
            if heading is None or anchor is None:
                continue
            title = clean_title(heading.get_text(" ", strip=True))
            link = unwrap_redirect(anchor["href"])
            if not title or not link.startswith("http") or self.is_blocked(link):
                continue
            snippet_node = block.select_one(".VwiC3b, .IsZvec")
            snippet = snippet_node.get_text(" ", strip=True) if snippet_node else ""
            results.append(RawLead(entity=title, website=link, snippet=snippet[:SNIPPET_LIMIT], source=self.kind))
        LOGGER.debug("Google returned %s usable results", len(results))
        return results


class BingSearchSource(SearchSource):
    """Parses ``li.b_algo`` result blocks from a Bing results page."""

    name = "Bing"
    kind = LeadSource.SECONDARY_SEARCH
    SEARCH_URL = "https://www.bing.com/search"

    def build_query(self, niche: str, location: str) -> str:
        if location:
            return f"{niche} in {location} contact"
        return f"{niche} contact"

    def _search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        body = self._fetch(self.SEARCH_URL, q=self.build_query(niche, location), count=limit)
        return self.parse_results(body, limit)

    def parse_results(self, body: str, limit: int) -> List[RawLead]:
        document = BeautifulSoup(body or "", "html.parser")
        results: List[RawLead] = []
        for block in document.select(".b_algo"):
            if len(results) >= limit:
                break
            anchor = block.select_one("h2 a[href]")
            if anchor is None:
                continue
            title = clean_title(anchor.get_text(" ", strip=True))
            link = anchor["href"]
            if not title or not link.startswith("http") or self.is_blocked(link):
                continue
            snippet_node = block.select_one(".b_caption p")
            snippet = snippet_node.get_text(" ", strip=True) if snippet_node else ""
            results.append(RawLead(entity=title, website=link, snippet=snippet[:SNIPPET_LIMIT], source=self.kind))
        return results
