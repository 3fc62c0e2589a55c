"""Shared in-memory fakes for the network boundaries."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union

import pytest

from lead_crawler.fetch import FetchError, PageSnapshot
from lead_crawler.models import QualityAssessment, RawLead, RiskLevel, VerificationResult, WealthSignal
from lead_crawler.rate_limit import BackoffPolicy

PageSpec = Union[str, PageSnapshot, Exception]


class FakeFetcher:
    """Serves canned bodies by URL; unknown URLs fail like an unreachable host."""

    def __init__(self, pages: Optional[Dict[str, PageSpec]] = None) -> None:
        self.pages: Dict[str, PageSpec] = dict(pages or {})
        self.calls: List[str] = []
        self.timeouts: List[Optional[float]] = []

    def get(self, url: str, *, params=None, timeout: Optional[float] = None) -> PageSnapshot:
        self.calls.append(url)
        self.timeouts.append(timeout)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(f"GET {url} failed: no route to host")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, PageSnapshot):
            return page
        return PageSnapshot(url=url, status=200, content_type="text/html", body=page)


class StubSource:
    """Replays one result list per call, repeating the last one when exhausted."""

    def __init__(self, name: str, responses: Iterable[Union[List[RawLead], Exception]]) -> None:
        self.name = name
        self._responses = list(responses) or [[]]
        self.calls = 0
        self.limits: List[int] = []

    def search(self, niche: str, location: str, limit: int) -> List[RawLead]:
        self.limits.append(limit)
        response = self._responses[min(self.calls, len(self._responses) - 1)]
        self.calls += 1
        if isinstance(response, Exception):
            raise response
        return list(response)


class StubVerifier:
    def __init__(self, risk_level: RiskLevel = RiskLevel.LOW, valid: bool = True) -> None:
        self.risk_level = risk_level
        self.valid = valid
        self.calls: List[str] = []

    def verify(self, email: str) -> VerificationResult:
        self.calls.append(email)
        return VerificationResult(email=email, valid=self.valid, reason="stub", risk_level=self.risk_level)


class StubScorer:
    def __init__(self, assessment: Optional[QualityAssessment] = None, error: Optional[Exception] = None) -> None:
        self.assessment = assessment or QualityAssessment(70, WealthSignal.HIGH, "$50k-$100k")
        self.error = error
        self.calls: List[tuple] = []

    def assess(self, entity: str, text: str, email: str) -> QualityAssessment:
        self.calls.append((entity, text, email))
        if self.error is not None:
            raise self.error
        return self.assessment


def make_leads(prefix: str, count: int) -> List[RawLead]:
    return [RawLead(entity=f"{prefix} {index}", website=f"https://{prefix.lower()}{index}.example.net") for index in range(count)]


@pytest.fixture
def no_sleep():
    delays: List[float] = []
    return delays.append


@pytest.fixture
def zero_backoff() -> BackoffPolicy:
    return BackoffPolicy(attempts=5, base_delay=0.0)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()
