from __future__ import annotations

import pytest

from conftest import FakeFetcher, StubScorer, StubSource, StubVerifier, make_leads

from lead_crawler.config import CrawlerSettings
from lead_crawler.models import ScanQuery
from lead_crawler.orchestrator import (
    DiscoveryOrchestrator,
    EnrichmentOrchestrator,
    ScanQueryError,
    ScanService,
    parse_query,
)
from lead_crawler.progress import ProgressReporter
from lead_crawler.rate_limit import BackoffPolicy


@pytest.mark.parametrize(
    "query, expected",
    [
        ("dental clinics in Austin, TX", ScanQuery("dental clinics", "Austin, TX")),
        ("plumbers near  Denver", ScanQuery("plumbers", "Denver")),
        ("yoga studios, Portland OR", ScanQuery("yoga studios", "Portland OR")),
        ("coffee roasters", ScanQuery("coffee roasters", "")),
        ("bed and breakfast in wine country in Napa", ScanQuery("bed and breakfast in wine country", "Napa")),
    ],
)
def test_parse_query_splits_niche_and_location(query, expected) -> None:
    assert parse_query(query) == expected


@pytest.mark.parametrize("query", ["", "   ", ", Austin"])
def test_parse_query_rejects_queries_without_a_niche(query) -> None:
    with pytest.raises(ScanQueryError):
        parse_query(query)


def _service(sources, reporter=None, **kwargs) -> ScanService:
    reporter = reporter or ProgressReporter()
    discovery = DiscoveryOrchestrator(
        sources,
        reporter=reporter,
        backoff=BackoffPolicy(attempts=2, base_delay=0.0),
        sleep=lambda _: None,
    )
    enrichment = EnrichmentOrchestrator(
        FakeFetcher({"https://alpha0.example.net/": "<p>jane@gmail.com</p>"}),
        verifier=StubVerifier(),
        scorer=StubScorer(),
        reporter=reporter,
        settings=CrawlerSettings(concurrency=5),
    )
    return ScanService(discovery, enrichment, reporter=reporter, **kwargs)


def test_run_chains_discovery_and_enrichment() -> None:
    delivered = []
    service = _service(
        [StubSource("Google", [make_leads("Alpha", 3)]), StubSource("Bing", [make_leads("Bravo", 2)])],
        result_callback=delivered.append,
    )

    progress = ProgressReporter()
    leads = service.run("dental clinics in Austin, TX", limit=20, progress=progress)

    assert len(leads) == 5
    assert leads[0].email == "jane@gmail.com"
    assert delivered == [leads]
    texts = [line.text for line in progress.lines]
    assert texts[0] == "[Scan] Starting scan for 'dental clinics in Austin, TX' (limit 20)"
    assert texts[-1] == "[Scan] Completed: 5 leads, 1 with email"
    service.shutdown()


def test_scan_runs_in_background_and_returns_job() -> None:
    service = _service([StubSource("Google", [make_leads("Alpha", 2)])])

    job = service.scan("bakeries near Austin", limit=10)

    assert job.query == ScanQuery("bakeries", "Austin")
    leads = job.result(timeout=10)
    assert job.done()
    assert [lead.entity for lead in leads] == ["Alpha 0", "Alpha 1"]
    service.shutdown(wait=True)


def test_scan_validates_before_starting_work() -> None:
    source = StubSource("Google", [make_leads("Alpha", 2)])
    service = _service([source])

    with pytest.raises(ScanQueryError):
        service.scan("   ")
    with pytest.raises(ScanQueryError):
        service.scan("bakeries", limit=0)

    assert source.calls == 0
    service.shutdown()


def test_empty_discovery_delivers_empty_result() -> None:
    delivered = []
    service = _service([StubSource("Google", [[]])], result_callback=delivered.append)

    progress = ProgressReporter()
    assert service.run("bakeries", progress=progress) == []
    assert delivered == [[]]
    assert "[Scan] Discovery returned no leads" in [line.text for line in progress.lines]
    service.shutdown()


def test_each_scan_keeps_its_own_progress_lines() -> None:
    forwarded = []
    service = _service(
        [StubSource("Google", [make_leads("Alpha", 2)])],
        reporter=ProgressReporter(forwarded.append),
    )

    first = service.scan("bakeries near Austin", limit=10)
    second = service.scan("florists in Denver", limit=10)
    first.result(timeout=10)
    second.result(timeout=10)
    service.shutdown(wait=True)

    first_texts = [line.text for line in first.lines]
    second_texts = [line.text for line in second.lines]
    assert first_texts[0] == "[Scan] Starting scan for 'bakeries in Austin' (limit 10)"
    assert second_texts[0] == "[Scan] Starting scan for 'florists in Denver' (limit 10)"
    assert not any("florists" in text for text in first_texts)
    assert first_texts[-1] == second_texts[-1] == "[Scan] Completed: 2 leads, 1 with email"
    assert len(forwarded) == len(first_texts) + len(second_texts)
    assert service.reporter.lines == []
