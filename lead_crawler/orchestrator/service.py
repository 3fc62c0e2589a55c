"""Scan service that chains discovery and enrichment for a free-text query."""
from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from ..models import EnrichedLead, ProgressLine, ScanQuery
from ..progress import ProgressReporter
from .discovery import DiscoveryOrchestrator
from .enrichment import EnrichmentOrchestrator

LOGGER = logging.getLogger(__name__)

ResultCallback = Callable[[List[EnrichedLead]], None]

DEFAULT_LIMIT = 500

_CONNECTOR_RE = re.compile(r"\s+(?:in|near|around)\s+", re.I)


class ScanQueryError(ValueError):
    """Raised when a scan is requested with an empty or unusable query."""


def parse_query(query: str) -> ScanQuery:
    """Split ``"dental clinics in Austin, TX"`` into niche and location."""

    text = " ".join((query or "").split())
    if not text:
        raise ScanQueryError("Query is required")

    connectors = list(_CONNECTOR_RE.finditer(text))
    if connectors:
        last = connectors[-1]
        niche, location = text[: last.start()].strip(), text[last.end() :].strip()
    elif "," in text:
        niche, _, location = (part.strip() for part in text.partition(","))
    else:
        niche, location = text, ""

    niche = niche.strip(" ,")
    if not niche:
        raise ScanQueryError(f"Query {query!r} does not name a niche")
    return ScanQuery(niche=niche, location=location.strip(" ,"))


class ScanJob:
    """Handle for a scan running in the background."""

    def __init__(
        self, query: ScanQuery, future: Future[List[EnrichedLead]], progress: Optional[ProgressReporter] = None
    ) -> None:
        self.query = query
        self.progress = progress or ProgressReporter()
        self._future = future

    def cancel(self) -> bool:
        """Attempt to cancel the scan; only succeeds before it starts running."""

        return self._future.cancel()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> List[EnrichedLead]:
        return self._future.result(timeout=timeout)

    @property
    def lines(self) -> List[ProgressLine]:
        """Progress lines emitted by this scan only."""

        return self.progress.lines


class ScanService:
    """Runs discovery followed by enrichment and hands the leads to the caller.

    The service-level ``reporter`` is only a sink: each scan records its lines
    on a child reporter that forwards to the same callback.
    """

    def __init__(
        self,
        discovery: DiscoveryOrchestrator,
        enrichment: EnrichmentOrchestrator,
        *,
        reporter: Optional[ProgressReporter] = None,
        result_callback: Optional[ResultCallback] = None,
        max_concurrent_scans: int = 2,
    ) -> None:
        self._discovery = discovery
        self._enrichment = enrichment
        self._reporter = reporter or ProgressReporter()
        self._result_callback = result_callback
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_concurrent_scans))
        self._lock = threading.Lock()

    @property
    def reporter(self) -> ProgressReporter:
        return self._reporter

    def scan(self, query: str, limit: int = DEFAULT_LIMIT) -> ScanJob:
        """Validate ``query`` and start the scan in the background."""

        parsed = self._validate(query, limit)
        progress = self._reporter.child()
        future = self._executor.submit(self._run, parsed, limit, progress)
        return ScanJob(parsed, future, progress)

    def run(
        self, query: str, limit: int = DEFAULT_LIMIT, *, progress: Optional[ProgressReporter] = None
    ) -> List[EnrichedLead]:
        """Synchronous variant of :meth:`scan`; lines go to ``progress`` when given."""

        parsed = self._validate(query, limit)
        return self._run(parsed, limit, progress or self._reporter.child())

    def _validate(self, query: str, limit: int) -> ScanQuery:
        if limit <= 0:
            raise ScanQueryError(f"Scan limit must be positive, got {limit}")
        return parse_query(query)

    def _run(self, query: ScanQuery, limit: int, progress: ProgressReporter) -> List[EnrichedLead]:
        progress.info(f"[Scan] Starting scan for '{query.display()}' (limit {limit})")
        raw_leads = self._discovery.discover(query.niche, query.location, limit, reporter=progress)
        if not raw_leads:
            progress.warning("[Scan] Discovery returned no leads")
            leads: List[EnrichedLead] = []
        else:
            leads = self._enrichment.enrich_all(raw_leads, reporter=progress)
            with_email = sum(1 for lead in leads if lead.email)
            progress.success(f"[Scan] Completed: {len(leads)} leads, {with_email} with email")

        if self._result_callback is not None:
            try:
                self._result_callback(leads)
            except Exception:
                LOGGER.exception("Result callback failed for scan '%s'", query.display())
                progress.error("[Scan] Failed to deliver results")
                raise
        return leads

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            self._executor.shutdown(wait=wait, cancel_futures=True)
