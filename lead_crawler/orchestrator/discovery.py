"""Discovery orchestrator that fans out to every source and merges the results."""
from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from ..merge import merge_raw_leads
from ..models import RawLead
from ..progress import ProgressReporter
from ..rate_limit import BackoffPolicy, retry_with_backoff
from ..sources.base import SourceProtocol

LOGGER = logging.getLogger(__name__)


class DiscoveryOrchestrator:
    """Runs all sources concurrently, retrying each one until it yields results."""

    def __init__(
        self,
        sources: Sequence[SourceProtocol],
        *,
        reporter: Optional[ProgressReporter] = None,
        backoff: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._sources = list(sources)
        self._reporter = reporter or ProgressReporter()
        self._backoff = backoff or BackoffPolicy()
        self._sleep = sleep

    @property
    def sources(self) -> List[SourceProtocol]:
        return list(self._sources)

    def per_source_limit(self, limit: int) -> int:
        if not self._sources or limit <= 0:
            return 0
        return math.ceil(limit / len(self._sources))

    def discover(
        self, niche: str, location: str, limit: int, *, reporter: Optional[ProgressReporter] = None
    ) -> List[RawLead]:
        """Return at most ``limit`` deduplicated raw leads; never raises for source failures.

        ``reporter`` overrides the orchestrator's own sink for this call.
        """

        if not self._sources or limit <= 0:
            return []

        reporter = reporter or self._reporter
        share = self.per_source_limit(limit)
        reporter.info(
            f"[Discovery] Target: {limit} leads | {len(self._sources)} sources, {share} per source"
        )

        with ThreadPoolExecutor(max_workers=len(self._sources)) as executor:
            futures = [
                executor.submit(self._run_source, source, niche, location, share, reporter)
                for source in self._sources
            ]
            batches = [future.result() for future in futures]

        unique = merge_raw_leads(batches, limit=limit)
        if unique:
            reporter.success(f"[Discovery] Found {len(unique)} unique leads")
        else:
            reporter.warning("[Discovery] No source produced any leads")
        return unique

    def _run_source(
        self, source: SourceProtocol, niche: str, location: str, limit: int, reporter: ProgressReporter
    ) -> List[RawLead]:
        attempts = self._backoff.attempts

        def attempt(number: int) -> List[RawLead]:
            LOGGER.debug("Running source %s (attempt %s/%s)", source.name, number, attempts)
            return list(source.search(niche, location, limit) or [])

        def on_retry(number: int, error: Optional[BaseException]) -> None:
            reason = f"error: {error}" if error is not None else "fragment missing"
            reporter.warning(
                f"[{source.name}] {reason}, retrying with new identity ({number + 1}/{attempts})"
            )

        try:
            results = retry_with_backoff(attempt, self._backoff, on_retry=on_retry, sleep=self._sleep) or []
        except Exception:  # pragma: no cover - attempt failures are absorbed by retry_with_backoff
            LOGGER.exception("Source %s failed", source.name)
            results = []

        if results:
            reporter.success(f"[{source.name}] Found {len(results)} leads")
        else:
            reporter.warning(f"[{source.name}] Unavailable after {attempts} attempts")
        return results
