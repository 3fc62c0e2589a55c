"""Enrichment orchestrator: visits each candidate's site and scores the result."""
from __future__ import annotations

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence
from urllib.parse import urlparse, urlunparse

from ..classify import select_email
from ..config import CrawlerSettings
from ..extract import (
    extract_emails,
    extract_location,
    extract_phones,
    extract_social_profiles,
    find_contact_link,
    parse_document,
    visible_text,
)
from ..fetch import FetchError, PageFetcher
from ..models import FALLBACK_ASSESSMENT, EnrichedLead, QualityAssessment, RawLead, WealthSignal
from ..progress import ProgressReporter
from ..scoring import HeuristicQualityScorer, QualityScorer, ScorerError, clamp_score
from ..verifier import EmailVerifierProtocol

LOGGER = logging.getLogger(__name__)

SOCIAL_BIO_SCORE = 85
SOCIAL_BIO_WEALTH = WealthSignal.MEDIUM

_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9\-_]{0,62}[A-Za-z0-9])?"
_HOST_RE = re.compile(rf"^{_LABEL}(?:\.{_LABEL})+$")
_MAX_URL_LENGTH = 2048


def normalize_website(raw: str) -> Optional[str]:
    """Return an absolute http(s) URL for ``raw`` or ``None`` when it cannot be one.

    Internationalized host names are converted to their IDNA (punycode) form.
    """

    text = (raw or "").strip()
    if not text or len(text) > _MAX_URL_LENGTH or any(ch.isspace() for ch in text):
        return None
    if "://" not in text:
        text = "https://" + text.lstrip("/")
    try:
        parsed = urlparse(text)
        hostname = parsed.hostname or ""
        port = parsed.port
        if port == 0:
            return None
    except ValueError:
        return None
    if parsed.scheme.lower() not in ("http", "https"):
        return None

    netloc = parsed.netloc
    if not hostname.isascii():
        try:
            hostname = hostname.encode("idna").decode("ascii")
        except UnicodeError:
            return None
        userinfo = parsed.netloc.rpartition("@")[0]
        netloc = hostname if port is None else f"{hostname}:{port}"
        if userinfo:
            netloc = f"{userinfo}@{netloc}"
    if not _HOST_RE.match(hostname):
        return None
    return urlunparse((parsed.scheme.lower(), netloc, parsed.path or "/", parsed.params, parsed.query, ""))


class EnrichmentOrchestrator:
    """Enriches raw leads in fixed-size concurrent batches."""

    def __init__(
        self,
        fetcher: PageFetcher,
        *,
        verifier: Optional[EmailVerifierProtocol] = None,
        scorer: Optional[QualityScorer] = None,
        reporter: Optional[ProgressReporter] = None,
        settings: Optional[CrawlerSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._verifier = verifier
        self._scorer = scorer or HeuristicQualityScorer()
        self._reporter = reporter or ProgressReporter()
        self._settings = settings or CrawlerSettings()
        self._clock = clock

    @property
    def batch_size(self) -> int:
        return max(1, self._settings.concurrency)

    def enrich_all(
        self, leads: Iterable[RawLead], *, reporter: Optional[ProgressReporter] = None
    ) -> List[EnrichedLead]:
        """Enrich ``leads`` batch by batch, reporting to ``reporter`` or the orchestrator's own sink."""

        reporter = reporter or self._reporter
        pending: Sequence[RawLead] = list(leads)
        total = len(pending)
        results: List[EnrichedLead] = []
        if not total:
            return results

        size = self.batch_size
        budget = self._settings.scan_budget_seconds
        started = self._clock()
        reporter.info(f"[Enrichment] Processing {total} leads with {size} workers...")

        with ThreadPoolExecutor(max_workers=min(size, total)) as executor:
            for start in range(0, total, size):
                if budget is not None and self._clock() - started > budget:
                    skipped = pending[start:]
                    reporter.warning(
                        f"[Enrichment] Scan budget of {budget:g}s spent, returning {len(skipped)} leads un-enriched"
                    )
                    results.extend(EnrichedLead.from_raw(lead) for lead in skipped)
                    break

                batch = pending[start : start + size]
                results.extend(executor.map(self.enrich_one, batch))
                progress = min(100, round((start + len(batch)) / total * 100))
                reporter.info(f"[Enrichment] {progress}% complete")

        return results

    def enrich_one(self, lead: RawLead) -> EnrichedLead:
        """Enrich a single lead; failures return whatever was gathered so far."""

        enriched = EnrichedLead.from_raw(lead)
        try:
            self._enrich_into(enriched)
        except Exception:
            LOGGER.exception("Enrichment failed for %s (%s)", lead.entity, lead.website)
        return enriched

    def _enrich_into(self, enriched: EnrichedLead) -> None:
        lead = enriched.lead

        if lead.email:
            enriched.lead_score = SOCIAL_BIO_SCORE
            enriched.wealth_signal = SOCIAL_BIO_WEALTH
            return

        if not lead.website:
            return

        url = normalize_website(lead.website)
        if url is None:
            LOGGER.debug("Skipping unusable website %r for %s", lead.website, lead.entity)
            return

        try:
            page = self._fetcher.get(url, timeout=self._settings.request_timeout)
        except FetchError as exc:
            LOGGER.info("Could not fetch %s: %s", url, exc)
            return

        document = parse_document(page.body)
        bodies = [page.body]
        emails = extract_emails(page.body, document)

        if not emails:
            contact_url = find_contact_link(document, page.url or url)
            if contact_url and contact_url.rstrip("/") != (page.url or url).rstrip("/"):
                contact_body = self._fetch_contact_page(contact_url)
                if contact_body:
                    bodies.append(contact_body)
                    emails = extract_emails(contact_body)

        selection = select_email(emails)
        enriched.personal_email = selection.personal_email
        enriched.founder_email = selection.founder_email
        if selection.email:
            enriched.email = selection.email

        bonus = self._verification_bonus(enriched.email)

        combined = "\n".join(bodies)
        phones = extract_phones(combined)
        enriched.phone = phones[0] if phones else enriched.phone
        enriched.location = extract_location(page.body, document) or None
        profiles = extract_social_profiles(combined)
        enriched.social_profiles.update(profiles)
        enriched.platforms.update(profiles)

        excerpt = visible_text(document, self._settings.text_excerpt_chars)
        assessment = self._assess(lead.entity, excerpt, enriched.email or "")
        enriched.lead_score = clamp_score(assessment.lead_score + bonus)
        enriched.wealth_signal = assessment.wealth_signal
        enriched.estimated_revenue = assessment.estimated_revenue

    def _fetch_contact_page(self, url: str) -> str:
        try:
            snapshot = self._fetcher.get(url, timeout=self._settings.contact_timeout)
        except FetchError as exc:
            LOGGER.debug("Contact page %s unavailable: %s", url, exc)
            return ""
        return snapshot.body

    def _verification_bonus(self, email: Optional[str]) -> int:
        if not email or self._verifier is None:
            return 0
        try:
            verdict = self._verifier.verify(email)
        except Exception:
            LOGGER.warning("Verifier failed for %s", email, exc_info=True)
            return 0
        return self._settings.verified_email_bonus if verdict.is_trusted else 0

    def _assess(self, entity: str, excerpt: str, email: str) -> QualityAssessment:
        try:
            assessment = self._scorer.assess(entity, excerpt, email)
        except Exception as exc:
            LOGGER.warning("Scorer failed for %s, using fallback: %s", entity, exc)
            return FALLBACK_ASSESSMENT
        if not isinstance(assessment, QualityAssessment):
            LOGGER.warning("Scorer returned %r for %s, using fallback", type(assessment).__name__, entity)
            return FALLBACK_ASSESSMENT
        try:
            lead_score = clamp_score(assessment.lead_score)
        except ScorerError as exc:
            LOGGER.warning("Scorer failed for %s, using fallback: %s", entity, exc)
            return FALLBACK_ASSESSMENT
        return QualityAssessment(
            lead_score=lead_score,
            wealth_signal=WealthSignal.scored(assessment.wealth_signal),
            estimated_revenue=str(assessment.estimated_revenue or "").strip() or "Unknown",
        )
