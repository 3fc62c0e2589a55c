"""Factory helpers for constructing sources, scorers, and the scan service from configuration."""
from __future__ import annotations

import importlib
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from .config import ConfigurationError, CrawlerSettings, ScorerSettings, iter_enabled_source_configs
from .fetch import PageFetcher
from .identity import IdentityPool
from .orchestrator import DiscoveryOrchestrator, EnrichmentOrchestrator, ScanService
from .orchestrator.service import ResultCallback
from .progress import ProgressCallback, ProgressReporter
from .rate_limit import BackoffPolicy
from .scoring import HeuristicQualityScorer, OpenAIQualityScorer, QualityScorer
from .sources.base import SourceProtocol
from .verifier import EmailVerifier

LOGGER = logging.getLogger(__name__)

OPENAI_API_KEY_ENV = "OPENAI_API_KEY"


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid source class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import '{module_name}': {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_sources(config: Mapping[str, Any], fetcher: Optional[PageFetcher] = None) -> List[SourceProtocol]:
    """Instantiate the discovery sources listed in the configuration.

    Every source shares ``fetcher`` so that identity rotation is applied to all
    outbound traffic. When the configuration has no ``sources`` section the
    five built-in sources are used.
    """

    sources: List[SourceProtocol] = []
    for source_cfg in iter_enabled_source_configs(config):
        class_path = source_cfg.get("class")
        if not class_path:
            raise ConfigurationError("Source configuration missing required 'class' field")

        options: Dict[str, Any] = dict(source_cfg.get("options") or {})
        source_cls = _load_class(class_path)
        try:
            source = source_cls(fetcher=fetcher, **options)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid options for source '{class_path}': {exc}") from exc

        display_name = source_cfg.get("name")
        if display_name:
            source.name = display_name
        sources.append(source)
    return sources


def build_scorer(settings: ScorerSettings, *, environ: Optional[Mapping[str, str]] = None) -> QualityScorer:
    """Return the configured quality scorer, degrading to the heuristic one."""

    environ = os.environ if environ is None else environ
    if settings.provider == "openai":
        api_key = environ.get(OPENAI_API_KEY_ENV)
        if api_key:
            return OpenAIQualityScorer(api_key, model=settings.model, timeout=settings.timeout)
        LOGGER.warning("%s is not set, falling back to the heuristic scorer", OPENAI_API_KEY_ENV)
    return HeuristicQualityScorer()


def build_service(
    config: Mapping[str, Any],
    *,
    settings: Optional[CrawlerSettings] = None,
    progress_callback: Optional[ProgressCallback] = None,
    result_callback: Optional[ResultCallback] = None,
) -> ScanService:
    """Wire identity, fetching, sources, verification, and scoring into a scan service."""

    settings = settings or CrawlerSettings.from_mapping(config)
    reporter = ProgressReporter(progress_callback)
    fetcher = PageFetcher(
        IdentityPool.from_settings(settings.identity),
        timeout=settings.request_timeout,
        max_redirects=settings.max_redirects,
    )

    sources = build_sources(config, fetcher)
    if not sources:
        raise ConfigurationError("No discovery sources are enabled")

    discovery = DiscoveryOrchestrator(
        sources,
        reporter=reporter,
        backoff=BackoffPolicy(attempts=settings.retry_attempts, base_delay=settings.retry_delay),
    )
    enrichment = EnrichmentOrchestrator(
        fetcher,
        verifier=EmailVerifier(),
        scorer=build_scorer(settings.scorer),
        reporter=reporter,
        settings=settings,
    )
    LOGGER.debug("Built scan service with %s sources", len(sources))
    return ScanService(discovery, enrichment, reporter=reporter, result_callback=result_callback)
