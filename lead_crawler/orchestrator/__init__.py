"""Workflow orchestration for coordinating discovery, enrichment, and scans."""

from .discovery import DiscoveryOrchestrator
from .enrichment import EnrichmentOrchestrator, normalize_website
from .service import ScanJob, ScanQueryError, ScanService, parse_query

__all__ = [
    "DiscoveryOrchestrator",
    "EnrichmentOrchestrator",
    "ScanJob",
    "ScanQueryError",
    "ScanService",
    "normalize_website",
    "parse_query",
]
