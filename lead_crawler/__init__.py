"""Top-level package for the lead discovery and enrichment crawler."""

from . import models  # noqa: F401
from .models import (
    EnrichedLead,
    LeadSource,
    ProgressLine,
    QualityAssessment,
    RawLead,
    ScanQuery,
    VerificationResult,
    WealthSignal,
)

__all__ = [
    "EnrichedLead",
    "LeadSource",
    "ProgressLine",
    "QualityAssessment",
    "RawLead",
    "ScanQuery",
    "VerificationResult",
    "WealthSignal",
    "orchestrator",
    "sources",
]
