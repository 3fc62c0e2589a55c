"""Data models shared by the discovery sources, orchestrators, and exporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Set


class LeadSource(str, Enum):
    """Where a raw lead was discovered."""

    GENERAL_SEARCH = "general_search"
    SECONDARY_SEARCH = "secondary_search"
    MAPS = "maps"
    VIDEO = "video"
    SOCIAL_BIO = "social_bio"


class WealthSignal(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: object, default: Optional["WealthSignal"] = None) -> "WealthSignal":
        """Map loosely formatted labels (``"high"``, ``" Low "``) onto a member."""

        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return default if default is not None else cls.MEDIUM

    @classmethod
    def scored(cls, value: object) -> "WealthSignal":
        """Like :meth:`parse` but limited to High, Medium and Low; anything else is Medium."""

        signal = cls.parse(value, default=cls.MEDIUM)
        return cls.MEDIUM if signal is cls.UNKNOWN else signal


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProgressType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    RAW = "raw"


# --- Query Models ---

@dataclass(frozen=True)
class ScanQuery:
    """A parsed niche/location pair."""

    niche: str
    location: str = ""

    def display(self) -> str:
        if self.location:
            return f"{self.niche} in {self.location}"
        return self.niche


# --- Lead Models ---

@dataclass(frozen=True)
class RawLead:
    """A candidate as discovered by a single source, before enrichment."""

    entity: str
    website: str = ""
    snippet: str = ""
    source: LeadSource = LeadSource.GENERAL_SEARCH
    email: Optional[str] = None
    role: Optional[str] = None
    social_profiles: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.entity or not self.entity.strip():
            raise ValueError("RawLead requires a non-empty entity name.")

    @property
    def dedupe_key(self) -> str:
        return (self.website or self.entity).strip().lower()


@dataclass
class EnrichedLead:
    """A raw lead wrapped with the contact, social, and scoring data gathered for it."""

    lead: RawLead
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    role: Optional[str] = None
    personal_email: Optional[str] = None
    founder_email: Optional[str] = None
    platforms: Set[str] = field(default_factory=set)
    social_profiles: Dict[str, str] = field(default_factory=dict)
    wealth_signal: WealthSignal = WealthSignal.UNKNOWN
    lead_score: int = 0
    estimated_revenue: Optional[str] = None

    @classmethod
    def from_raw(cls, lead: RawLead) -> "EnrichedLead":
        """Start an enrichment record carrying whatever the source already yielded."""

        return cls(
            lead=lead,
            email=lead.email,
            role=lead.role,
            social_profiles=dict(lead.social_profiles),
            platforms=set(lead.social_profiles),
        )

    @property
    def entity(self) -> str:
        return self.lead.entity

    @property
    def website(self) -> str:
        return self.lead.website

    @property
    def snippet(self) -> str:
        return self.lead.snippet

    @property
    def source(self) -> LeadSource:
        return self.lead.source

    @property
    def temperature(self) -> str:
        if self.lead_score >= 80:
            return "Hot"
        if self.lead_score >= 60:
            return "Warm"
        return "Cold"


# --- Collaborator Results ---

@dataclass(frozen=True)
class VerificationResult:
    """Deliverability verdict for a single email address."""

    email: str
    valid: bool
    reason: str = ""
    risk_level: RiskLevel = RiskLevel.HIGH

    @property
    def is_trusted(self) -> bool:
        return self.valid and self.risk_level is RiskLevel.LOW


@dataclass(frozen=True)
class QualityAssessment:
    """Structured output of a quality scorer."""

    lead_score: int
    wealth_signal: WealthSignal
    estimated_revenue: str = "Unknown"


FALLBACK_ASSESSMENT = QualityAssessment(
    lead_score=50,
    wealth_signal=WealthSignal.MEDIUM,
    estimated_revenue="Unknown",
)


# --- Progress ---

@dataclass(frozen=True)
class ProgressLine:
    """A human-readable progress record pushed to the caller's sink."""

    text: str
    type: ProgressType = ProgressType.INFO
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, str]:
        return {
            "text": self.text,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
        }
