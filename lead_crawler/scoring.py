"""Lead quality scoring: an OpenAI-backed scorer and a deterministic heuristic one."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional, Protocol

from .classify import is_founder_email, is_generic_email, is_personal_email
from .models import QualityAssessment, WealthSignal

LOGGER = logging.getLogger(__name__)


class ScorerError(RuntimeError):
    """Raised when a scorer cannot produce a usable assessment."""


class QualityScorer(Protocol):
    def assess(self, entity: str, text: str, email: str) -> QualityAssessment:  # pragma: no cover - runtime protocol
        """Return a score, wealth signal, and revenue bucket for a business."""


def clamp_score(value: Any) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError) as exc:
        raise ScorerError(f"Lead score {value!r} is not numeric") from exc
    return max(0, min(100, score))


def assessment_from_payload(payload: Mapping[str, Any]) -> QualityAssessment:
    """Validate an untrusted ``{leadScore, wealthSignal, estimatedRevenue}`` mapping."""

    if not isinstance(payload, Mapping) or "leadScore" not in payload:
        raise ScorerError(f"Scorer payload has the wrong shape: {payload!r}")
    revenue = str(payload.get("estimatedRevenue") or "").strip() or "Unknown"
    return QualityAssessment(
        lead_score=clamp_score(payload["leadScore"]),
        wealth_signal=WealthSignal.scored(payload.get("wealthSignal")),
        estimated_revenue=revenue,
    )


_FENCE_RE = re.compile(r"```(?:json)?", re.I)


def parse_model_reply(reply: str) -> QualityAssessment:
    cleaned = _FENCE_RE.sub("", reply or "").strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ScorerError(f"Scorer reply is not JSON: {cleaned[:120]!r}") from exc
    return assessment_from_payload(payload)


PROMPT_TEMPLATE = """Analyze this business and estimate revenue.

Business: {entity}
Email: {email}
Content: {text}

Provide:
1. Lead Score (0-100)
2. Wealth Signal (High/Medium/Low)
3. Estimated Monthly Revenue (e.g., "$10k-$50k", "$50k-$100k", "$100k+")

Return ONLY JSON:
{{
    "leadScore": number,
    "wealthSignal": "High" | "Medium" | "Low",
    "estimatedRevenue": "string"
}}"""


class OpenAIQualityScorer:
    """Asks a chat-completions model for a structured quality assessment."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
        client: Any = None,
    ) -> None:
        if client is None:
            from openai import OpenAI

            client = OpenAI(api_key=api_key, timeout=timeout)
        self._client = client
        self._model = model

    def assess(self, entity: str, text: str, email: str) -> QualityAssessment:
        prompt = PROMPT_TEMPLATE.format(entity=entity, email=email or "", text=text)
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.2,
                max_tokens=200,
            )
            reply = response.choices[0].message.content or ""
        except Exception as exc:
            raise ScorerError(f"Scoring request for {entity!r} failed: {exc}") from exc
        return parse_model_reply(reply)


_HIGH_VALUE_TERMS = (
    "locations",
    "franchise",
    "enterprise",
    "award",
    "luxury",
    "premium",
    "clients worldwide",
    "since 19",
    "headquarters",
    "careers",
)
_MID_VALUE_TERMS = ("team", "services", "book", "appointment", "pricing", "testimonials", "portfolio", "clients")


class HeuristicQualityScorer:
    """Deterministic offline scorer built from text and email signals."""

    def assess(self, entity: str, text: str, email: str) -> QualityAssessment:
        lowered = (text or "").lower()
        score = 30

        if email:
            if is_personal_email(email) or is_founder_email(email):
                score += 20
            elif not is_generic_email(email):
                score += 10
            else:
                score += 5

        high_hits = sum(1 for term in _HIGH_VALUE_TERMS if term in lowered)
        mid_hits = sum(1 for term in _MID_VALUE_TERMS if term in lowered)
        score += min(high_hits * 8, 32) + min(mid_hits * 3, 12)

        if len(lowered) >= 2000:
            score += 6
        elif len(lowered) >= 500:
            score += 3

        score = max(0, min(100, score))
        if score >= 75:
            return QualityAssessment(score, WealthSignal.HIGH, "$100k+")
        if score >= 50:
            return QualityAssessment(score, WealthSignal.MEDIUM, "$10k-$50k")
        return QualityAssessment(score, WealthSignal.LOW, "<$10k")
