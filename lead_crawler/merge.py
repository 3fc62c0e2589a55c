"""Helpers for merging raw leads from multiple sources into one deduplicated list."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import RawLead


def dedupe_key(lead: RawLead) -> str:
    """Case-insensitive identity: the website when present, else the entity name."""

    return lead.dedupe_key


def merge_raw_leads(batches: Iterable[Iterable[RawLead]], limit: Optional[int] = None) -> List[RawLead]:
    """Flatten per-source results, keep the first lead seen for each key, then truncate."""

    seen: set[str] = set()
    merged: List[RawLead] = []

    for batch in batches:
        if batch is None:
            continue
        for lead in batch:
            key = dedupe_key(lead)
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(lead)

    if limit is not None:
        return merged[: max(limit, 0)]
    return merged


def deduplicate_leads(leads: Iterable[RawLead]) -> List[RawLead]:
    return merge_raw_leads([leads])
