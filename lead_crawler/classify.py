"""Email classification helpers used to pick the most direct mailbox for a lead."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

PERSONAL_DOMAINS = frozenset(
    {
        "gmail.com",
        "googlemail.com",
        "outlook.com",
        "hotmail.com",
        "live.com",
        "yahoo.com",
        "icloud.com",
        "me.com",
        "aol.com",
        "proton.me",
        "protonmail.com",
    }
)

GENERIC_PREFIXES = (
    "info",
    "contact",
    "support",
    "hello",
    "admin",
    "noreply",
    "no-reply",
    "hr",
    "sales",
    "team",
    "office",
    "enquiries",
    "inquiries",
    "help",
)

FOUNDER_KEYWORDS = ("founder", "ceo", "owner", "director", "president", "chief")


def _split(email: str) -> tuple[str, str]:
    local, _, domain = (email or "").strip().lower().partition("@")
    return local, domain


def is_personal_email(email: str) -> bool:
    _, domain = _split(email)
    return domain in PERSONAL_DOMAINS


def is_generic_email(email: str) -> bool:
    local, _ = _split(email)
    return any(
        local == prefix or local.startswith(prefix + ".") or local.startswith(prefix + "-") or local.startswith(prefix + "_")
        for prefix in GENERIC_PREFIXES
    )


def is_founder_email(email: str) -> bool:
    local, _ = _split(email)
    return any(keyword in local for keyword in FOUNDER_KEYWORDS)


@dataclass
class EmailSelection:
    """Outcome of classifying every email discovered for one lead."""

    email: Optional[str] = None
    personal_email: Optional[str] = None
    founder_email: Optional[str] = None
    business_emails: List[str] = field(default_factory=list)


def select_email(emails: Iterable[str]) -> EmailSelection:
    """Pick the canonical address: personal, then founder-like, then first non-generic business."""

    personal: List[str] = []
    business: List[str] = []
    for email in emails:
        if is_personal_email(email):
            personal.append(email)
        elif not is_generic_email(email):
            business.append(email)

    founder = next((email for email in business if is_founder_email(email)), None)
    chosen = (personal[0] if personal else None) or founder or (business[0] if business else None)
    return EmailSelection(
        email=chosen,
        personal_email=personal[0] if personal else None,
        founder_email=founder,
        business_emails=business,
    )
