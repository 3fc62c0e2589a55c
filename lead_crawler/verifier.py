"""Deliverability checks for discovered email addresses."""
from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Protocol

import dns.exception
import dns.resolver

from .models import RiskLevel, VerificationResult

LOGGER = logging.getLogger(__name__)

_FORMAT_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

DISPOSABLE_DOMAINS = (
    "tempmail.com",
    "guerrillamail.com",
    "10minutemail.com",
    "mailinator.com",
    "throwaway.email",
    "temp-mail.org",
    "fakeinbox.com",
    "sharklasers.com",
    "yopmail.com",
)

ROLE_KEYWORDS = ("info", "contact", "support", "sales", "admin", "hello", "help", "service", "team", "office")

MxLookup = Callable[[str], bool]


class EmailVerifierProtocol(Protocol):
    def verify(self, email: str) -> VerificationResult:  # pragma: no cover - runtime protocol
        """Return a validity and risk verdict for ``email``."""


def resolve_mx(domain: str, timeout: float = 5.0) -> bool:
    try:
        answers = dns.resolver.resolve(domain, "MX", lifetime=timeout)
    except (dns.resolver.NoAnswer, dns.resolver.NXDOMAIN, dns.resolver.NoNameservers, dns.exception.Timeout):
        return False
    except dns.exception.DNSException as exc:
        LOGGER.debug("MX lookup for %s failed: %s", domain, exc)
        return False
    return len(answers) > 0


class EmailVerifier:
    """Format, disposable-provider, MX, and role-account checks in that order."""

    def __init__(self, mx_lookup: Optional[MxLookup] = None) -> None:
        self._mx_lookup = mx_lookup or resolve_mx

    def verify(self, email: str) -> VerificationResult:
        address = (email or "").strip().lower()

        if not _FORMAT_RE.match(address):
            return VerificationResult(email=address, valid=False, reason="Invalid email format")

        local, _, domain = address.partition("@")
        if any(disposable in domain for disposable in DISPOSABLE_DOMAINS):
            return VerificationResult(email=address, valid=False, reason="Disposable email provider")

        if not self._mx_lookup(domain):
            return VerificationResult(email=address, valid=False, reason="No MX records found")

        if any(keyword in local for keyword in ROLE_KEYWORDS):
            return VerificationResult(
                email=address,
                valid=True,
                reason="Role-based email (info@, contact@, etc.)",
                risk_level=RiskLevel.MEDIUM,
            )

        return VerificationResult(
            email=address,
            valid=True,
            reason="Valid email with MX records",
            risk_level=RiskLevel.LOW,
        )
