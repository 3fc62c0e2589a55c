"""Contact and social-profile extraction from raw page markup."""
from __future__ import annotations

import html
import re
from typing import Dict, List, Optional
from urllib.parse import unquote, urljoin, urlparse

from bs4 import BeautifulSoup

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"\+?\d{1,4}[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}")
TEL_LINK_RE = re.compile(r"tel:([+\d][\d\s().\-]{6,})", re.I)
ADDRESS_RE = re.compile(r"\d+\s+[A-Za-z][A-Za-z\s.]*,\s*[A-Za-z][A-Za-z\s]*,\s*[A-Z]{2}\s*\d{5}")

PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 20

# placeholder, tracking, and asset-looking addresses that appear in page templates
_EMAIL_DOMAIN_DENYLIST = (
    "example.com",
    "example.org",
    "sentry.io",
    "sentry-next.",
    "wixpress.com",
    "domain.com",
    "yourdomain.com",
    "email.com",
)
_ASSET_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".css", ".js")

SOCIAL_PATTERNS: Dict[str, re.Pattern] = {
    "instagram": re.compile(r"https?://(?:www\.)?instagram\.com/[A-Za-z0-9._]+", re.I),
    "linkedin": re.compile(r"https?://(?:[a-z]{2,3}\.)?linkedin\.com/(?:in|company)/[A-Za-z0-9\-_%]+", re.I),
    "facebook": re.compile(r"https?://(?:www\.|m\.)?facebook\.com/[A-Za-z0-9.\-]+", re.I),
    "twitter": re.compile(r"https?://(?:www\.)?(?:twitter|x)\.com/[A-Za-z0-9_]+", re.I),
    "youtube": re.compile(r"https?://(?:www\.)?youtube\.com/(?:channel/|c/|user/|@)[A-Za-z0-9_.\-]+", re.I),
    "tiktok": re.compile(r"https?://(?:www\.)?tiktok\.com/@[A-Za-z0-9._]+", re.I),
}

# path segments that mark share widgets or platform pages rather than a profile
_NON_PROFILE_SEGMENTS = {
    "sharer",
    "sharer.php",
    "share",
    "intent",
    "plugins",
    "dialog",
    "tr",
    "p",
    "explore",
    "home",
    "login",
    "watch",
}

CONTACT_KEYWORDS = ("contact", "about")


def parse_document(raw_body: str) -> BeautifulSoup:
    return BeautifulSoup(raw_body or "", "html.parser")


def _is_placeholder_email(email: str) -> bool:
    if any(email.endswith(suffix) for suffix in _ASSET_SUFFIXES):
        return True
    if "@2x." in email or "@3x." in email:
        return True
    domain = email.rpartition("@")[2]
    for bad in _EMAIL_DOMAIN_DENYLIST:
        # entries ending in a dot name a host label, not a registrable domain
        if bad.endswith(".") and bad in domain:
            return True
        if domain == bad or domain.endswith("." + bad):
            return True
    return False


def _clean_email(raw: str) -> str:
    return unquote(raw).strip().strip(" \t\r\n\"'<>[](){}.,;:").lower()


def extract_emails(raw_body: str, document: Optional[BeautifulSoup] = None) -> List[str]:
    """Return unique, lowercased email addresses in first-seen order."""

    found: Dict[str, None] = {}
    text = html.unescape(raw_body or "")

    for match in EMAIL_RE.findall(text):
        email = _clean_email(match)
        if email and not _is_placeholder_email(email):
            found.setdefault(email, None)

    document = document if document is not None else parse_document(raw_body)
    for anchor in document.select('a[href^="mailto:"], a[href^="MAILTO:"]'):
        href = anchor.get("href") or ""
        email = _clean_email(href[len("mailto:"):].split("?", 1)[0])
        if EMAIL_RE.fullmatch(email) and not _is_placeholder_email(email):
            found.setdefault(email, None)

    return list(found)


def extract_phones(raw_body: str) -> List[str]:
    """Return phone-like strings, ``tel:`` links first, bounded to a plausible length."""

    found: Dict[str, None] = {}
    text = raw_body or ""
    candidates = [match.strip() for match in TEL_LINK_RE.findall(text)]
    candidates += [match.strip() for match in PHONE_RE.findall(text)]
    for candidate in candidates:
        if PHONE_MIN_LENGTH <= len(candidate) <= PHONE_MAX_LENGTH:
            found.setdefault(candidate, None)
    return list(found)


def extract_location(raw_body: str, document: Optional[BeautifulSoup] = None) -> str:
    document = document if document is not None else parse_document(raw_body)

    meta = document.select_one('meta[property="business:contact_data:locality"]')
    if meta is not None and (meta.get("content") or "").strip():
        return meta["content"].strip()

    locality = document.select_one('[itemprop="addressLocality"]')
    if locality is not None:
        value = (locality.get("content") or locality.get_text(" ", strip=True) or "").strip()
        if value:
            return value

    match = ADDRESS_RE.search(raw_body or "")
    if match:
        return " ".join(match.group(0).split())
    return ""


def _is_profile_url(url: str) -> bool:
    path = urlparse(url).path.strip("/")
    first_segment = path.split("/", 1)[0].lower()
    return bool(first_segment) and first_segment not in _NON_PROFILE_SEGMENTS


def extract_social_profiles(raw_body: str) -> Dict[str, str]:
    """Return the first concrete profile URL found for each known platform."""

    profiles: Dict[str, str] = {}
    text = raw_body or ""
    for platform, pattern in SOCIAL_PATTERNS.items():
        for match in pattern.finditer(text):
            url = match.group(0)
            if _is_profile_url(url):
                profiles[platform] = url
                break
    return profiles


def find_contact_link(document: BeautifulSoup, base_url: str) -> Optional[str]:
    """Locate a "contact" (preferred) or "about" page linked from the document."""

    best: Optional[str] = None
    best_rank = len(CONTACT_KEYWORDS)
    for anchor in document.find_all("a", href=True):
        href = (anchor.get("href") or "").strip()
        if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
            continue
        haystack = f"{anchor.get_text(' ', strip=True)} {href}".lower()
        for rank, keyword in enumerate(CONTACT_KEYWORDS):
            if keyword in haystack and rank < best_rank:
                absolute = urljoin(base_url, href)
                if urlparse(absolute).scheme in ("http", "https"):
                    best, best_rank = absolute, rank
                break
        if best_rank == 0:
            break
    return best


def visible_text(document: BeautifulSoup, limit: int = 4000) -> str:
    for node in document(["script", "style", "noscript", "template"]):
        node.decompose()
    root = document.body or document
    text = " ".join(root.get_text(" ", strip=True).split())
    return text[:limit]
