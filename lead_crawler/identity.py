"""Randomised request identities: browser header sets, forwarded IPs, and proxies."""
from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

from .config import IdentitySettings

DEFAULT_HEADER_SETS: Sequence[Dict[str, str]] = (
    {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Sec-CH-UA": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
        "Sec-CH-UA-Mobile": "?0",
        "Sec-CH-UA-Platform": '"Windows"',
        "Upgrade-Insecure-Requests": "1",
    },
    {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.8",
        "Sec-CH-UA": '"Google Chrome";v="119", "Chromium";v="119", "Not?A_Brand";v="24"',
        "Sec-CH-UA-Mobile": "?0",
        "Sec-CH-UA-Platform": '"macOS"',
        "Upgrade-Insecure-Requests": "1",
    },
    {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
    },
    {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.1 Safari/605.1.15"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    },
    {
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-GB,en;q=0.9",
        "Sec-CH-UA-Mobile": "?0",
        "Sec-CH-UA-Platform": '"Linux"',
    },
)

FORWARDED_IP_HEADERS = ("X-Forwarded-For", "X-Real-IP", "X-Client-IP")


class IdentityPool:
    """Hands out a fresh header set (and optionally a proxy) for every request.

    The pool is read-only after construction and safe to share between worker
    threads; the only per-call state is the random generator.
    """

    def __init__(
        self,
        header_sets: Optional[Sequence[Dict[str, str]]] = None,
        proxies: Optional[Sequence[str]] = None,
        *,
        use_proxies: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._header_sets = tuple(dict(headers) for headers in (header_sets or DEFAULT_HEADER_SETS))
        self._proxies = tuple(proxies or ())
        self._use_proxies = use_proxies
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: IdentitySettings) -> "IdentityPool":
        return cls(
            header_sets=settings.header_sets or None,
            proxies=settings.proxies,
            use_proxies=settings.use_proxies,
        )

    @property
    def proxying_enabled(self) -> bool:
        return self._use_proxies and bool(self._proxies)

    def next_headers(self) -> Dict[str, str]:
        headers = dict(self._rng.choice(self._header_sets))
        forwarded_ip = self._random_ipv4()
        for name in FORWARDED_IP_HEADERS:
            headers[name] = forwarded_ip
        return headers

    def next_proxy(self) -> Optional[Dict[str, str]]:
        """Return a ``requests`` style proxies mapping, or ``None`` when proxying is off."""

        if not self.proxying_enabled:
            return None
        proxy = self._rng.choice(self._proxies)
        return {"http": proxy, "https": proxy}

    def _random_ipv4(self) -> str:
        # first octet avoids 0, loopback, and multicast ranges
        first = self._rng.choice([octet for octet in range(1, 224) if octet not in (10, 127)])
        rest = [self._rng.randint(0, 255) for _ in range(2)] + [self._rng.randint(1, 254)]
        return ".".join(str(part) for part in [first, *rest])
