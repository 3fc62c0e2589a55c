"""Configuration helpers for the lead crawler."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

DEFAULT_SOURCES: List[Dict[str, Any]] = [
    {"name": "Google", "class": "lead_crawler.sources.web_search.GoogleSearchSource"},
    {"name": "Bing", "class": "lead_crawler.sources.web_search.BingSearchSource"},
    {"name": "Google Maps", "class": "lead_crawler.sources.maps.MapsListingSource"},
    {"name": "YouTube", "class": "lead_crawler.sources.video.VideoChannelSource"},
    {"name": "Instagram", "class": "lead_crawler.sources.social_bio.SocialBioSource"},
]


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - dependency optional
            raise ConfigurationError(
                "YAML configuration requires the 'pyyaml' package to be installed"
            ) from exc
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def iter_enabled_source_configs(config: Mapping[str, Any]) -> Iterable[Dict[str, Any]]:
    sources = config.get("sources") or DEFAULT_SOURCES
    for source in sources:
        if source.get("enabled", True):
            yield source
        else:
            LOGGER.debug("Skipping disabled source %s", source.get("name"))


@dataclass(frozen=True)
class IdentitySettings:
    """Header pool and proxy pool used to vary outbound requests."""

    header_sets: Tuple[Dict[str, str], ...] = ()
    proxies: Tuple[str, ...] = ()
    use_proxies: bool = False


@dataclass(frozen=True)
class ScorerSettings:
    provider: str = "heuristic"
    model: str = "gpt-4o-mini"
    timeout: float = 20.0


@dataclass(frozen=True)
class CrawlerSettings:
    """Runtime knobs for discovery and enrichment, built once per process."""

    concurrency: int = 50
    request_timeout: float = 8.0
    contact_timeout: float = 5.0
    max_redirects: int = 3
    retry_attempts: int = 5
    retry_delay: float = 1.0
    verified_email_bonus: int = 10
    text_excerpt_chars: int = 4000
    scan_budget_seconds: Optional[float] = None
    identity: IdentitySettings = field(default_factory=IdentitySettings)
    scorer: ScorerSettings = field(default_factory=ScorerSettings)

    @classmethod
    def from_mapping(cls, config: Optional[Mapping[str, Any]] = None) -> "CrawlerSettings":
        """Build settings from a loaded configuration mapping, validating numbers."""

        config = dict(config or {})
        identity_cfg = config.get("identity") or {}
        scorer_cfg = config.get("scorer") or {}

        try:
            settings = cls(
                concurrency=int(config.get("concurrency", cls.concurrency)),
                request_timeout=float(config.get("request_timeout", cls.request_timeout)),
                contact_timeout=float(config.get("contact_timeout", cls.contact_timeout)),
                max_redirects=int(config.get("max_redirects", cls.max_redirects)),
                retry_attempts=int(config.get("retry_attempts", cls.retry_attempts)),
                retry_delay=float(config.get("retry_delay", cls.retry_delay)),
                verified_email_bonus=int(config.get("verified_email_bonus", cls.verified_email_bonus)),
                text_excerpt_chars=int(config.get("text_excerpt_chars", cls.text_excerpt_chars)),
                scan_budget_seconds=_optional_float(config.get("scan_budget_seconds")),
                identity=IdentitySettings(
                    header_sets=tuple(dict(item) for item in identity_cfg.get("header_sets") or ()),
                    proxies=tuple(str(item) for item in identity_cfg.get("proxies") or ()),
                    use_proxies=bool(identity_cfg.get("use_proxies", False)),
                ),
                scorer=ScorerSettings(
                    provider=str(scorer_cfg.get("provider", ScorerSettings.provider)).lower(),
                    model=str(scorer_cfg.get("model", ScorerSettings.model)),
                    timeout=float(scorer_cfg.get("timeout", ScorerSettings.timeout)),
                ),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid crawler configuration: {exc}") from exc

        if settings.concurrency < 1:
            raise ConfigurationError("'concurrency' must be at least 1")
        if settings.retry_attempts < 1:
            raise ConfigurationError("'retry_attempts' must be at least 1")
        if settings.scorer.provider not in {"openai", "heuristic"}:
            raise ConfigurationError(f"Unknown scorer provider '{settings.scorer.provider}'")
        return settings


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)
