from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List
from urllib.parse import urlparse

import yaml

from ..models import FeedSource, MAX_KEYWORDS, UserInterests, normalize_categories, normalize_category
from ..processors.companies import COMPANY_PATTERNS
from .logging import get_logger

logger = get_logger("nr.utils.config")


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = {"name", "url", "categories"}
ALLOWED_REGIONS = {"us", "eu", "global"}
DEFAULT_USER_AGENT = "upday-news-bot/1.0"


@dataclass(slots=True)
class FeedSettings:
    max_items_per_feed: int = 10
    fetch_timeout_s: float = 10.0
    max_retries: int = 3
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(slots=True)
class SourcesConfig:
    settings: FeedSettings
    sources: List[FeedSource] = field(default_factory=list)


def _read_yaml(path: Path | str) -> dict:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML value must be a mapping in {config_path}")
    return data


def _validate_source_dict(entry: dict) -> None:
    """Validate a single source mapping from YAML.

    Required fields: name (str), url (http/https), categories (list of ids).
    Optional fields:
      - region: 'us' | 'eu' | 'global'
      - priority: int 1-5
    """
    missing = REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    url_str = str(entry["url"]).strip()
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}'. Must be absolute http(s) URL.")

    cats = entry["categories"]
    if not isinstance(cats, list) or not cats or not all(isinstance(c, str) for c in cats):
        raise ConfigError("'categories' must be a non-empty list of strings")
    invalid = [c for c in cats if normalize_category(c) is None]
    if invalid:
        raise ConfigError(f"Invalid categories: {', '.join(sorted(set(invalid)))} in source '{entry['name']}'")

    region = entry.get("region")
    if region is not None and region not in ALLOWED_REGIONS:
        raise ConfigError(f"Invalid region '{region}'. Allowed: {sorted(ALLOWED_REGIONS)}")

    priority = entry.get("priority")
    if priority is not None and (not isinstance(priority, int) or not 1 <= priority <= 5):
        raise ConfigError("'priority' must be an integer between 1 and 5 if provided")


def _coerce_source(entry: dict) -> FeedSource:
    return FeedSource(
        name=str(entry["name"]).strip(),
        url=str(entry["url"]).strip(),
        categories=normalize_categories(entry["categories"]),
        region=entry.get("region"),
        priority=int(entry.get("priority") or 3),
    )


def _coerce_settings(raw: dict) -> FeedSettings:
    if not isinstance(raw, dict):
        raise ConfigError("'settings' must be a mapping if provided")
    settings = FeedSettings(
        max_items_per_feed=int(raw.get("max_items_per_feed", 10)),
        fetch_timeout_s=float(raw.get("fetch_timeout_s", 10)),
        max_retries=int(raw.get("max_retries", 3)),
        user_agent=str(raw.get("user_agent", DEFAULT_USER_AGENT)),
    )
    if settings.max_items_per_feed < 1:
        raise ConfigError("max_items_per_feed must be >= 1")
    if settings.fetch_timeout_s <= 0:
        raise ConfigError("fetch_timeout_s must be > 0")
    if settings.max_retries < 1:
        raise ConfigError("max_retries must be >= 1")
    return settings


def load_sources_config(path: Path | str) -> SourcesConfig:
    """Load ``sources.yaml`` into typed settings and ``FeedSource`` instances.

    YAML structure:
      - ``settings``: optional mapping (max_items_per_feed, fetch_timeout_s,
        max_retries, user_agent)
      - ``sources``: list of source mappings with fields
          - name: string (required)
          - url: http/https URL (required)
          - categories: list of category ids, legacy ids accepted (required)
          - region: 'us' | 'eu' | 'global' (optional)
          - priority: 1-5 (optional)

    Unknown top-level keys are ignored for forward compatibility.
    """
    data = _read_yaml(path)

    sources_raw: Iterable[dict] = data.get("sources") or []
    if not isinstance(sources_raw, list):
        raise ConfigError("'sources' must be a list in the YAML configuration")

    sources: List[FeedSource] = []
    for item in sources_raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each source must be a mapping, got: {type(item)}")
        _validate_source_dict(item)
        sources.append(_coerce_source(item))
    if not sources:
        raise ConfigError("No sources configured")
    return SourcesConfig(settings=_coerce_settings(data.get("settings") or {}), sources=sources)


def load_interests(path: Path | str) -> UserInterests:
    """Load a user interest profile (categories, keywords, companies) from YAML."""
    data = _read_yaml(path)

    def _str_list(key: str) -> List[str]:
        value = data.get(key) or []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' must be a list of strings if provided")
        return [v.strip() for v in value if v.strip()]

    categories = _str_list("categories")
    invalid = [c for c in categories if normalize_category(c) is None]
    if invalid:
        raise ConfigError(f"Invalid categories: {', '.join(sorted(set(invalid)))}")

    keywords = _str_list("keywords")
    if len(keywords) > MAX_KEYWORDS:
        raise ConfigError(f"At most {MAX_KEYWORDS} keywords are supported, got {len(keywords)}")

    companies = [c.lower() for c in _str_list("companies")]
    unknown = [c for c in companies if c not in COMPANY_PATTERNS]
    if unknown:
        logger.warning("Unknown company slugs in interests (never extracted from text): %s", unknown)

    return UserInterests(
        categories=normalize_categories(categories),
        keywords=keywords,
        companies=companies,
    )


def source_diversity_stats(sources: Iterable[FeedSource]) -> Dict[str, object]:
    """Count unique feeds by region and by publisher name."""
    seen: set[str] = set()
    unique: List[FeedSource] = []
    for src in sources:
        if src.url in seen:
            continue
        seen.add(src.url)
        unique.append(src)
    return {
        "total": len(unique),
        "by_region": dict(Counter(s.region or "unknown" for s in unique)),
        "by_source": dict(Counter(s.name for s in unique)),
    }
