"""Canonical company table.

Ingestion, scoring and the backfill command all read this table. Bump
``COMPANY_TABLE_VERSION`` whenever a slug or pattern changes, since it changes
feed composition for users tracking companies.
"""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, Iterable, List, Set

COMPANY_TABLE_VERSION = 1

COMPANY_PATTERNS: Dict[str, re.Pattern[str]] = {
    "openai": re.compile(r"\bopen\s?ai\b", re.IGNORECASE),
    "anthropic": re.compile(r"\banthropic\b", re.IGNORECASE),
    "google": re.compile(r"\bgoogle\b", re.IGNORECASE),
    "microsoft": re.compile(r"\bmicrosoft\b", re.IGNORECASE),
    "meta": re.compile(r"\bmeta\b(?!\s*data)", re.IGNORECASE),
    "nvidia": re.compile(r"\bnvidia\b", re.IGNORECASE),
    "xai": re.compile(r"\bx\.?ai\b", re.IGNORECASE),
    "mistral": re.compile(r"\bmistral\b", re.IGNORECASE),
    "vercel": re.compile(r"\bvercel\b", re.IGNORECASE),
    "supabase": re.compile(r"\bsupabase\b", re.IGNORECASE),
    "cloudflare": re.compile(r"\bcloudflare\b", re.IGNORECASE),
    "linear": re.compile(r"\blinear\b(?!\s*regression)", re.IGNORECASE),
    "figma": re.compile(r"\bfigma\b", re.IGNORECASE),
    "notion": re.compile(r"\bnotion\b", re.IGNORECASE),
    "cursor": re.compile(r"\bcursor\b(?!\s*position)", re.IGNORECASE),
    "github": re.compile(r"\bgithub\b", re.IGNORECASE),
    "databricks": re.compile(r"\bdatabricks\b", re.IGNORECASE),
    "apple": re.compile(r"\bapple\b(?!\s*(?:pie|cider|tree))", re.IGNORECASE),
    "amazon": re.compile(r"\bamazon\b", re.IGNORECASE),
    "tesla": re.compile(r"\btesla\b", re.IGNORECASE),
    "stripe": re.compile(r"\bstripe\b(?!\s*(?:pattern|shirt))", re.IGNORECASE),
    "shopify": re.compile(r"\bshopify\b", re.IGNORECASE),
    "slack": re.compile(r"\bslack\b(?!\s*(?:off|time))", re.IGNORECASE),
    "discord": re.compile(r"\bdiscord\b", re.IGNORECASE),
    "reddit": re.compile(r"\breddit\b", re.IGNORECASE),
}

TIER_1_COMPANIES: FrozenSet[str] = frozenset(
    {"openai", "anthropic", "google", "microsoft", "meta", "nvidia", "xai", "mistral"}
)

# Verbs that, next to a company mention, mark the company as the subject of the story
ACTION_KEYWORDS = [
    "announces", "announced", "launches", "launched", "unveils", "unveiled",
    "releases", "released", "introduces", "introduced", "acquires", "acquired",
    "raises", "raised", "secures", "secured", "partners", "partnered",
    "expands", "expanded", "opens", "opened", "hires", "hired",
]

RELEVANCE_THRESHOLD = 50


def extract_companies(text: str) -> Set[str]:
    """Return every company slug whose pattern matches ``text``."""
    lowered = (text or "").lower()
    return {slug for slug, pattern in COMPANY_PATTERNS.items() if pattern.search(lowered)}


def extract_companies_ordered(title: str, summary: str) -> List[str]:
    """Slugs in table order, for storing on the article row."""
    found = extract_companies(f"{title} {summary}")
    return [slug for slug in COMPANY_PATTERNS if slug in found]


def _pattern_for(slug: str) -> re.Pattern[str]:
    return COMPANY_PATTERNS.get(slug) or re.compile(rf"\b{re.escape(slug)}\b", re.IGNORECASE)


def company_relevance_score(title: str, summary: str, slug: str) -> int:
    """How central ``slug`` is to an article, used by per-company pages.

    Title mention +50, first summary sentence +30, mentions x10 (max 30),
    an action verb adjacent to the company name +20.
    """
    title_low = (title or "").lower()
    summary_low = (summary or "").lower()
    pattern = _pattern_for(slug)

    score = 0
    if pattern.search(title_low):
        score += 50
    first_sentence = re.split(r"[.!?]", summary_low, maxsplit=1)[0]
    if pattern.search(first_sentence):
        score += 30
    full_text = f"{title_low} {summary_low}"
    score += min(len(pattern.findall(full_text)) * 10, 30)

    name = re.escape(slug.lower())
    for action in ACTION_KEYWORDS:
        if re.search(rf"{name}\s+{action}|{action}\s+{name}", full_text):
            score += 20
            break
    return score


def is_relevant_for_company(title: str, summary: str, slug: str) -> bool:
    return company_relevance_score(title, summary, slug) >= RELEVANCE_THRESHOLD


def companies_or_extracted(companies: Iterable[str], text: str) -> Set[str]:
    """Stored companies when present, otherwise the table-based extraction."""
    stored = {c for c in companies if c}
    return stored if stored else extract_companies(text)
