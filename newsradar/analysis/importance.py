"""Per-user importance score (0-100) for an article.

Factor caps, the 40 score gate and the tier-1 list are part of the published
feed contract; changing any of them changes what users see.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set, TypeVar

from ..models import Article, ScoredArticle, UserInterests
from ..models.category import normalize_categories, normalize_category
from ..processors.companies import TIER_1_COMPANIES, extract_companies

IMPORTANCE_THRESHOLD = 40

CATEGORY_POINTS = 15
KEYWORD_POINTS = 20
KEYWORD_CAP = 40
COMPANY_BASE_POINTS = 40
COMPANY_EXTRA_POINTS = 5
COMPANY_CAP = 45
TIER_1_POINTS = 10
EVENT_POINTS = 10
CROSS_SIGNAL_BONUS = 15
MULTI_SOURCE_MIN_CLUSTER = 3

FUNDING_KEYWORDS = [
    "series a",
    "series b",
    "series c",
    "series d",
    "seed round",
    "pre-seed",
    "funding round",
    "raised $",
    "acquisition",
    "acquired by",
    "merger",
    "ipo",
    "unicorn status",
]

LAUNCH_KEYWORDS = [
    "launches",
    "launched today",
    "now available",
    "introduces",
    "unveils",
    "releasing",
    "general availability",
    "public beta",
    "open source",
]

T = TypeVar("T", bound=ScoredArticle)


@dataclass(slots=True)
class ImportanceFactors:
    category_match: int = 0
    keyword_match: int = 0
    company_match: int = 0
    tier1_company: int = 0
    event_signal: int = 0

    @property
    def total(self) -> int:
        return (
            self.category_match
            + self.keyword_match
            + self.company_match
            + self.tier1_company
            + self.event_signal
        )


def _category_matches(article: Article, interests: UserInterests) -> bool:
    category = normalize_category(article.category)
    return category is not None and category in normalize_categories(interests.categories)


def article_companies(article: Article, interests: UserInterests) -> Set[str]:
    """Stored companies, or text extraction when the user tracks companies."""
    if article.companies:
        return set(article.companies)
    if interests.companies:
        return extract_companies(article.text)
    return set()


def _keyword_matches(text: str, interests: UserInterests) -> int:
    return sum(1 for kw in interests.active_keywords if kw in text)


def _company_matches(companies: Set[str], interests: UserInterests) -> int:
    return len(companies & set(interests.companies))


def _has_event_signal(text: str) -> bool:
    return any(kw in text for kw in FUNDING_KEYWORDS) or any(kw in text for kw in LAUNCH_KEYWORDS)


def compute_factors(article: Article, interests: UserInterests) -> ImportanceFactors:
    text = article.text
    companies = article_companies(article, interests)
    factors = ImportanceFactors()

    category_matched = _category_matches(article, interests)
    if category_matched:
        factors.category_match = CATEGORY_POINTS

    factors.keyword_match = min(_keyword_matches(text, interests) * KEYWORD_POINTS, KEYWORD_CAP)

    m = _company_matches(companies, interests)
    if m >= 1:
        factors.company_match = min(COMPANY_BASE_POINTS + (m - 1) * COMPANY_EXTRA_POINTS, COMPANY_CAP)

    # Tier-1 and event signals only count inside the user's categories
    if category_matched:
        if companies & TIER_1_COMPANIES:
            factors.tier1_company = TIER_1_POINTS
        if _has_event_signal(text):
            factors.event_signal = EVENT_POINTS
    return factors


def score_article(article: Article, interests: UserInterests, cluster_size: int = 1) -> int:
    factors = compute_factors(article, interests)
    score = factors.total

    if factors.keyword_match > 0 and factors.company_match > 0:
        score += CROSS_SIGNAL_BONUS

    if interests.has_specific_interests and factors.keyword_match == 0 and factors.company_match == 0:
        score = score // 2

    if cluster_size >= MULTI_SOURCE_MIN_CLUSTER:
        score = min(score * 11 // 10, 100)

    return max(0, min(score, 100))


def matches_user_interests(article: Article, interests: UserInterests) -> bool:
    """Cheap pre-filter: category must match, plus a keyword/company hit when the user has any."""
    if not _category_matches(article, interests):
        return False
    if not interests.has_specific_interests:
        return True
    if _keyword_matches(article.text, interests) > 0:
        return True
    return _company_matches(article_companies(article, interests), interests) > 0


def filter_by_importance(items: Iterable[T], threshold: int = IMPORTANCE_THRESHOLD) -> List[T]:
    return [item for item in items if item.score >= threshold]


def score_articles(
    articles: Sequence[Article], interests: UserInterests, *, prefilter: bool = True
) -> List[ScoredArticle]:
    """Pre-filter and score with ``cluster_size=1``; clustering happens later."""
    candidates = [a for a in articles if matches_user_interests(a, interests)] if prefilter else list(articles)
    return [ScoredArticle(article=a, score=score_article(a, interests)) for a in candidates]
