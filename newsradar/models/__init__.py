"""Typed models used across the application."""

from .article import Article, RawArticle
from .category import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    LEGACY_CATEGORY_ALIASES,
    normalize_categories,
    normalize_category,
)
from .feed import NewsCluster, ScoredArticle, TimelinePage, WeekBucket
from .interests import MAX_KEYWORDS, UserInterests
from .source import FeedSource

__all__ = [
    "Article",
    "RawArticle",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "LEGACY_CATEGORY_ALIASES",
    "normalize_categories",
    "normalize_category",
    "NewsCluster",
    "ScoredArticle",
    "TimelinePage",
    "WeekBucket",
    "MAX_KEYWORDS",
    "UserInterests",
    "FeedSource",
]
