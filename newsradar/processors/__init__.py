"""Processing stages: cleaning, similarity, company tagging, deduplication, summaries."""

from .clean import clean_and_truncate_body, clean_article_body, clean_title, is_valid_content
from .companies import COMPANY_PATTERNS, COMPANY_TABLE_VERSION, TIER_1_COMPANIES, extract_companies
from .dedup import DedupStats, Deduplicator, normalize_url
from .similarity import similarity
from .summarize import ArticleSummarizer, ProcessedContent, simple_summary

__all__ = [
    "clean_and_truncate_body",
    "clean_article_body",
    "clean_title",
    "is_valid_content",
    "COMPANY_PATTERNS",
    "COMPANY_TABLE_VERSION",
    "TIER_1_COMPANIES",
    "extract_companies",
    "DedupStats",
    "Deduplicator",
    "normalize_url",
    "similarity",
    "ArticleSummarizer",
    "ProcessedContent",
    "simple_summary",
]
