"""Ingestion and read pipelines."""

from .enrichment import EnrichmentQueue
from .feed_service import MyFeedService, backfill_companies, build_my_feed, build_timeline
from .orchestrator import IngestionResult, Orchestrator

__all__ = [
    "EnrichmentQueue",
    "MyFeedService",
    "backfill_companies",
    "build_my_feed",
    "build_timeline",
    "IngestionResult",
    "Orchestrator",
]
