"""Read side: the general timeline and the personalized weekly "My Feed"."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone, tzinfo
from typing import List, Optional

from ..analysis import assemble_weeks, score_articles
from ..analysis.weekly_feed import WEEKS
from ..models import Article, TimelinePage, UserInterests, WeekBucket
from ..processors.companies import extract_companies_ordered
from ..storage import ArticleStore
from ..utils.cache import MemoryBackend, TTLCache
from ..utils.logging import get_logger
from .enrichment import EnrichmentQueue

logger = get_logger("nr.pipeline.feed")

TIMELINE_PAGE_SIZE = 20
MY_FEED_PAGE_SIZE = 200
MY_FEED_MAX_ITEMS = 2500
MY_FEED_CACHE_TTL_S = 5 * 60


def build_timeline(
    store: ArticleStore,
    category: Optional[str] = None,
    cursor: Optional[datetime] = None,
    limit: int = TIMELINE_PAGE_SIZE,
) -> TimelinePage:
    """One page of the newest articles; pass ``next_cursor`` back to get the next one."""
    items, has_more = store.query(category=category, cursor=cursor, limit=limit)
    next_cursor = items[-1].published_at if has_more and items else None
    return TimelinePage(items=items, has_more=has_more, next_cursor=next_cursor)


def fetch_recent(
    store: ArticleStore,
    categories: List[str],
    since: datetime,
    *,
    page_size: int = MY_FEED_PAGE_SIZE,
    max_items: int = MY_FEED_MAX_ITEMS,
) -> List[Article]:
    articles: List[Article] = []
    cursor: Optional[datetime] = None
    while len(articles) < max_items:
        page, has_more = store.query(
            categories=categories, published_after=since, cursor=cursor, limit=page_size
        )
        articles.extend(page)
        if not has_more or not page:
            break
        cursor = page[-1].published_at
    return articles[:max_items]


def _update_companies(store: ArticleStore, article_id: str, companies: List[str]) -> None:
    store.update_companies(article_id, companies)


class MyFeedService:
    """Builds the 12-week personalized feed for one interests profile.

    Flow: fetch (user's categories, last 12 weeks) -> company pre-extraction ->
    pre-filter -> score -> threshold -> weekly buckets -> clusters. Articles whose
    companies had to be inferred are queued for a background company backfill.
    """

    def __init__(
        self,
        store: ArticleStore,
        *,
        enrichment: Optional[EnrichmentQueue] = None,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.store = store
        self.enrichment = enrichment
        self.cache = cache

    @staticmethod
    def _cache_key(interests: UserInterests, tz: Optional[tzinfo], rescore_clusters: bool) -> str:
        zone = str(tz) if tz is not None else "local"
        return f"{interests.cache_key()}|tz={zone}|rescore={int(rescore_clusters)}"

    @classmethod
    def with_memory_cache(cls, store: ArticleStore, **kwargs) -> "MyFeedService":
        return cls(store, cache=TTLCache(MemoryBackend(), ttl_seconds=MY_FEED_CACHE_TTL_S), **kwargs)

    def _pre_extract(self, articles: List[Article], interests: UserInterests) -> None:
        if not interests.companies:
            return
        for art in articles:
            if art.companies:
                continue
            art.companies = extract_companies_ordered(art.title, art.summary)
            if art.companies and art.id and self.enrichment is not None:
                self.enrichment.submit(
                    f"backfill companies for {art.id}",
                    _update_companies,
                    self.store,
                    art.id,
                    list(art.companies),
                )

    def build(
        self,
        interests: UserInterests,
        *,
        now: Optional[datetime] = None,
        tz: Optional[tzinfo] = None,
        rescore_clusters: bool = False,
        force_refresh: bool = False,
    ) -> List[WeekBucket]:
        """Weekly buckets for ``interests``; callers get their own copy of the result.

        The cache is keyed on interests, time zone and ``rescore_clusters`` and
        is bypassed when an explicit ``now`` is given.
        """
        use_cache = self.cache is not None and now is None
        key = self._cache_key(interests, tz, rescore_clusters)
        if use_cache and not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("My Feed cache hit (%s)", key)
                return copy.deepcopy(cached)

        now = now or datetime.now(timezone.utc)
        if not interests.categories:
            weeks = assemble_weeks([], interests, now=now, tz=tz)
        else:
            since = now - timedelta(weeks=WEEKS)
            articles = fetch_recent(self.store, interests.categories, since)
            self._pre_extract(articles, interests)
            scored = score_articles(articles, interests)
            weeks = assemble_weeks(scored, interests, now=now, tz=tz, rescore_clusters=rescore_clusters)
            logger.info(
                "My Feed: fetched=%d matched=%d shown=%d",
                len(articles),
                len(scored),
                sum(w.total_items for w in weeks),
            )

        if use_cache:
            self.cache.set(key, copy.deepcopy(weeks))
        return weeks


def build_my_feed(
    store: ArticleStore,
    interests: UserInterests,
    now: Optional[datetime] = None,
    *,
    tz: Optional[tzinfo] = None,
    enrichment: Optional[EnrichmentQueue] = None,
    rescore_clusters: bool = False,
) -> List[WeekBucket]:
    return MyFeedService(store, enrichment=enrichment).build(
        interests, now=now, tz=tz, rescore_clusters=rescore_clusters
    )


def backfill_companies(
    store: ArticleStore,
    enrichment: Optional[EnrichmentQueue] = None,
    *,
    page_size: int = MY_FEED_PAGE_SIZE,
    dry_run: bool = False,
) -> int:
    """Tag stored articles that have no companies yet.

    Only ``companies`` is written. Returns the number of articles updated (or
    queued for update when an ``enrichment`` queue is given).
    """
    updated = 0
    scanned = 0
    cursor: Optional[datetime] = None
    while True:
        page, has_more = store.query(cursor=cursor, limit=page_size)
        for art in page:
            scanned += 1
            if art.companies or not art.id:
                continue
            companies = extract_companies_ordered(art.title, art.summary)
            if not companies:
                continue
            updated += 1
            if dry_run:
                logger.info("[DRY-RUN] Would tag %s with %s", art.id, companies)
            elif enrichment is not None:
                enrichment.submit(f"backfill companies for {art.id}", _update_companies, store, art.id, companies)
            else:
                store.update_companies(art.id, companies)
        if not has_more or not page:
            break
        cursor = page[-1].published_at
    logger.info("Company backfill: scanned=%d tagged=%d", scanned, updated)
    return updated
