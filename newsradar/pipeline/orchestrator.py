from __future__ import annotations

import contextvars
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

from ..fetchers import CrawlResult, FetchError, crawl_source, fetch_og_image
from ..models import Article, FeedSource, RawArticle
from ..processors import (
    ArticleSummarizer,
    Deduplicator,
    DedupStats,
    clean_and_truncate_body,
    clean_title,
    is_valid_content,
)
from ..processors.companies import extract_companies_ordered
from ..storage import ArticleStore, StoreError
from ..utils.config_loader import FeedSettings
from ..utils.logging import get_logger, run_context
from ..utils.pipeline_config import PipelineConfig

logger = get_logger("nr.pipeline.orchestrator")


@dataclass(slots=True)
class IngestionResult:
    crawled: int = 0
    valid: int = 0
    deduplicated: int = 0
    stored: int = 0
    ai_processed: int = 0
    ai_provider: str = "none"
    cache_hits: int = 0
    skipped: int = 0
    run_id: str = ""
    dedup: Optional[DedupStats] = None
    errors: Dict[str, str] = field(default_factory=dict)


class Orchestrator:
    """One ingestion run: crawl, clean, gate, dedupe, summarize, tag, store.

    Sources are fetched concurrently with a small worker pool; a failing source
    is recorded in ``IngestionResult.errors`` and the run continues.
    """

    def __init__(
        self,
        store: ArticleStore,
        *,
        settings: Optional[FeedSettings] = None,
        config: Optional[PipelineConfig] = None,
        summarizer: Optional[ArticleSummarizer] = None,
        dry_run: bool = False,
        max_items_per_source: Optional[int] = None,
    ) -> None:
        self.store = store
        self.settings = settings or FeedSettings()
        self.config = config or PipelineConfig()
        self.summarizer = summarizer or ArticleSummarizer(
            batch_size=self.config.ai_batch_size, batch_delay_s=self.config.ai_batch_delay_s
        )
        self.dry_run = dry_run
        self.max_items_per_source = max_items_per_source
        self.dedup = Deduplicator(store, url_batch_size=self.config.url_lookup_batch_size)

    def _fetch_source(self, source: FeedSource) -> CrawlResult:
        return crawl_source(source, self.settings, max_items=self.max_items_per_source)

    def fetch_all(self, sources: Iterable[FeedSource]) -> Tuple[List[RawArticle], Dict[str, str], int]:
        """Fetch every source.

        Returns articles in source order, per-source errors and the number of
        feed entries the crawler skipped.
        """
        src_list = list(sources)
        if not src_list:
            return [], {}, 0

        per_source: Dict[int, CrawlResult] = {}
        errors: Dict[str, str] = {}
        max_workers = min(self.config.bounded_fetch_workers, len(src_list))
        logger.debug("Starting concurrent fetch for %d sources (workers=%d)", len(src_list), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            # each worker runs in a copy of the caller context so records keep the run id
            future_map = {
                executor.submit(contextvars.copy_context().run, self._fetch_source, s): i
                for i, s in enumerate(src_list)
            }
            for fut in as_completed(future_map):
                idx = future_map[fut]
                source = src_list[idx]
                try:
                    per_source[idx] = fut.result()
                except FetchError as exc:
                    logger.warning("Failed to fetch %s: %s", source.name, exc.message)
                    errors[source.name] = exc.message
                except Exception as exc:  # noqa: BLE001 - isolate per source
                    logger.exception("Unexpected error crawling %s", source.name)
                    errors[source.name] = str(exc)

        results = [a for i in range(len(src_list)) if i in per_source for a in per_source[i].articles]
        skipped = sum(crawl.skipped for crawl in per_source.values())
        logger.info(
            "Concurrent fetch complete: total=%d from sources=%d (failed=%d, skipped entries=%d)",
            len(results),
            len(src_list),
            len(errors),
            skipped,
        )
        return results, errors, skipped

    def _clean(self, raw: RawArticle) -> Optional[RawArticle]:
        title = clean_title(raw.title)
        body = clean_and_truncate_body(raw.body, self.config.body_max_length)
        if not is_valid_content(title, body):
            return None
        return replace(raw, title=title, body=body)

    def _image_for(self, raw: RawArticle) -> Optional[str]:
        if raw.image_url or not self.config.fetch_og_images:
            return raw.image_url
        return fetch_og_image(
            raw.source_url, timeout=self.settings.fetch_timeout_s, user_agent=self.settings.user_agent
        )

    def process(self, raw_articles: List[RawArticle], result: IngestionResult) -> List[Article]:
        cleaned: List[RawArticle] = []
        for raw in raw_articles:
            item = self._clean(raw)
            if item is None:
                result.skipped += 1
                logger.debug("Skipping invalid content: %s", raw.title)
                continue
            cleaned.append(item)
        result.valid = len(cleaned)

        # Dedupe before AI so duplicates never cost a provider call
        unique, stats = self.dedup.dedupe(cleaned, return_stats=True)
        result.dedup = stats
        result.deduplicated = len(unique)

        processed = self.summarizer.process_batch(
            (raw.title, raw.body, raw.suggested_categories) for raw in unique
        )

        articles: List[Article] = []
        for raw, content in zip(unique, processed):
            # ai_processed counts provider calls only
            if content.from_cache:
                result.cache_hits += 1
            elif content.used_ai:
                result.ai_processed += 1
            articles.append(
                Article(
                    title=raw.title,
                    summary=content.summary,
                    body=raw.body,
                    category=content.category,
                    companies=extract_companies_ordered(raw.title, content.summary),
                    source=raw.source,
                    source_url=raw.source_url,
                    image_url=self._image_for(raw),
                    published_at=raw.published_at,
                )
            )
        return articles

    def store_articles(self, articles: List[Article], result: IngestionResult) -> int:
        batch_size = max(1, self.config.store_batch_size)
        stored = 0
        for start in range(0, len(articles), batch_size):
            batch_no = start // batch_size + 1
            try:
                stored += self.store.upsert_batch(articles[start : start + batch_size])
            except StoreError as exc:
                logger.error("Error storing batch %d: %s", batch_no, exc)
                result.errors[f"store batch {batch_no}"] = str(exc)
        return stored

    def run(self, sources: Iterable[FeedSource], *, run_id: Optional[str] = None) -> IngestionResult:
        with run_context(run_id) as active_run:
            result = IngestionResult(ai_provider=self.summarizer.provider, run_id=active_run)
            logger.info("Starting ingestion %s (AI provider: %s)", active_run, result.ai_provider)

            raw_articles, fetch_errors, crawl_skipped = self.fetch_all(sources)
            result.crawled = len(raw_articles)
            result.skipped += crawl_skipped
            result.errors.update(fetch_errors)

            articles = self.process(raw_articles, result)
            if self.dry_run:
                logger.info("[DRY-RUN] Would store %d article(s)", len(articles))
            else:
                result.stored = self.store_articles(articles, result)

            logger.info(
                "Ingestion finished: crawled=%d valid=%d unique=%d ai_processed=%d cache_hits=%d stored=%d skipped=%d errors=%d",
                result.crawled,
                result.valid,
                result.deduplicated,
                result.ai_processed,
                result.cache_hits,
                result.stored,
                result.skipped,
                len(result.errors),
            )
        return result
