"""Command-line entrypoint for the tech news radar.

Default flow:
1) load configuration
2) crawl, clean, dedupe, summarize and store new articles
3) regenerate the RSS feed and news sitemap
"""

from __future__ import annotations

import argparse
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .output import timeline_to_dict, to_json_str, weeks_to_dicts, write_feeds
from .output.github_publisher import publish_feed_files
from .pipeline import EnrichmentQueue, MyFeedService, Orchestrator, backfill_companies, build_timeline
from .processors import ArticleSummarizer
from .processors.ai import create_ai_client
from .storage import JsonArticleStore, StoreError
from .utils.cache import JsonFileBackend, TTLCache
from .utils.config_loader import ConfigError, load_interests, load_sources_config, source_diversity_stats
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import PipelineConfig


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Tech news radar - aggregate, dedupe, summarize and personalize tech news"
    )
    parser.add_argument(
        "--config",
        default="config/sources.yaml",
        help="Path to sources configuration file (YAML)",
    )
    parser.add_argument(
        "--store",
        default=os.environ.get("ARTICLE_STORE_PATH", "data/articles.json"),
        help="Path to the JSON article store",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run without writing to the store or GitHub; log planned actions",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Use the deterministic summarizer/classifier even if an AI provider is configured",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: LOG_LEVEL env or INFO)",
    )
    parser.add_argument(
        "--max-items-per-source",
        type=int,
        default=None,
        help="Limit number of entries taken from each feed (for quick runs)",
    )
    parser.add_argument(
        "--my-feed",
        action="store_true",
        help="Print the personalized weekly feed as JSON (requires --interests)",
    )
    parser.add_argument("--interests", default=None, help="Path to an interests profile (YAML)")
    parser.add_argument(
        "--timeline",
        action="store_true",
        help="Print one page of the general timeline as JSON",
    )
    parser.add_argument("--category", default=None, help="Timeline category filter")
    parser.add_argument(
        "--cursor",
        default=None,
        help="Timeline cursor (ISO timestamp of the last item of the previous page)",
    )
    parser.add_argument("--limit", type=int, default=20, help="Timeline page size")
    parser.add_argument(
        "--backfill-companies",
        action="store_true",
        help="Tag stored articles that have no companies yet and exit",
    )
    parser.add_argument(
        "--publish-feeds",
        action="store_true",
        help="Only regenerate feed.xml and news-sitemap.xml and exit",
    )
    parser.add_argument(
        "--commit-feeds",
        action="store_true",
        help="Commit generated feed files to the repository from env (FEED_REPOSITORY)",
    )
    parser.add_argument(
        "--sources-stats",
        action="store_true",
        help="Log source diversity statistics and exit",
    )
    return parser.parse_args(argv)


def _build_summarizer(cfg: PipelineConfig, *, no_ai: bool) -> ArticleSummarizer:
    ai = None if no_ai else create_ai_client()
    cache = None
    if ai is not None:
        ttl_hours = float(os.environ.get("AI_CACHE_TTL_HOURS", "24"))
        cache_path = os.environ.get("AI_CACHE_PATH", "./.cache/ai-cache.json")
        cache = TTLCache(JsonFileBackend(cache_path), ttl_seconds=ttl_hours * 3600)
        cache.purge_expired()
    return ArticleSummarizer(ai, cache=cache, batch_size=cfg.ai_batch_size, batch_delay_s=cfg.ai_batch_delay_s)


def _publish(store: JsonArticleStore, cfg: PipelineConfig, args: argparse.Namespace) -> None:
    logger = get_logger("nr.cli")
    files = write_feeds(store, cfg)
    if args.commit_feeds:
        committed = publish_feed_files(files, path_prefix=cfg.output_dir, dry_run=args.dry_run)
        logger.info("Committed feed files: %s", committed)


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("nr.cli")
    cfg = PipelineConfig()

    try:
        store = JsonArticleStore(args.store)
    except StoreError as exc:
        logger.error("%s", exc)
        return 1

    if args.timeline:
        cursor = datetime.fromisoformat(args.cursor) if args.cursor else None
        page = build_timeline(store, args.category, cursor, args.limit)
        print(to_json_str(timeline_to_dict(page)))
        return 0

    if args.my_feed:
        if not args.interests:
            logger.error("--my-feed requires --interests PATH")
            return 1
        try:
            interests = load_interests(args.interests)
        except ConfigError as exc:
            logger.error("Invalid interests profile: %s", exc)
            return 1
        queue = EnrichmentQueue()
        try:
            weeks = MyFeedService(store, enrichment=None if args.dry_run else queue).build(interests)
            print(to_json_str(weeks_to_dicts(weeks)))
        finally:
            queue.drain(timeout=30)
            queue.shutdown()
        return 0

    if args.backfill_companies:
        queue = EnrichmentQueue()
        try:
            tagged = backfill_companies(store, queue, dry_run=args.dry_run)
        finally:
            queue.drain()
            queue.shutdown()
        logger.info("Backfilled companies for %d article(s)", tagged)
        return 0

    if args.publish_feeds:
        try:
            _publish(store, cfg, args)
        except RuntimeError as exc:
            logger.error("%s", exc)
            return 1
        return 0

    config_path = Path(args.config)
    logger.info("Loading sources configuration from %s", config_path)
    try:
        sources_cfg = load_sources_config(config_path)
    except ConfigError as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1
    logger.info("Loaded %d source(s)", len(sources_cfg.sources))

    if args.sources_stats:
        stats = source_diversity_stats(sources_cfg.sources)
        logger.info("Sources: total=%s", stats["total"])
        logger.info("By region: %s", stats["by_region"])
        logger.info("By source: %s", stats["by_source"])
        return 0

    orch = Orchestrator(
        store,
        settings=sources_cfg.settings,
        config=cfg,
        summarizer=_build_summarizer(cfg, no_ai=args.no_ai),
        dry_run=args.dry_run,
        max_items_per_source=args.max_items_per_source,
    )
    result = orch.run(sources_cfg.sources)
    for name, message in sorted(result.errors.items()):
        logger.warning("Error in %s: %s", name, message)

    if not args.dry_run:
        try:
            _publish(store, cfg, args)
        except RuntimeError as exc:
            logger.error("%s", exc)
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
