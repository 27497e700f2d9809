"""Syndication artifacts: RSS 2.0 channel and Google News sitemap."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Dict, Optional, Sequence
from xml.sax.saxutils import escape

from ..models import Article
from ..storage import ArticleStore
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig

logger = get_logger("nr.output.rss")

_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def _esc(text: Optional[str]) -> str:
    return escape(text or "", _ATTR_ENTITIES)


def _utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc) if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def rfc822(dt: datetime) -> str:
    return format_datetime(_utc(dt), usegmt=True)


def _rss_item(article: Article) -> str:
    description = article.summary or article.title
    url = _esc(article.source_url)
    return (
        "    <item>\n"
        f"      <title>{_esc(article.title)}</title>\n"
        f"      <link>{url}</link>\n"
        f"      <description>{_esc(description)}</description>\n"
        f"      <pubDate>{rfc822(article.published_at)}</pubDate>\n"
        f"      <category>{_esc(article.category)}</category>\n"
        f'      <source url="{url}">{_esc(article.source)}</source>\n'
        f'      <guid isPermaLink="true">{url}</guid>\n'
        "    </item>"
    )


def render_rss(articles: Sequence[Article], config: PipelineConfig, *, now: Optional[datetime] = None) -> str:
    site = config.site_url.rstrip("/")
    items = "\n".join(_rss_item(a) for a in articles)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">\n'
        "  <channel>\n"
        f"    <title>{_esc(config.site_title)}</title>\n"
        f"    <link>{_esc(site)}</link>\n"
        f"    <description>{_esc(config.site_description)}</description>\n"
        "    <language>en-us</language>\n"
        f"    <lastBuildDate>{rfc822(now or datetime.now(timezone.utc))}</lastBuildDate>\n"
        f'    <atom:link href="{_esc(site)}/feed.xml" rel="self" type="application/rss+xml"/>\n'
        f"{items}\n"
        "  </channel>\n"
        "</rss>\n"
    )


def _sitemap_url(article: Article, config: PipelineConfig) -> str:
    site = config.site_url.rstrip("/")
    loc = f"{site}/news/{article.id}" if article.id else article.source_url
    published = _utc(article.published_at).isoformat(timespec="seconds")
    return (
        "  <url>\n"
        f"    <loc>{_esc(loc)}</loc>\n"
        "    <news:news>\n"
        "      <news:publication>\n"
        f"        <news:name>{_esc(config.site_title)}</news:name>\n"
        "        <news:language>en</news:language>\n"
        "      </news:publication>\n"
        f"      <news:publication_date>{published}</news:publication_date>\n"
        f"      <news:title>{_esc(article.title)}</news:title>\n"
        "    </news:news>\n"
        "  </url>"
    )


def render_news_sitemap(articles: Sequence[Article], config: PipelineConfig) -> str:
    urls = "\n".join(_sitemap_url(a, config) for a in articles)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"\n'
        '        xmlns:news="http://www.google.com/schemas/sitemap-news/0.9">\n'
        f"{urls}\n"
        "</urlset>\n"
    )


def build_feed_documents(
    store: ArticleStore, config: PipelineConfig, *, now: Optional[datetime] = None
) -> Dict[str, str]:
    """Render ``feed.xml`` (latest 50) and ``news-sitemap.xml`` (latest 1000)."""
    latest_rss, _ = store.query(limit=config.rss_item_count)
    latest_sitemap, _ = store.query(limit=config.sitemap_item_count)
    return {
        "feed.xml": render_rss(latest_rss, config, now=now),
        "news-sitemap.xml": render_news_sitemap(latest_sitemap, config),
    }


def write_feeds(
    store: ArticleStore,
    config: PipelineConfig,
    *,
    output_dir: Optional[Path | str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Path]:
    target = Path(output_dir or config.output_dir)
    target.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}
    for name, document in build_feed_documents(store, config, now=now).items():
        path = target / name
        path.write_text(document, encoding="utf-8")
        written[name] = path
    logger.info("Wrote %s to %s", ", ".join(sorted(written)), target)
    return written
