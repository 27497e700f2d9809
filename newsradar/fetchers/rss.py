from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlparse

import feedparser
import requests

from ..models import FeedSource, RawArticle
from ..utils.config_loader import FeedSettings
from ..utils.logging import get_logger
from ..utils.retry import is_transient_http_error, with_retries

logger = get_logger("nr.fetchers.rss")

_NON_ARTICLE_PATH_RE = re.compile(r"^/(category|tag|topic|section|feed|rss)/?$")
_IMAGE_EXT_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)", re.IGNORECASE)
_IMG_SRC_RE = re.compile(r"""<img[^>]+src=["']([^"']+)["']""", re.IGNORECASE)


class FetchError(Exception):
    """A feed could not be fetched after retries."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


def is_valid_article_url(url: str) -> bool:
    """Reject homepages and bare category/tag/feed listing pages."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    if parsed.path in ("", "/"):
        return False
    return not _NON_ARTICLE_PATH_RE.match(parsed.path.lower())


def _parse_datetime(entry: dict) -> datetime:
    """Publication time in UTC; now when the entry carries no date at all.

    Raises ``ValueError`` when a date string is present but unparseable.
    """
    # feedparser normalizes *_parsed values to UTC
    for key in ("published", "updated"):
        raw = entry.get(key)
        if not raw:
            continue
        tm = entry.get(f"{key}_parsed")
        if not tm:
            raise ValueError(f"unparseable {key} date {raw!r}")
        try:
            return datetime(*tm[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid {key} date {raw!r}") from exc
    return datetime.now(timezone.utc)


def _entry_body(entry: dict) -> str:
    contents = entry.get("content")
    if contents and isinstance(contents, list):
        value = contents[0].get("value")
        if value:
            return value
    return entry.get("summary") or entry.get("description") or ""


def extract_image_url(entry: dict) -> Optional[str]:
    """media:content, media:thumbnail, an image enclosure, then the first <img> in content."""
    for key in ("media_content", "media_thumbnail"):
        for media in entry.get(key) or []:
            url = media.get("url")
            if url:
                return url

    for enclosure in entry.get("enclosures") or []:
        url = enclosure.get("href") or enclosure.get("url")
        if url and _IMAGE_EXT_RE.search(url):
            return url

    match = _IMG_SRC_RE.search(_entry_body(entry))
    if match:
        return match.group(1)
    return None


def _download(source: FeedSource, settings: FeedSettings) -> bytes:
    resp = requests.get(
        source.url,
        headers={"User-Agent": settings.user_agent},
        timeout=settings.fetch_timeout_s,
    )
    if resp.status_code >= 400:
        logger.warning("RSS fetch failed (%s): %s", resp.status_code, source.url)
        resp.raise_for_status()
    return resp.content


def fetch_feed(source: FeedSource, settings: FeedSettings) -> feedparser.FeedParserDict:
    """Download with retries (5xx/timeouts only) and parse with feedparser."""
    logger.debug("Fetching RSS from %s", source.url)
    try:
        content = with_retries(
            lambda: _download(source, settings),
            attempts=settings.max_retries,
            should_retry=is_transient_http_error,
            label=f"RSS fetch {source.name}",
            env_prefix="FETCH",
        )
    except requests.RequestException as exc:
        raise FetchError(source.name, str(exc)) from exc

    parsed = feedparser.parse(content)
    if getattr(parsed, "bozo", False):
        # feedparser sets bozo on malformed feeds but may still parse entries
        logger.debug("Feed 'bozo' flagged for %s: %s", source.url, getattr(parsed, "bozo_exception", None))
    return parsed


@dataclass(slots=True)
class CrawlResult:
    articles: List[RawArticle] = field(default_factory=list)
    skipped: int = 0


def crawl_source(
    source: FeedSource, settings: FeedSettings, *, max_items: Optional[int] = None
) -> CrawlResult:
    """Fetch one feed and turn its first entries into ``RawArticle`` objects.

    Entries without a title or link, whose link is not an article page, or whose
    date cannot be parsed are skipped and counted in ``CrawlResult.skipped``.
    Raises ``FetchError`` when the feed itself cannot be fetched.
    """
    parsed = fetch_feed(source, settings)
    limit = max_items if max_items is not None else settings.max_items_per_feed

    result = CrawlResult()
    for entry in (getattr(parsed, "entries", []) or [])[:limit]:
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        if not title or not link:
            logger.debug("Skipping entry without title or link from %s", source.name)
            result.skipped += 1
            continue
        if not is_valid_article_url(link):
            logger.debug("Skipping invalid article URL: %s", link)
            result.skipped += 1
            continue
        try:
            published_at = _parse_datetime(entry)
        except ValueError as exc:
            logger.debug("Skipping %s: %s", link, exc)
            result.skipped += 1
            continue

        result.articles.append(
            RawArticle(
                title=title,
                body=_entry_body(entry),
                source_url=link,
                source=source.name,
                published_at=published_at,
                image_url=extract_image_url(entry),
                suggested_categories=list(source.categories),
            )
        )

    logger.info(
        "Fetched %d RSS entries from %s (skipped=%d)", len(result.articles), source.name, result.skipped
    )
    return result
