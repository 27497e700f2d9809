from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence, Set, TypeVar
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .similarity import similarity
from ..utils.logging import get_logger

logger = get_logger("nr.processors.dedup")

TITLE_SIMILARITY_THRESHOLD = 0.75
URL_LOOKUP_BATCH_SIZE = 50

_TRACKING_PARAMS = {"ref", "source", "fbclid", "gclid", "mc_cid", "mc_eid"}


class _HasTitleAndUrl(Protocol):
    title: str
    source_url: str


class _UrlLookup(Protocol):
    def exists_by_urls(self, urls: Sequence[str]) -> Set[str]:
        ...


A = TypeVar("A", bound=_HasTitleAndUrl)


def normalize_url(url: str) -> str:
    """Drop tracking parameters and the fragment, trim a trailing slash."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    query = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if not k.lower().startswith("utm_") and k.lower() not in _TRACKING_PARAMS
    ]
    path = parts.path or "/"
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), ""))


@dataclass(slots=True)
class DedupStats:
    input: int = 0
    after_url_filter: int = 0
    after_title_filter: int = 0
    url_duplicates: int = 0
    title_duplicates: int = 0

    @property
    def ai_calls_saved(self) -> int:
        return self.url_duplicates + self.title_duplicates


class Deduplicator:
    """Two-stage batch deduplication.

    Stages:
    - Exact URL filter against the store (original and normalized URLs, looked up
      in chunks so each query stays small)
    - Intra-batch near-duplicate titles: a candidate is dropped when its title is
      more than ``title_threshold`` similar to an already accepted one, or when its
      normalized URL was already accepted
    """

    def __init__(
        self,
        store: _UrlLookup | None = None,
        *,
        title_threshold: float = TITLE_SIMILARITY_THRESHOLD,
        url_batch_size: int = URL_LOOKUP_BATCH_SIZE,
    ) -> None:
        self.store = store
        self.title_threshold = title_threshold
        self.url_batch_size = max(1, url_batch_size)

    def _existing_urls(self, articles: Sequence[A]) -> Set[str]:
        if self.store is None or not articles:
            return set()
        to_check: List[str] = []
        seen: Set[str] = set()
        for art in articles:
            for url in (art.source_url, normalize_url(art.source_url)):
                if url not in seen:
                    seen.add(url)
                    to_check.append(url)

        existing: Set[str] = set()
        for start in range(0, len(to_check), self.url_batch_size):
            chunk = to_check[start : start + self.url_batch_size]
            for url in self.store.exists_by_urls(chunk):
                existing.add(url)
                existing.add(normalize_url(url))
        return existing

    def filter_existing_urls(self, articles: Sequence[A]) -> List[A]:
        existing = self._existing_urls(articles)
        return [
            a for a in articles if a.source_url not in existing and normalize_url(a.source_url) not in existing
        ]

    def filter_similar_titles(self, articles: Sequence[A]) -> List[A]:
        unique: List[A] = []
        seen_urls: Set[str] = set()
        for art in articles:
            url = normalize_url(art.source_url)
            if url in seen_urls:
                continue
            if any(similarity(kept.title, art.title) > self.title_threshold for kept in unique):
                logger.debug("Dropped near-duplicate title: %s", art.title)
                continue
            seen_urls.add(url)
            unique.append(art)
        return unique

    def dedupe(self, articles: Sequence[A], *, return_stats: bool = False):
        """Return the surviving articles in their original order.

        If ``return_stats`` is True, returns a tuple of (articles, DedupStats).
        """
        batch = list(articles)
        after_url = self.filter_existing_urls(batch)
        after_title = self.filter_similar_titles(after_url)
        stats = DedupStats(
            input=len(batch),
            after_url_filter=len(after_url),
            after_title_filter=len(after_title),
            url_duplicates=len(batch) - len(after_url),
            title_duplicates=len(after_url) - len(after_title),
        )
        if batch:
            logger.info(
                "Dedup: input=%d url_dupes=%d title_dupes=%d unique=%d ai_calls_saved=%d",
                stats.input,
                stats.url_duplicates,
                stats.title_duplicates,
                stats.after_title_filter,
                stats.ai_calls_saved,
            )
        return (after_title, stats) if return_stats else after_title
