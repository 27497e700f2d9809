from __future__ import annotations

import json
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..models import Article, normalize_category
from ..models.category import DEFAULT_CATEGORY
from ..utils.logging import get_logger

logger = get_logger("nr.storage.articles")


class StoreError(Exception):
    """Raised when the article store cannot be read or written."""


class ArticleStore(ABC):
    """Persistence contract for articles, keyed uniquely by ``source_url``."""

    @abstractmethod
    def query(
        self,
        *,
        category: Optional[str] = None,
        categories: Optional[Sequence[str]] = None,
        published_after: Optional[datetime] = None,
        cursor: Optional[datetime] = None,
        limit: int = 20,
        include_body: bool = False,
    ) -> Tuple[List[Article], bool]:
        """Return ``(items, has_more)`` ordered by ``published_at`` descending.

        ``cursor`` is exclusive: only articles strictly older than it are returned.
        Bodies are blanked unless ``include_body`` is set.
        """

    @abstractmethod
    def upsert_batch(self, articles: Sequence[Article]) -> int:
        """Insert articles whose ``source_url`` is new; return the inserted count."""

    @abstractmethod
    def exists_by_urls(self, urls: Sequence[str]) -> Set[str]:
        """Subset of ``urls`` already stored."""

    @abstractmethod
    def update_companies(self, article_id: str, companies: Sequence[str]) -> bool:
        """Set the company slugs of one article. Other fields are never touched."""


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class MemoryArticleStore(ArticleStore):
    def __init__(self, articles: Iterable[Article] = ()) -> None:
        self._lock = threading.RLock()
        self._by_url: Dict[str, Article] = {}
        self._insert(list(articles))

    def _insert(self, articles: Sequence[Article]) -> int:
        inserted = 0
        for art in articles:
            if not art.source_url or art.source_url in self._by_url:
                continue
            if art.id is None:
                art.id = uuid.uuid4().hex
            self._by_url[art.source_url] = art
            inserted += 1
        return inserted

    def __len__(self) -> int:
        return len(self._by_url)

    def all(self) -> List[Article]:
        with self._lock:
            return sorted(self._by_url.values(), key=lambda a: _aware(a.published_at), reverse=True)

    def query(
        self,
        *,
        category: Optional[str] = None,
        categories: Optional[Sequence[str]] = None,
        published_after: Optional[datetime] = None,
        cursor: Optional[datetime] = None,
        limit: int = 20,
        include_body: bool = False,
    ) -> Tuple[List[Article], bool]:
        wanted: Optional[Set[str]] = None
        if category and category != "all":
            wanted = {normalize_category(category) or category}
        elif categories:
            wanted = {normalize_category(c) or c for c in categories}

        matches: List[Article] = []
        for art in self.all():
            published = _aware(art.published_at)
            if wanted is not None and (normalize_category(art.category) or DEFAULT_CATEGORY) not in wanted:
                continue
            if published_after is not None and published < _aware(published_after):
                continue
            if cursor is not None and published >= _aware(cursor):
                continue
            matches.append(art)
            # one extra row tells us whether another page exists
            if len(matches) > limit:
                break

        has_more = len(matches) > limit
        page = matches[:limit]
        if not include_body:
            page = [replace(a, body="") for a in page]
        return page, has_more

    def upsert_batch(self, articles: Sequence[Article]) -> int:
        with self._lock:
            return self._insert(articles)

    def exists_by_urls(self, urls: Sequence[str]) -> Set[str]:
        with self._lock:
            return {u for u in urls if u in self._by_url}

    def get(self, article_id: str) -> Optional[Article]:
        with self._lock:
            for art in self._by_url.values():
                if art.id == article_id:
                    return art
        return None

    def update_companies(self, article_id: str, companies: Sequence[str]) -> bool:
        with self._lock:
            art = self.get(article_id)
            if art is None:
                return False
            art.companies = list(companies)
            return True


def article_to_dict(a: Article, *, include_body: bool = True) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "summary": a.summary,
        "body": a.body if include_body else "",
        "category": a.category,
        "companies": list(a.companies),
        "source": a.source,
        "source_url": a.source_url,
        "image_url": a.image_url,
        "published_at": _aware(a.published_at).isoformat(),
        "created_at": _aware(a.created_at).isoformat(),
    }


def _parse_iso(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return _aware(datetime.fromisoformat(value.replace("Z", "+00:00")))


def dict_to_article(d: dict) -> Article:
    return Article(
        id=d.get("id"),
        title=d.get("title") or "",
        summary=d.get("summary") or "",
        body=d.get("body") or "",
        # legacy ids stay readable; normalization happens at query/scoring time
        category=d.get("category") or DEFAULT_CATEGORY,
        companies=list(d.get("companies") or []),
        source=d.get("source") or "",
        source_url=d.get("source_url") or "",
        image_url=d.get("image_url"),
        published_at=_parse_iso(d.get("published_at")),
        created_at=_parse_iso(d.get("created_at")),
    )


class JsonArticleStore(MemoryArticleStore):
    """JSON file-backed store.

    The whole file is loaded at start and rewritten after every write. Rows are
    merged by ``source_url``; existing rows are never overwritten by inserts.
    """

    def __init__(self, path: str | Path = "data/articles.json") -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            rows = [dict_to_article(r) for r in data.get("articles", []) if isinstance(r, dict)]
        except (json.JSONDecodeError, OSError, ValueError) as exc:
            raise StoreError(f"Failed to load article store {self.path}: {exc}") from exc
        self._insert(rows)
        logger.debug("Loaded %d article(s) from %s", len(rows), self.path)

    def _save(self) -> None:
        rows = [article_to_dict(a) for a in self.all()]
        payload = {"count": len(rows), "articles": rows}
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise StoreError(f"Failed to write article store {self.path}: {exc}") from exc

    def upsert_batch(self, articles: Sequence[Article]) -> int:
        with self._lock:
            inserted = self._insert(articles)
            if inserted:
                self._save()
            return inserted

    def update_companies(self, article_id: str, companies: Sequence[str]) -> bool:
        with self._lock:
            updated = super().update_companies(article_id, companies)
            if updated:
                self._save()
            return updated
