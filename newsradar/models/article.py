from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class RawArticle:
    """An entry as crawled from a feed, before cleaning and AI processing."""

    title: str
    body: str
    source_url: str
    source: str
    published_at: datetime
    image_url: Optional[str] = None
    suggested_categories: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Article:
    title: str
    summary: str
    category: str
    source: str
    source_url: str
    published_at: datetime
    body: str = ""
    companies: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def text(self) -> str:
        """Lowercased ``title + " " + summary`` used by every matcher."""
        return f"{self.title} {self.summary}".lower()
