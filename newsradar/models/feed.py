from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .article import Article


@dataclass(slots=True)
class ScoredArticle:
    article: Article
    score: int


@dataclass(slots=True)
class NewsCluster:
    representative: ScoredArticle
    related: List[ScoredArticle] = field(default_factory=list)

    @property
    def id(self) -> Optional[str]:
        return self.representative.article.id

    @property
    def cluster_size(self) -> int:
        return 1 + len(self.related)

    @property
    def members(self) -> List[ScoredArticle]:
        return [self.representative, *self.related]


@dataclass(slots=True)
class WeekBucket:
    week_start: datetime
    week_end: datetime  # Sunday 23:59:59.999, for display
    next_week_start: datetime
    label: str
    clusters: List[NewsCluster] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        return sum(c.cluster_size for c in self.clusters)

    def contains(self, moment: datetime) -> bool:
        return self.week_start <= moment < self.next_week_start


@dataclass(slots=True)
class TimelinePage:
    items: List[Article]
    has_more: bool
    next_cursor: Optional[datetime] = None
