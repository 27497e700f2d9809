from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

Region = Literal["us", "eu", "global"]


@dataclass(slots=True)
class FeedSource:
    """Configuration for one RSS/Atom feed."""

    name: str
    url: str
    categories: List[str] = field(default_factory=list)
    region: Optional[Region] = None
    priority: int = 3
