from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

MAX_KEYWORDS = 10


@dataclass(slots=True)
class UserInterests:
    categories: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    companies: List[str] = field(default_factory=list)

    @property
    def active_keywords(self) -> List[str]:
        return [k.strip().lower() for k in self.keywords if k and k.strip()]

    @property
    def has_specific_interests(self) -> bool:
        return bool(self.active_keywords) or bool(self.companies)

    def cache_key(self) -> str:
        return "|".join(
            [
                ",".join(sorted(self.categories)),
                ",".join(sorted(self.active_keywords)),
                ",".join(sorted(self.companies)),
            ]
        )
