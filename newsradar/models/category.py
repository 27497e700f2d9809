from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Optional

Category = Literal["ai", "startups", "dev", "product", "research"]

CATEGORIES: List[str] = ["ai", "startups", "dev", "product", "research"]

CATEGORY_LABELS: Dict[str, str] = {
    "ai": "AI",
    "startups": "Startups",
    "dev": "Dev",
    "product": "Product",
    "research": "Research",
}

# Ids written by the first ingestion generation. Rows carrying them are still in the
# store, so every read and write path maps them onto the current set.
LEGACY_CATEGORY_ALIASES: Dict[str, str] = {
    "startup": "startups",
    "science": "research",
    "space": "research",
    "design": "product",
}

DEFAULT_CATEGORY = "dev"


def normalize_category(value: Optional[str]) -> Optional[str]:
    """Map a current or legacy category id onto the current set.

    Returns ``None`` for unknown values so callers can decide on a default.
    """
    if not value:
        return None
    key = str(value).strip().lower()
    if key in CATEGORIES:
        return key
    return LEGACY_CATEGORY_ALIASES.get(key)


def normalize_categories(values: Iterable[str]) -> List[str]:
    out: List[str] = []
    for v in values:
        cat = normalize_category(v)
        if cat and cat not in out:
            out.append(cat)
    return out
