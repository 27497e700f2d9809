from __future__ import annotations

from typing import Dict, Iterable, List

from ..models.category import DEFAULT_CATEGORY, normalize_categories, normalize_category
from ..utils.logging import get_logger

logger = get_logger("nr.processors.classify")

# Checked in this order; the first category with the highest count wins
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "ai": ["ai", "artificial intelligence", "machine learning", "llm", "gpt", "claude", "chatbot", "neural"],
    "startups": ["startup", "funding", "series a", "series b", "ipo", "acquisition", "unicorn", "venture"],
    "research": [
        "research", "study", "scientists", "discovery", "experiment", "medical", "biology", "physics",
        "space", "nasa", "spacex", "rocket", "mars", "moon", "satellite", "orbit", "astronaut",
    ],
    "product": ["design", "ui", "ux", "figma", "adobe", "creative", "visual", "interface"],
    "dev": ["developer", "programming", "code", "github", "javascript", "python", "react", "api", "framework"],
}


def classify_simple(title: str, body: str, suggested_categories: Iterable[str] = ()) -> str:
    """Keyword classifier used when no AI provider is available.

    A feed's configured category wins outright; otherwise the category with the
    most keyword hits in title+body, defaulting to ``dev``.
    """
    suggested = normalize_categories(suggested_categories)
    if suggested:
        return suggested[0]

    text = f"{title} {body}".lower()
    best_category = DEFAULT_CATEGORY
    best_score = 0
    for category, keywords in CATEGORY_KEYWORDS.items():
        score = sum(1 for kw in keywords if kw in text)
        if score > best_score:
            best_score = score
            best_category = category
    return best_category


def validate_category(value: str | None) -> str:
    category = normalize_category(value)
    if category is None:
        logger.warning("Invalid category returned: %r, defaulting to %s", value, DEFAULT_CATEGORY)
        return DEFAULT_CATEGORY
    return category
