"""Title similarity: 60% word-set Jaccard, 40% normalized Levenshtein."""

from __future__ import annotations

from typing import FrozenSet

from rapidfuzz.distance import Levenshtein

JACCARD_WEIGHT = 0.6
LEVENSHTEIN_WEIGHT = 0.4


def word_set(text: str) -> FrozenSet[str]:
    return frozenset(w for w in (text or "").lower().split() if len(w) > 2)


def jaccard(a: str, b: str) -> float:
    words_a = word_set(a)
    words_b = word_set(b)
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def levenshtein_similarity(a: str, b: str) -> float:
    a_low = (a or "").lower()
    b_low = (b or "").lower()
    max_len = max(len(a_low), len(b_low))
    if max_len == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a_low, b_low) / max_len


def similarity(a: str, b: str) -> float:
    """Combined similarity in [0, 1]; symmetric, and 1.0 for case-insensitively equal strings."""
    if (a or "").lower() == (b or "").lower():
        return 1.0
    return JACCARD_WEIGHT * jaccard(a, b) + LEVENSHTEIN_WEIGHT * levenshtein_similarity(a, b)
