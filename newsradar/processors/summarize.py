from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import requests

from .ai import AIClient
from .ai.parsing import validate_summary
from .classify import classify_simple, validate_category
from ..utils.cache import TTLCache
from ..utils.logging import get_logger
from ..utils.retry import is_transient_http_error, with_retries

logger = get_logger("nr.processors.summarize")

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
MIN_SENTENCE_CHARS = 20
MAX_FALLBACK_SUMMARY_CHARS = 200
CACHE_BODY_CHARS = 1000


def simple_summary(title: str, body: str) -> str:
    """First sentences of the body (up to 3, at most ~200 chars), or the title."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(body or "") if len(s.strip()) > MIN_SENTENCE_CHARS]
    if not sentences:
        return title

    summary = ""
    for sentence in sentences[:3]:
        if len(summary) + len(sentence) > MAX_FALLBACK_SUMMARY_CHARS:
            break
        summary += (". " if summary else "") + sentence
    return summary + "."


@dataclass(slots=True)
class ProcessedContent:
    summary: str
    category: str
    used_ai: bool = False
    from_cache: bool = False


class ArticleSummarizer:
    """Summarize and classify articles with an optional AI client.

    Without a client, or when the provider fails, the deterministic
    ``simple_summary`` / ``classify_simple`` pair is used, so callers never see
    AI errors.
    """

    def __init__(
        self,
        ai: Optional[AIClient] = None,
        *,
        cache: Optional[TTLCache] = None,
        batch_size: int = 3,
        batch_delay_s: float = 1.0,
    ) -> None:
        self.ai = ai
        self.cache = cache
        self.batch_size = max(1, batch_size)
        self.batch_delay_s = batch_delay_s
        self.failures = 0

    @property
    def provider(self) -> str:
        return self.ai.name if self.ai is not None else "none"

    @staticmethod
    def _call_ai(ai: AIClient, title: str, body: str) -> dict:
        summary = with_retries(
            lambda: ai.summarize(title, body),
            should_retry=is_transient_http_error,
            label="AI summary",
            env_prefix="AI",
        )
        category = with_retries(
            lambda: ai.classify(title, body),
            should_retry=is_transient_http_error,
            label="AI classification",
            env_prefix="AI",
        )
        return {"summary": validate_summary(summary, title), "category": validate_category(category)}

    def _fallback(self, title: str, body: str, suggested: Sequence[str]) -> ProcessedContent:
        return ProcessedContent(
            summary=simple_summary(title, body),
            category=classify_simple(title, body, suggested),
        )

    def process(self, title: str, body: str, suggested_categories: Sequence[str] = ()) -> ProcessedContent:
        """Summary and category for one article.

        ``used_ai`` marks AI-produced content; ``from_cache`` tells a cache hit apart
        from a provider call made for this article.
        """
        ai = self.ai
        if ai is None:
            return self._fallback(title, body, suggested_categories)

        try:
            if self.cache is not None:
                key = TTLCache.content_key(f"{title}\n{body[:CACHE_BODY_CHARS]}")
                result, from_cache = self.cache.get_or_compute(key, lambda: self._call_ai(ai, title, body))
                if from_cache:
                    logger.debug("AI cache hit for: %s", title[:50])
            else:
                result, from_cache = self._call_ai(ai, title, body), False
        except (requests.RequestException, ValueError) as exc:
            self.failures += 1
            logger.warning("AI processing failed for %r, using fallback: %s", title[:50], exc)
            return self._fallback(title, body, suggested_categories)

        return ProcessedContent(
            summary=result["summary"],
            category=validate_category(result["category"]),
            used_ai=True,
            from_cache=from_cache,
        )

    def process_batch(self, items: Iterable[Tuple[str, str, Sequence[str]]]) -> List[ProcessedContent]:
        """Process ``(title, body, suggested_categories)`` tuples in rate-limited groups."""
        pending = list(items)
        results: List[ProcessedContent] = []
        total_batches = (len(pending) + self.batch_size - 1) // self.batch_size
        for start in range(0, len(pending), self.batch_size):
            batch = pending[start : start + self.batch_size]
            if self.ai is not None:
                logger.debug("AI batch %d/%d", start // self.batch_size + 1, total_batches)
            results.extend(self.process(title, body, suggested) for title, body, suggested in batch)
            # Pause only when the provider was actually called
            is_last = start + self.batch_size >= len(pending)
            if self.ai is not None and not is_last and self.batch_delay_s > 0:
                time.sleep(self.batch_delay_s)
        return results
