from __future__ import annotations

from ...utils.logging import get_logger

logger = get_logger("nr.ai.parsing")

MIN_SUMMARY_CHARS = 50
MAX_SUMMARY_CHARS = 300


def validate_summary(summary: str | None, fallback_title: str) -> str:
    """Too short summaries fall back to the title, long ones are cut to 300 chars."""
    text = (summary or "").strip()
    if len(text) < MIN_SUMMARY_CHARS:
        logger.warning("Summary too short, using title as fallback")
        return fallback_title
    if len(text) > MAX_SUMMARY_CHARS:
        logger.warning("Summary too long, truncating")
        return text[: MAX_SUMMARY_CHARS - 3] + "..."
    return text


def parse_category_response(raw: str | None) -> str:
    """First token of the model's answer, lowercased and stripped of punctuation."""
    if not raw or not raw.strip():
        raise ValueError("Empty AI response")
    token = raw.strip().split()[0]
    return token.strip(".,:;\"'`*").lower()
