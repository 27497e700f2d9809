from __future__ import annotations

import re
from typing import List, Tuple

from ..utils.logging import get_logger

_logger = get_logger("nr.processors.clean")

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")

# Decoded in this order
_ENTITIES: List[Tuple[str, str]] = [
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#x27;", "'"),
    ("&#x2F;", "/"),
]
_TITLE_ENTITIES = _ENTITIES[:6]
_NAMED_ENTITY_RE = re.compile(r"&[a-z]+;", re.IGNORECASE)
_NUMERIC_ENTITY_RE = re.compile(r"&#\d+;")

_AD_PATTERNS = [
    re.compile(r"\[ad(?:vertisement)?\]", re.IGNORECASE),
    re.compile(r"\[sponsored\]", re.IGNORECASE),
    re.compile(r"\[promo(?:tion)?\]", re.IGNORECASE),
    re.compile(r"sponsored content", re.IGNORECASE),
    re.compile(r"paid partnership", re.IGNORECASE),
    re.compile(r"advertisement", re.IGNORECASE),
]

# Each pattern swallows the rest of its line
_BOILERPLATE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"subscribe to our newsletter.*",
        r"sign up for.*(?:newsletter|updates|alerts).*",
        r"get the latest.*(?:news|updates|stories).*",
        r"follow us on.*(?:twitter|facebook|instagram|linkedin).*",
        r"share this (?:article|story|post).*",
        r"like us on facebook.*",
        r"leave a comment.*",
        r"join the (?:conversation|discussion).*",
        r"we use cookies.*",
        r"by continuing to.*(?:browse|use|visit).*",
        r"about the author.*",
        r"\[author:.*?\]",
        r"read more:?.*",
        r"related articles?:?.*",
        r"see also:?.*",
        r"©.*",
        r"all rights reserved.*",
    )
]

_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_INLINE_WS_RE = re.compile(r"[\t\r\f\v]+")
_SPACES_RE = re.compile(r" +")
_MANY_NEWLINES_RE = re.compile(r"\n{3,}")
_WHITESPACE_RE = re.compile(r"\s+")
_TITLE_SUFFIX_RE = re.compile(r"(?:\s*\|\s*|\s+[–—-]\s+)[^|–—-]+$")

MIN_TITLE_LENGTH = 10
MIN_BODY_LENGTH = 100
SHOUTING_TITLE_LENGTH = 20


def _decode_entities(text: str, table: List[Tuple[str, str]]) -> str:
    for entity, char in table:
        text = re.sub(re.escape(entity), char, text, flags=re.IGNORECASE)
    return text


def strip_html(raw_html: str) -> str:
    text = _SCRIPT_RE.sub("", raw_html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _decode_entities(text, _ENTITIES)
    text = _NAMED_ENTITY_RE.sub(" ", text)
    return _NUMERIC_ENTITY_RE.sub(" ", text)


def strip_ads(text: str) -> str:
    for pattern in _AD_PATTERNS:
        text = pattern.sub("", text)
    return text


def strip_boilerplate(text: str) -> str:
    for pattern in _BOILERPLATE_PATTERNS:
        text = pattern.sub("", text)
    return text


def strip_urls(text: str) -> str:
    return _URL_RE.sub("", text)


def normalize_whitespace(text: str) -> str:
    text = _INLINE_WS_RE.sub(" ", text)
    text = _SPACES_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _MANY_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def clean_article_body(raw_html: str | None) -> str:
    """Turn feed HTML into plain text.

    - Drop script/style blocks, then all tags
    - Decode common entities, remove the rest
    - Remove ad markers and boilerplate trailers (newsletter, social, cookies,
      read-more, copyright)
    - Remove bare URLs and normalize whitespace
    """
    if not raw_html:
        return ""
    text = strip_html(raw_html)
    text = strip_ads(text)
    text = strip_boilerplate(text)
    text = strip_urls(text)
    return normalize_whitespace(text)


def clean_and_truncate_body(raw_html: str | None, max_length: int = 10000) -> str:
    cleaned = clean_article_body(raw_html)
    if len(cleaned) <= max_length:
        return cleaned
    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."


def clean_title(title: str | None) -> str:
    """Lighter cleaning for titles: entities, trailing "| Site" suffix, whitespace."""
    if not title:
        return ""
    text = _decode_entities(title, _TITLE_ENTITIES)
    text = _TITLE_SUFFIX_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_valid_content(title: str, body: str) -> bool:
    cleaned_title = clean_title(title)
    cleaned_body = clean_article_body(body)

    if len(cleaned_title) < MIN_TITLE_LENGTH:
        _logger.debug("Rejected short title: %r", cleaned_title)
        return False
    if len(cleaned_body) < MIN_BODY_LENGTH:
        _logger.debug("Rejected short body for: %s", cleaned_title)
        return False
    if cleaned_title == cleaned_title.upper() and len(cleaned_title) > SHOUTING_TITLE_LENGTH:
        _logger.debug("Rejected all-caps title: %s", cleaned_title)
        return False
    return True
