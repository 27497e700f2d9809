from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from ..utils.logging import get_logger

logger = get_logger("nr.fetchers.http")

_DEFAULT_USER_AGENT = "upday-news-bot/1.0"


def _validated_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL for HTTP fetch: {url}")
    return url


def extract_og_image(html: str, base_url: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for attrs in ({"property": "og:image"}, {"name": "og:image"}, {"name": "twitter:image"}):
        meta = soup.find("meta", attrs=attrs)
        if meta and meta.get("content"):
            return urljoin(base_url, meta["content"].strip())
    return None


def fetch_og_image(url: str, *, timeout: float = 10.0, user_agent: str = _DEFAULT_USER_AGENT) -> Optional[str]:
    """Best-effort og:image lookup for articles whose feed entry carried no image."""
    try:
        resp = requests.get(_validated_url(url), headers={"User-Agent": user_agent}, timeout=timeout)
        resp.raise_for_status()
    except (requests.RequestException, ValueError) as exc:
        logger.debug("og:image fetch failed for %s: %s", url, exc)
        return None
    return extract_og_image(resp.text, url)
