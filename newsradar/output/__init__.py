"""Outputs: syndication XML, JSON rendering and GitHub publishing."""

from .json_feed import timeline_to_dict, to_json_str, weeks_to_dicts
from .rss_feed import build_feed_documents, render_news_sitemap, render_rss, write_feeds

__all__ = [
    "timeline_to_dict",
    "to_json_str",
    "weeks_to_dicts",
    "build_feed_documents",
    "render_news_sitemap",
    "render_rss",
    "write_feeds",
]
