from .http import fetch_og_image
from .rss import CrawlResult, FetchError, crawl_source, extract_image_url, is_valid_article_url

__all__ = ["fetch_og_image", "CrawlResult", "FetchError", "crawl_source", "extract_image_url", "is_valid_article_url"]
