"""Top-level package for the tech news radar.

This package contains the application entrypoint and all supporting modules
for crawling, cleaning, deduplicating, scoring and republishing tech news.
"""

__all__ = []
