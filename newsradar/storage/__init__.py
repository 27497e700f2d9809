"""Article persistence."""

from .article_store import ArticleStore, JsonArticleStore, MemoryArticleStore, StoreError

__all__ = ["ArticleStore", "JsonArticleStore", "MemoryArticleStore", "StoreError"]
