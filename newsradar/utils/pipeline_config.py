from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass(slots=True)
class PipelineConfig:
    fetch_workers: int = int(os.getenv("PIPELINE_FETCH_WORKERS", "3"))
    store_batch_size: int = int(os.getenv("PIPELINE_STORE_BATCH_SIZE", "20"))
    url_lookup_batch_size: int = int(os.getenv("PIPELINE_URL_LOOKUP_BATCH_SIZE", "50"))
    ai_batch_size: int = int(os.getenv("PIPELINE_AI_BATCH_SIZE", "3"))
    ai_batch_delay_s: float = float(os.getenv("PIPELINE_AI_BATCH_DELAY", "1.0"))
    body_max_length: int = int(os.getenv("PIPELINE_BODY_MAX_LENGTH", "10000"))
    fetch_og_images: bool = _env_bool("PIPELINE_FETCH_OG_IMAGES", "false")
    rss_item_count: int = int(os.getenv("PIPELINE_RSS_ITEMS", "50"))
    sitemap_item_count: int = int(os.getenv("PIPELINE_SITEMAP_ITEMS", "1000"))
    site_url: str = os.getenv("SITE_URL", "https://updayapp.com")
    site_title: str = os.getenv("SITE_TITLE", "Upday - Tech News, Faster")
    site_description: str = os.getenv(
        "SITE_DESCRIPTION",
        "AI-summarized tech news. Stay ahead with the latest in AI, startups, dev, product and research.",
    )
    output_dir: str = os.getenv("PIPELINE_OUTPUT_DIR", "public")

    @property
    def bounded_fetch_workers(self) -> int:
        # Sources are independent, but upstream rate limits cap fan-out
        return max(1, min(5, self.fetch_workers))
