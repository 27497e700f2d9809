"""Tests for YAML config loading."""

import pytest

from newsradar.models import FeedSource
from newsradar.utils.config_loader import (
    ConfigError,
    load_interests,
    load_sources_config,
    source_diversity_stats,
)

SOURCES_YAML = """
settings:
  max_items_per_feed: 5
  fetch_timeout_s: 4
sources:
  - name: TechCrunch
    url: https://techcrunch.com/category/startups/feed/
    categories: [startup]
    region: us
    priority: 5
  - name: NASA
    url: https://www.nasa.gov/feed/
    categories: [space, science]
"""


def _write(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadSourcesConfig:
    def test_loads_and_maps_legacy_categories(self, tmp_path):
        cfg = load_sources_config(_write(tmp_path, SOURCES_YAML))
        assert cfg.settings.max_items_per_feed == 5
        assert cfg.settings.fetch_timeout_s == 4.0
        assert cfg.settings.max_retries == 3
        assert cfg.settings.user_agent == "upday-news-bot/1.0"
        assert [s.categories for s in cfg.sources] == [["startups"], ["research"]]
        assert cfg.sources[1].priority == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_sources_config(tmp_path / "nope.yaml")

    def test_missing_required_field(self, tmp_path):
        text = "sources:\n  - name: X\n    url: https://x.example/feed\n"
        with pytest.raises(ConfigError, match="Missing required fields"):
            load_sources_config(_write(tmp_path, text))

    @pytest.mark.parametrize(
        "extra",
        [
            "    region: asia\n",
            "    priority: 9\n",
        ],
    )
    def test_invalid_optional_fields(self, tmp_path, extra):
        text = "sources:\n  - name: X\n    url: https://x.example/feed\n    categories: [ai]\n" + extra
        with pytest.raises(ConfigError):
            load_sources_config(_write(tmp_path, text))

    def test_unknown_category(self, tmp_path):
        text = "sources:\n  - name: X\n    url: https://x.example/feed\n    categories: [cooking]\n"
        with pytest.raises(ConfigError, match="cooking"):
            load_sources_config(_write(tmp_path, text))

    def test_relative_url_rejected(self, tmp_path):
        text = "sources:\n  - name: X\n    url: /feed\n    categories: [ai]\n"
        with pytest.raises(ConfigError, match="Invalid URL"):
            load_sources_config(_write(tmp_path, text))

    def test_empty_sources(self, tmp_path):
        with pytest.raises(ConfigError):
            load_sources_config(_write(tmp_path, "sources: []\n"))


class TestLoadInterests:
    def test_loads_profile(self, tmp_path):
        text = "categories: [ai, design]\nkeywords: [' GPT-5 ', '']\ncompanies: [OpenAI]\n"
        interests = load_interests(_write(tmp_path, text))
        assert interests.categories == ["ai", "product"]
        assert interests.keywords == ["GPT-5"]
        assert interests.companies == ["openai"]

    def test_too_many_keywords(self, tmp_path):
        keywords = ", ".join(f"k{i}" for i in range(11))
        with pytest.raises(ConfigError, match="At most 10"):
            load_interests(_write(tmp_path, f"categories: [ai]\nkeywords: [{keywords}]\n"))

    def test_keywords_must_be_strings(self, tmp_path):
        with pytest.raises(ConfigError):
            load_interests(_write(tmp_path, "keywords: ai\n"))


class TestSourceDiversity:
    def test_counts_unique_urls(self):
        sources = [
            FeedSource(name="Wired", url="https://wired.example/a", region="us"),
            FeedSource(name="Wired", url="https://wired.example/b", region="us"),
            FeedSource(name="Wired", url="https://wired.example/a", region="us"),
            FeedSource(name="Dezeen", url="https://dezeen.example/feed", region="eu"),
            FeedSource(name="Misc", url="https://misc.example/feed"),
        ]
        stats = source_diversity_stats(sources)
        assert stats["total"] == 4
        assert stats["by_region"] == {"us": 2, "eu": 1, "unknown": 1}
        assert stats["by_source"] == {"Wired": 2, "Dezeen": 1, "Misc": 1}
