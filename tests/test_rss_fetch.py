"""Tests for RSS crawling (network mocked)."""

from datetime import datetime, timezone

import pytest
import requests

from newsradar.fetchers.http import extract_og_image
from newsradar.fetchers.rss import FetchError, crawl_source, extract_image_url, is_valid_article_url
from newsradar.models import FeedSource
from newsradar.utils.config_loader import FeedSettings

SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Tech</title>
    <link>https://example.com/</link>
    <description>Example</description>
    <item>
      <title>OpenAI launches GPT-5</title>
      <link>https://example.com/2026/01/gpt5</link>
      <description>&lt;p&gt;OpenAI unveiled its newest model.&lt;/p&gt;&lt;img src="https://cdn.example.com/gpt5.png"&gt;</description>
      <pubDate>Tue, 20 Jan 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Startups category listing</title>
      <link>https://example.com/category/</link>
      <description>Not an article</description>
    </item>
    <item>
      <title></title>
      <link>https://example.com/2026/01/untitled</link>
      <description>No title</description>
    </item>
    <item>
      <title>Rust 2.0 released</title>
      <link>https://example.com/2026/01/rust</link>
      <description>Async traits are here.</description>
      <pubDate>Mon, 19 Jan 2026 08:30:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

SOURCE = FeedSource(name="Example", url="https://example.com/feed", categories=["ai", "dev"])


class _FakeResponse:
    def __init__(self, status_code=200, content=b"", text=""):
        self.status_code = status_code
        self.content = content
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            response = requests.Response()
            response.status_code = self.status_code
            raise requests.HTTPError(f"{self.status_code}", response=response)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("newsradar.utils.retry.time.sleep", lambda s: None)
    monkeypatch.delenv("FETCH_RETRIES", raising=False)
    monkeypatch.delenv("FETCH_BACKOFF", raising=False)


class TestCrawlSource:
    def test_parses_valid_entries(self, monkeypatch):
        seen = {}

        def fake_get(url, headers=None, timeout=None):
            seen.update(url=url, headers=headers, timeout=timeout)
            return _FakeResponse(content=SAMPLE_RSS)

        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", fake_get)
        crawl = crawl_source(SOURCE, FeedSettings(fetch_timeout_s=4.0))
        articles = crawl.articles

        assert seen["headers"] == {"User-Agent": "upday-news-bot/1.0"}
        assert seen["timeout"] == 4.0
        assert [a.title for a in articles] == ["OpenAI launches GPT-5", "Rust 2.0 released"]
        # category listing and untitled entry
        assert crawl.skipped == 2
        first = articles[0]
        assert first.source == "Example"
        assert first.source_url == "https://example.com/2026/01/gpt5"
        assert first.published_at == datetime(2026, 1, 20, 10, 0, tzinfo=timezone.utc)
        assert first.image_url == "https://cdn.example.com/gpt5.png"
        assert first.suggested_categories == ["ai", "dev"]
        assert "newest model" in first.body

    def test_max_items(self, monkeypatch):
        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", lambda *a, **k: _FakeResponse(content=SAMPLE_RSS))
        crawl = crawl_source(SOURCE, FeedSettings(), max_items=1)
        assert len(crawl.articles) == 1
        assert crawl.skipped == 0

    def test_unparseable_date_is_skipped(self, monkeypatch):
        feed = SAMPLE_RSS.replace(b"Mon, 19 Jan 2026 08:30:00 GMT", b"not a date")
        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", lambda *a, **k: _FakeResponse(content=feed))
        crawl = crawl_source(SOURCE, FeedSettings())
        assert [a.title for a in crawl.articles] == ["OpenAI launches GPT-5"]
        assert crawl.skipped == 3

    def test_missing_date_falls_back_to_now(self, monkeypatch):
        feed = SAMPLE_RSS.replace(b"<pubDate>Mon, 19 Jan 2026 08:30:00 GMT</pubDate>", b"")
        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", lambda *a, **k: _FakeResponse(content=feed))
        before = datetime.now(timezone.utc)
        crawl = crawl_source(SOURCE, FeedSettings())
        rust = crawl.articles[1]
        assert rust.title == "Rust 2.0 released"
        assert rust.published_at >= before.replace(microsecond=0)

    def test_missing_link_is_skipped(self, monkeypatch):
        feed = SAMPLE_RSS.replace(b"<link>https://example.com/2026/01/rust</link>", b"")
        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", lambda *a, **k: _FakeResponse(content=feed))
        crawl = crawl_source(SOURCE, FeedSettings())
        assert [a.title for a in crawl.articles] == ["OpenAI launches GPT-5"]
        assert crawl.skipped == 3

    def test_client_error_is_not_retried(self, monkeypatch):
        calls = []

        def fake_get(*args, **kwargs):
            calls.append(1)
            return _FakeResponse(status_code=404)

        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", fake_get)
        with pytest.raises(FetchError) as info:
            crawl_source(SOURCE, FeedSettings())
        assert info.value.source == "Example"
        assert len(calls) == 1

    def test_server_error_is_retried(self, monkeypatch):
        calls = []

        def fake_get(*args, **kwargs):
            calls.append(1)
            return _FakeResponse(status_code=503)

        monkeypatch.setattr("newsradar.fetchers.rss.requests.get", fake_get)
        with pytest.raises(FetchError):
            crawl_source(SOURCE, FeedSettings(max_retries=3))
        assert len(calls) == 3


class TestArticleUrls:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com/2026/01/story", True),
            ("https://example.com/", False),
            ("https://example.com", False),
            ("https://example.com/tag/ai/", True),
            ("https://example.com/tag/", False),
            ("https://example.com/feed", False),
            ("ftp://example.com/story", False),
        ],
    )
    def test_is_valid_article_url(self, url, expected):
        assert is_valid_article_url(url) is expected


class TestImageExtraction:
    def test_media_content_wins(self):
        entry = {
            "media_content": [{"url": "https://img.example/a.jpg"}],
            "media_thumbnail": [{"url": "https://img.example/b.jpg"}],
        }
        assert extract_image_url(entry) == "https://img.example/a.jpg"

    def test_thumbnail_then_enclosure(self):
        assert extract_image_url({"media_thumbnail": [{"url": "https://img.example/b.jpg"}]}) == "https://img.example/b.jpg"
        entry = {
            "enclosures": [
                {"href": "https://cdn.example/episode.mp3"},
                {"href": "https://cdn.example/cover.webp"},
            ]
        }
        assert extract_image_url(entry) == "https://cdn.example/cover.webp"

    def test_first_img_in_content(self):
        entry = {"content": [{"value": '<p>x</p><img alt="" src="https://img.example/c.png"><img src="d.png">'}]}
        assert extract_image_url(entry) == "https://img.example/c.png"

    def test_none(self):
        assert extract_image_url({"summary": "plain text"}) is None

    def test_og_image(self):
        html = '<html><head><meta property="og:image" content="/img/cover.jpg"></head></html>'
        assert extract_og_image(html, "https://example.com/post/1") == "https://example.com/img/cover.jpg"

    def test_twitter_image_fallback(self):
        html = '<meta name="twitter:image" content="https://cdn.example/t.png">'
        assert extract_og_image(html, "https://example.com/") == "https://cdn.example/t.png"
