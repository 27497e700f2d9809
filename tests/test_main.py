"""Tests for the command-line entrypoint."""

import json
from datetime import datetime, timedelta, timezone

from newsradar.main import main
from newsradar.models import Article
from newsradar.storage import JsonArticleStore


def _seed(path, count=3):
    now = datetime.now(timezone.utc)
    store = JsonArticleStore(path)
    store.upsert_batch(
        [
            Article(
                title=f"OpenAI launches model {i}",
                summary="OpenAI unveiled a model.",
                category="ai",
                source="Example",
                source_url=f"https://example.com/{i}",
                published_at=now - timedelta(hours=i + 1),
            )
            for i in range(count)
        ]
    )
    return store


class TestMain:
    def test_timeline(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "articles.json"
        _seed(path)
        assert main(["--timeline", "--store", str(path), "--limit", "2", "--log-level", "ERROR"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data["items"]) == 2
        assert data["has_more"] is True
        assert data["next_cursor"]

    def test_my_feed(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "articles.json"
        _seed(path, count=1)
        interests = tmp_path / "interests.yaml"
        interests.write_text("categories: [ai]\ncompanies: [openai]\n", encoding="utf-8")
        code = main(["--my-feed", "--interests", str(interests), "--store", str(path), "--log-level", "ERROR"])
        assert code == 0
        weeks = json.loads(capsys.readouterr().out)
        assert len(weeks) == 12
        assert sum(w["total_items"] for w in weeks) == 1

    def test_my_feed_requires_interests(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main(["--my-feed", "--store", str(tmp_path / "a.json"), "--log-level", "ERROR"]) == 1

    def test_missing_sources_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        code = main(["--config", str(tmp_path / "missing.yaml"), "--store", str(tmp_path / "a.json"), "--log-level", "ERROR"])
        assert code == 1

    def test_corrupted_store(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "articles.json"
        path.write_text("{oops", encoding="utf-8")
        assert main(["--timeline", "--store", str(path), "--log-level", "ERROR"]) == 1
