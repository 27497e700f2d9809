"""Tests for the HTTP AI clients and the provider factory (network mocked)."""

import pytest

from newsradar.processors.ai import create_ai_client
from newsradar.processors.ai.anthropic_client import AnthropicClient
from newsradar.processors.ai.openai_client import OpenAIClient


class _FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self.payload


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("AI_PROVIDER", "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL", "ANTHROPIC_API_KEY",
                 "ANTHROPIC_BASE_URL", "ANTHROPIC_MODEL"):
        monkeypatch.delenv(name, raising=False)


class TestOpenAIClient:
    def test_summarize_request(self, monkeypatch):
        captured = {}

        def fake_post(url, headers=None, json=None, timeout=None):
            captured.update(url=url, headers=headers, json=json)
            return _FakeResponse({"choices": [{"message": {"content": "  A summary.  "}}]})

        monkeypatch.setattr("newsradar.processors.ai.openai_client.requests.post", fake_post)
        client = OpenAIClient(api_key="sk-test")
        assert client.summarize("Title", "x" * 5000) == "A summary."
        assert captured["url"] == "https://api.openai.com/v1/chat/completions"
        assert captured["headers"] == {"Authorization": "Bearer sk-test"}
        assert captured["json"]["model"] == "gpt-4o-mini"
        assert captured["json"]["max_tokens"] == 150
        user_prompt = captured["json"]["messages"][1]["content"]
        assert "x" * 2000 in user_prompt
        assert "x" * 2001 not in user_prompt

    def test_classify_parses_first_token(self, monkeypatch):
        monkeypatch.setattr(
            "newsradar.processors.ai.openai_client.requests.post",
            lambda *a, **k: _FakeResponse({"choices": [{"message": {"content": "Research."}}]}),
        )
        assert OpenAIClient(api_key="sk-test").classify("Title", "Body") == "research"

    def test_no_choices(self, monkeypatch):
        monkeypatch.setattr(
            "newsradar.processors.ai.openai_client.requests.post", lambda *a, **k: _FakeResponse({"choices": []})
        )
        with pytest.raises(ValueError):
            OpenAIClient(api_key="sk-test").summarize("Title", "Body")

    def test_missing_key(self):
        with pytest.raises(ValueError):
            OpenAIClient()


class TestAnthropicClient:
    def test_first_text_block(self, monkeypatch):
        captured = {}

        def fake_post(url, headers=None, json=None, timeout=None):
            captured.update(url=url, headers=headers, json=json)
            return _FakeResponse({"content": [{"type": "tool_use"}, {"type": "text", "text": " dev "}]})

        monkeypatch.setattr("newsradar.processors.ai.anthropic_client.requests.post", fake_post)
        assert AnthropicClient(api_key="key").classify("Title", "Body") == "dev"
        assert captured["url"] == "https://api.anthropic.com/v1/messages"
        assert captured["headers"]["x-api-key"] == "key"
        assert captured["headers"]["anthropic-version"] == "2023-06-01"
        assert captured["json"]["max_tokens"] == 10


class TestFactory:
    def test_none(self):
        assert create_ai_client(provider="none") is None

    def test_missing_key_disables_ai(self):
        assert create_ai_client() is None
        assert create_ai_client(provider="anthropic") is None

    def test_openai_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert isinstance(create_ai_client(), OpenAIClient)

    def test_anthropic_from_env(self, monkeypatch):
        monkeypatch.setenv("AI_PROVIDER", "Anthropic")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "key")
        assert isinstance(create_ai_client(), AnthropicClient)

    def test_unknown_provider_disables_ai(self, caplog):
        with caplog.at_level("WARNING", logger="nr.ai.factory"):
            assert create_ai_client(provider="gemini") is None
        assert "gemini" in caplog.text
