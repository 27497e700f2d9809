from __future__ import annotations

import os

import requests

from .base import AIClient
from .parsing import parse_category_response
from .prompts import CLASSIFY_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT, classify_prompt, summary_prompt

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(AIClient):
    """HTTP client for the Anthropic messages API.

    Environment:
      - ANTHROPIC_API_KEY (required)
      - ANTHROPIC_MODEL (default: claude-3-haiku-20240307)
    """

    name = "anthropic"

    def __init__(self, api_key: str | None = None, *, model: str | None = None, timeout: int = 30) -> None:
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")
        self.model = model or os.environ.get("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
        self.base_url = os.environ.get("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1").rstrip("/")
        self.timeout = timeout

    def _message(self, system: str, user: str, *, max_tokens: int) -> str:
        resp = requests.post(
            f"{self.base_url}/messages",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            json={
                "model": self.model,
                "max_tokens": max_tokens,
                "system": system,
                "messages": [{"role": "user", "content": user}],
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        # content is a list of blocks; take the first text block
        for block in data.get("content") or []:
            if block.get("type") == "text":
                return (block.get("text") or "").strip()
        return ""

    def summarize(self, title: str, body: str) -> str:
        return self._message(SUMMARY_SYSTEM_PROMPT, summary_prompt(title, body), max_tokens=150)

    def classify(self, title: str, body: str) -> str:
        return parse_category_response(
            self._message(CLASSIFY_SYSTEM_PROMPT, classify_prompt(title, body), max_tokens=10)
        )
