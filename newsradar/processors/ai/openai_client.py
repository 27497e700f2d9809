from __future__ import annotations

import os

import requests

from .base import AIClient
from .parsing import parse_category_response
from .prompts import CLASSIFY_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT, classify_prompt, summary_prompt


class OpenAIClient(AIClient):
    """HTTP client for OpenAI chat completions.

    Environment:
      - OPENAI_API_KEY (required)
      - OPENAI_MODEL (default: gpt-4o-mini)
      - OPENAI_BASE_URL (default: https://api.openai.com/v1)
    """

    name = "openai"

    def __init__(self, api_key: str | None = None, *, model: str | None = None, timeout: int = 30) -> None:
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        self.model = model or os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.base_url = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")
        self.timeout = timeout

    def _chat(self, system: str, user: str, *, max_tokens: int, temperature: float) -> str:
        resp = requests.post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        choices = data.get("choices") or []
        if not choices:
            raise ValueError("OpenAI response has no choices")
        return (choices[0].get("message", {}).get("content") or "").strip()

    def summarize(self, title: str, body: str) -> str:
        return self._chat(SUMMARY_SYSTEM_PROMPT, summary_prompt(title, body), max_tokens=150, temperature=0.3)

    def classify(self, title: str, body: str) -> str:
        raw = self._chat(CLASSIFY_SYSTEM_PROMPT, classify_prompt(title, body), max_tokens=10, temperature=0)
        return parse_category_response(raw)
