from __future__ import annotations

import os
from typing import Optional

from .base import AIClient
from ...utils.logging import get_logger

logger = get_logger("nr.ai.factory")


def create_ai_client(*, provider: Optional[str] = None) -> Optional[AIClient]:
    """Create an AI client from AI_PROVIDER or an explicit value.

    Supported values: "openai" (default), "anthropic" or "none". Returns ``None``
    when the provider is disabled, unknown or missing its API key, in which case the
    deterministic summarizer is used.
    """
    selected = (provider or os.environ.get("AI_PROVIDER", "openai")).strip().lower()

    if selected == "none":
        return None
    if selected == "openai":
        if not os.environ.get("OPENAI_API_KEY"):
            logger.info("OPENAI_API_KEY not set, AI processing disabled")
            return None
        from .openai_client import OpenAIClient  # lazy import

        return OpenAIClient()
    if selected == "anthropic":
        if not os.environ.get("ANTHROPIC_API_KEY"):
            logger.info("ANTHROPIC_API_KEY not set, AI processing disabled")
            return None
        from .anthropic_client import AnthropicClient  # lazy import

        return AnthropicClient()

    logger.warning("Unsupported AI_PROVIDER '%s' (use openai, anthropic or none), AI processing disabled", selected)
    return None
