from __future__ import annotations

from abc import ABC, abstractmethod


class AIClient(ABC):
    """Abstract AI client interface for article summarization and classification."""

    name: str = "ai"

    @abstractmethod
    def summarize(self, title: str, body: str) -> str:
        """Return a 2-3 line summary (raw model output, unvalidated)."""

    @abstractmethod
    def classify(self, title: str, body: str) -> str:
        """Return the raw category id produced by the model."""
