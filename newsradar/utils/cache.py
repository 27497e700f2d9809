"""Explicit TTL cache with injectable storage.

``MemoryBackend`` is meant for tests and in-process caches, ``JsonFileBackend``
persists entries between cron runs.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar

from .logging import get_logger

logger = get_logger("nr.utils.cache")

V = TypeVar("V")


class CacheBackend(ABC):
    """Key/value storage for ``(expires_at, value)`` entries."""

    @abstractmethod
    def get(self, key: str) -> Optional[Tuple[float, Any]]:
        ...

    @abstractmethod
    def set(self, key: str, expires_at: float, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def items(self) -> Iterator[Tuple[str, float]]:
        """Yield ``(key, expires_at)`` pairs."""


class MemoryBackend(CacheBackend):
    def __init__(self) -> None:
        self._data: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Tuple[float, Any]]:
        return self._data.get(key)

    def set(self, key: str, expires_at: float, value: Any) -> None:
        self._data[key] = (expires_at, value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def items(self) -> Iterator[Tuple[str, float]]:
        for key, (expires_at, _) in list(self._data.items()):
            yield key, expires_at


class JsonFileBackend(CacheBackend):
    """JSON-file backed storage. Values must be JSON serializable."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Dict[str, list] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            self._data = data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, OSError):
            logger.warning("Corrupted cache file %s, starting fresh", self.path)
            self._data = {}

    def _save(self) -> None:
        self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[Tuple[float, Any]]:
        row = self._data.get(key)
        if not row:
            return None
        return float(row[0]), row[1]

    def set(self, key: str, expires_at: float, value: Any) -> None:
        with self._lock:
            self._data[key] = [expires_at, value]
            self._save()

    def delete(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._save()

    def items(self) -> Iterator[Tuple[str, float]]:
        for key, row in list(self._data.items()):
            yield key, float(row[0])


@dataclass(slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class TTLCache(Generic[V]):
    def __init__(
        self,
        backend: CacheBackend,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.stats = CacheStats()

    @staticmethod
    def content_key(content: str) -> str:
        """First 32 hex chars of SHA-256 over the trimmed, lowercased content prefix."""
        normalized = content.strip().lower()[:2000]
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:32]

    def get(self, key: str) -> Optional[V]:
        entry = self.backend.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self.clock():
            self.backend.delete(key)
            return None
        return value

    def set(self, key: str, value: V) -> None:
        self.backend.set(key, self.clock() + self.ttl_seconds, value)

    def get_or_compute(self, key: str, compute: Callable[[], V]) -> Tuple[V, bool]:
        """Cache-through lookup. Returns ``(value, from_cache)``."""
        cached = self.get(key)
        if cached is not None:
            self.stats.hits += 1
            return cached, True
        value = compute()
        self.stats.misses += 1
        try:
            self.set(key, value)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to store cache entry %s: %s", key[:8], exc)
        return value, False

    def purge_expired(self) -> int:
        now = self.clock()
        expired = [key for key, expires_at in self.backend.items() if expires_at <= now]
        for key in expired:
            self.backend.delete(key)
        if expired:
            logger.info("Purged %d expired cache entries", len(expired))
        return len(expired)

    def reset_stats(self) -> None:
        self.stats = CacheStats()
