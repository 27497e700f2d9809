from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..utils.logging import get_logger

logger = get_logger("nr.pipeline.enrichment")


@dataclass(slots=True)
class EnrichmentStats:
    submitted: int = 0
    completed: int = 0
    failed: int = 0


class EnrichmentQueue:
    """Best-effort background writes (company backfill and similar).

    ``submit`` returns immediately. A failing task is logged and counted, never
    retried, and never raised to the submitter. A single worker keeps writes to
    the store serialized.
    """

    def __init__(self, *, name: str = "enrichment") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._futures: List[Future] = []
        self.stats = EnrichmentStats()

    def _run(self, description: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        try:
            fn(*args, **kwargs)
        except Exception:  # noqa: BLE001 - fire-and-forget contract
            logger.exception("Enrichment task failed: %s", description)
            with self._lock:
                self.stats.failed += 1
            return
        with self._lock:
            self.stats.completed += 1
        logger.debug("Enrichment task done: %s", description)

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self.stats.submitted += 1
            self._futures.append(self._executor.submit(self._run, description, fn, args, kwargs))

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for queued tasks; True when all of them finished within ``timeout``."""
        with self._lock:
            pending = list(self._futures)
        done, not_done = wait(pending, timeout=timeout)
        with self._lock:
            self._futures = [f for f in self._futures if f not in done]
        if not_done:
            logger.warning("%d enrichment task(s) still pending after drain", len(not_done))
        return not not_done

    def shutdown(self, *, wait_for_tasks: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_tasks)
        logger.info(
            "Enrichment queue closed: submitted=%d completed=%d failed=%d",
            self.stats.submitted,
            self.stats.completed,
            self.stats.failed,
        )
