from __future__ import annotations

import os
import time
from typing import Callable, Optional, TypeVar

import requests

from .logging import get_logger

T = TypeVar("T")
logger = get_logger("nr.utils.retry")


def is_transient_http_error(exc: BaseException) -> bool:
    """Timeouts, connection failures and 5xx responses are worth retrying; 4xx are not."""
    if isinstance(exc, (requests.Timeout, requests.ConnectionError)):
        return True
    if isinstance(exc, requests.HTTPError):
        status = getattr(exc.response, "status_code", None)
        return status is None or status >= 500
    return False


def with_retries(
    fn: Callable[[], T],
    *,
    attempts: int = 3,
    initial_delay: float = 1.0,
    factor: float = 2.0,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    label: str = "call",
    env_prefix: Optional[str] = None,
) -> T:
    """Run ``fn`` up to ``attempts`` times with exponential backoff.

    ``should_retry`` decides whether a failure is transient; terminal failures are
    re-raised immediately. ``env_prefix`` enables ``<PREFIX>_RETRIES`` and
    ``<PREFIX>_BACKOFF`` overrides for operational tuning.
    """
    if env_prefix:
        try:
            env_attempts = os.getenv(f"{env_prefix}_RETRIES")
            if env_attempts is not None:
                attempts = int(env_attempts)
        except ValueError:
            logger.warning("Ignoring invalid %s_RETRIES", env_prefix)
        try:
            env_backoff = os.getenv(f"{env_prefix}_BACKOFF")
            if env_backoff is not None:
                initial_delay = float(env_backoff)
        except ValueError:
            logger.warning("Ignoring invalid %s_BACKOFF", env_prefix)
    attempts = max(1, attempts)

    last_exc: BaseException | None = None
    for attempt in range(attempts):
        try:
            return fn()
        except Exception as exc:  # noqa: BLE001 - classified below
            last_exc = exc
            if should_retry is not None and not should_retry(exc):
                raise
            if attempt + 1 >= attempts:
                break
            sleep_s = initial_delay * (factor ** attempt)
            logger.warning(
                "%s failed (attempt %s/%s): %s; retrying in %.1fs", label, attempt + 1, attempts, exc, sleep_s
            )
            time.sleep(sleep_s)
    assert last_exc is not None
    raise last_exc
