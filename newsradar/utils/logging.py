"""Logging setup for the radar.

All application loggers live under the ``nr`` namespace (``nr.fetchers.rss``,
``nr.pipeline.feed``...). Records emitted while an ingestion run is active carry
its ``run_id`` so one cron run can be followed across worker threads.
"""

from __future__ import annotations

import contextvars
import logging
import os
import sys
import uuid
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Iterator, Literal, Optional

ROOT_LOGGER = "nr"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_OUTPUT = os.environ.get("LOG_OUTPUT", "stdout").lower()
LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH", "logs/newsradar.log")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text").lower()
# Chatty client libraries stay at WARNING unless LOG_LEVEL is DEBUG
QUIET_LOGGERS = ("urllib3", "github", "httpx", "openai", "anthropic")

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(run_id)s | %(name)s | %(message)s"
_JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "run_id": "%(run_id)s", '
    '"logger": "%(name)s", "message": "%(message)s"}'
)
_NO_RUN = "-"

_run_id: contextvars.ContextVar[str] = contextvars.ContextVar("nr_run_id", default=_NO_RUN)


class RunContextFilter(logging.Filter):
    """Stamp ``record.run_id`` with the active ingestion run (``-`` outside one)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = _run_id.get()
        return True


def current_run_id() -> Optional[str]:
    value = _run_id.get()
    return None if value == _NO_RUN else value


def new_run_id() -> str:
    return uuid.uuid4().hex[:8]


@contextmanager
def run_context(run_id: Optional[str] = None) -> Iterator[str]:
    """Tag every record logged inside the block with ``run_id``.

    Worker threads do not inherit context variables; submit work with
    ``contextvars.copy_context().run`` to keep the id there.
    """
    token = _run_id.set(run_id or new_run_id())
    try:
        yield _run_id.get()
    finally:
        _run_id.reset(token)


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
) -> None:
    """Install handlers on the root logger.

    Unset arguments fall back to LOG_LEVEL, LOG_OUTPUT, LOG_FILE_PATH and
    LOG_FORMAT, read at call time so values loaded from ``.env`` apply.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", LOG_LEVEL)
    if isinstance(level, str):
        level = level.upper()
    if log_format is None:
        log_format = (os.environ.get("LOG_FORMAT") or LOG_FORMAT).lower()
    if output is None:
        output = (os.environ.get("LOG_OUTPUT") or LOG_OUTPUT).lower()
    if file_path is None:
        file_path = os.environ.get("LOG_FILE_PATH") or LOG_FILE_PATH

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(_TEXT_FORMAT if log_format == "text" else _JSON_FORMAT)
    handlers: list[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RunContextFilter())
        root_logger.addHandler(handler)

    logging.getLogger(ROOT_LOGGER).setLevel(level)
    quiet_level = logging.DEBUG if root_logger.level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``nr`` namespace; bare names are prefixed."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
