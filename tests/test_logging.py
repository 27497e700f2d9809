"""Tests for logger naming and ingestion run context."""

import logging

from newsradar.utils.logging import (
    RunContextFilter,
    configure_logging,
    current_run_id,
    get_logger,
    run_context,
)


def _record(msg="hello"):
    return logging.LogRecord("nr.test", logging.INFO, __file__, 1, msg, None, None)


class TestGetLogger:
    def test_names_are_kept_under_namespace(self):
        assert get_logger("nr.fetchers.rss").name == "nr.fetchers.rss"
        assert get_logger("nr").name == "nr"

    def test_bare_names_are_prefixed(self):
        assert get_logger("scripts.backfill").name == "nr.scripts.backfill"
        assert get_logger("nrx").name == "nr.nrx"


class TestRunContext:
    def test_filter_stamps_active_run(self):
        record = _record()
        with run_context("abc123") as run_id:
            assert run_id == "abc123"
            assert current_run_id() == "abc123"
            RunContextFilter().filter(record)
        assert record.run_id == "abc123"
        assert current_run_id() is None

    def test_outside_a_run_uses_placeholder(self):
        record = _record()
        RunContextFilter().filter(record)
        assert record.run_id == "-"

    def test_generated_ids_are_unique(self):
        with run_context() as first:
            pass
        with run_context() as second:
            pass
        assert first and second and first != second


class TestConfigureLogging:
    def test_text_format_includes_run_id(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        saved_nr_level = logging.getLogger("nr").level
        log_file = tmp_path / "logs" / "radar.log"
        try:
            configure_logging(level="info", output="file", file_path=str(log_file), log_format="text")
            with run_context("run-7"):
                get_logger("nr.test").info("crawl started")
            for handler in root.handlers:
                handler.flush()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.getLogger("nr").setLevel(saved_nr_level)

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert "| INFO | run-7 | nr.test | crawl started" in line

    def test_quiet_loggers_follow_debug(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        saved_nr_level = logging.getLogger("nr").level
        try:
            configure_logging(level="DEBUG", output="stdout")
            assert logging.getLogger("urllib3").level == logging.DEBUG
            configure_logging(level="INFO", output="stdout")
            assert logging.getLogger("urllib3").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.getLogger("nr").setLevel(saved_nr_level)
