"""Tests for retry with exponential backoff."""

import pytest
import requests

from newsradar.utils.retry import is_transient_http_error, with_retries


def _http_error(status):
    response = requests.Response()
    response.status_code = status
    return requests.HTTPError(f"{status}", response=response)


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr("newsradar.utils.retry.time.sleep", recorded.append)
    monkeypatch.delenv("TEST_RETRIES", raising=False)
    monkeypatch.delenv("TEST_BACKOFF", raising=False)
    return recorded


class TestIsTransient:
    def test_classification(self):
        assert is_transient_http_error(requests.Timeout())
        assert is_transient_http_error(requests.ConnectionError())
        assert is_transient_http_error(_http_error(503))
        assert not is_transient_http_error(_http_error(404))
        assert not is_transient_http_error(ValueError("bad"))


class TestWithRetries:
    def test_retries_then_raises(self, sleeps):
        calls = []

        def fn():
            calls.append(1)
            raise _http_error(502)

        with pytest.raises(requests.HTTPError):
            with_retries(fn, should_retry=is_transient_http_error)
        assert len(calls) == 3
        assert sleeps == [1.0, 2.0]

    def test_terminal_error_is_not_retried(self, sleeps):
        calls = []

        def fn():
            calls.append(1)
            raise _http_error(404)

        with pytest.raises(requests.HTTPError):
            with_retries(fn, should_retry=is_transient_http_error)
        assert len(calls) == 1
        assert sleeps == []

    def test_succeeds_after_transient_failure(self, sleeps):
        outcomes = [requests.ConnectionError("reset"), "ok"]

        def fn():
            result = outcomes.pop(0)
            if isinstance(result, Exception):
                raise result
            return result

        assert with_retries(fn, should_retry=is_transient_http_error) == "ok"
        assert sleeps == [1.0]

    def test_env_overrides(self, sleeps, monkeypatch):
        monkeypatch.setenv("TEST_RETRIES", "2")
        monkeypatch.setenv("TEST_BACKOFF", "0.5")
        calls = []

        def fn():
            calls.append(1)
            raise requests.Timeout()

        with pytest.raises(requests.Timeout):
            with_retries(fn, should_retry=is_transient_http_error, env_prefix="TEST")
        assert len(calls) == 2
        assert sleeps == [0.5]
