"""Tests for the TTL cache."""

from newsradar.utils.cache import JsonFileBackend, MemoryBackend, TTLCache


class _Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTTLCache:
    def test_entry_expires(self):
        clock = _Clock()
        cache = TTLCache(MemoryBackend(), ttl_seconds=60, clock=clock)
        cache.set("k", "v")
        clock.now += 59
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None

    def test_get_or_compute(self):
        cache = TTLCache(MemoryBackend(), ttl_seconds=60, clock=_Clock())
        calls = []

        def compute():
            calls.append(1)
            return {"summary": "s"}

        assert cache.get_or_compute("k", compute) == ({"summary": "s"}, False)
        assert cache.get_or_compute("k", compute) == ({"summary": "s"}, True)
        assert len(calls) == 1
        assert cache.stats.hits == 1
        assert cache.stats.misses == 1
        assert cache.stats.hit_rate == 0.5

    def test_failed_compute_is_not_cached(self):
        cache = TTLCache(MemoryBackend(), ttl_seconds=60, clock=_Clock())

        def boom():
            raise RuntimeError("down")

        try:
            cache.get_or_compute("k", boom)
        except RuntimeError:
            pass
        assert cache.get("k") is None

    def test_content_key(self):
        key = TTLCache.content_key("  Hello World ")
        assert key == TTLCache.content_key("hello world")
        assert len(key) == 32
        assert key != TTLCache.content_key("hello there")

    def test_purge_expired(self):
        clock = _Clock()
        cache = TTLCache(MemoryBackend(), ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        clock.now += 5
        cache.set("b", 2)
        clock.now += 6
        assert cache.purge_expired() == 1
        assert cache.get("b") == 2


class TestJsonFileBackend:
    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "cache" / "ai.json"
        clock = _Clock()
        TTLCache(JsonFileBackend(path), ttl_seconds=60, clock=clock).set("k", {"category": "ai"})
        reopened = TTLCache(JsonFileBackend(path), ttl_seconds=60, clock=clock)
        assert reopened.get("k") == {"category": "ai"}

    def test_corrupted_file_starts_empty(self, tmp_path):
        path = tmp_path / "ai.json"
        path.write_text("{not json", encoding="utf-8")
        backend = JsonFileBackend(path)
        assert backend.get("k") is None
