"""Tests for the parsed-message cache."""

import threading

import pytest

from wikimsg.runtime import ParseCache
from wikimsg.syntax import Concat, Junk, MessageParser


class TestParseCache:
    """LRU behavior and statistics."""

    def test_get_or_parse_caches(self) -> None:
        cache = ParseCache()
        tree = cache.get_or_parse("Found $1 {{PLURAL:$1|item|items}}")
        assert isinstance(tree, Concat)
        assert cache.get_or_parse("Found $1 {{PLURAL:$1|item|items}}") is tree
        assert (cache.hits, cache.misses) == (1, 1)

    def test_keyed_by_text(self) -> None:
        cache = ParseCache()
        first = cache.get_or_parse("Hello $1")
        second = cache.get_or_parse("Hello $2")
        assert first != second
        assert len(cache) == 2

    def test_lru_eviction(self) -> None:
        cache = ParseCache(maxsize=2)
        cache.get_or_parse("a")
        cache.get_or_parse("b")
        cache.get_or_parse("a")
        cache.get_or_parse("c")
        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert cache.get("c") is not None

    def test_put_existing_moves_to_end(self) -> None:
        cache = ParseCache(maxsize=2)
        tree = MessageParser().parse("a")
        cache.put("a", tree)
        cache.put("b", MessageParser().parse("b"))
        cache.put("a", tree)
        cache.put("c", MessageParser().parse("c"))
        assert cache.get("a") is tree
        assert cache.get("b") is None

    def test_refused_input_cached(self) -> None:
        cache = ParseCache(parser=MessageParser(max_nesting_depth=1))
        tree = cache.get_or_parse("{{a:{{b}}}}")
        assert isinstance(tree, Junk)
        assert cache.get_or_parse("{{a:{{b}}}}") is tree

    def test_stats_and_clear(self) -> None:
        cache = ParseCache(maxsize=10)
        cache.get_or_parse("x")
        cache.get_or_parse("x")
        cache.get_or_parse("x")
        cache.get_or_parse("y")
        assert cache.get_stats() == {"size": 2, "maxsize": 10, "hits": 2, "misses": 2, "hit_rate": 50.0}
        cache.clear()
        assert cache.get_stats()["size"] == 0
        assert (cache.hits, cache.misses) == (0, 0)
        assert cache.maxsize == 10

    def test_empty_hit_rate(self) -> None:
        assert ParseCache().get_stats()["hit_rate"] == 0.0

    def test_invalid_maxsize(self) -> None:
        with pytest.raises(ValueError, match="maxsize must be positive"):
            ParseCache(maxsize=0)

    def test_concurrent_access(self) -> None:
        cache = ParseCache(maxsize=50)
        sources = [f"msg {i} {{{{PLURAL:$1|a|b}}}}" for i in range(20)]
        failures: list[BaseException] = []

        def worker() -> None:
            try:
                for _ in range(10):
                    for source in sources:
                        cache.get_or_parse(source)
            except Exception as e:  # noqa: BLE001 - collected for the assertion below
                failures.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert failures == []
        assert len(cache) == 20
        assert cache.hits + cache.misses == 800
