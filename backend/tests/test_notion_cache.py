# backend/tests/test_notion_cache.py

import asyncio
import json
import logging

from notion_blog.notion.cache import ResponseCache, make_cache_key


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_set_then_get_returns_value(tmp_path):
    cache = ResponseCache(tmp_path, duration_seconds=60)
    key = make_cache_key("GET", "https://example.com/a")

    cache.set(key, {"results": [1, 2]})

    assert cache.get(key) == {"results": [1, 2]}


def test_entry_expires_after_duration(tmp_path):
    clock = FakeClock()
    cache = ResponseCache(tmp_path, duration_seconds=60, clock=clock)
    key = make_cache_key("GET", "https://example.com/a")

    cache.set(key, {"ok": True})
    clock.now += 59
    assert cache.get(key) == {"ok": True}

    clock.now += 2
    assert cache.get(key) is None


def test_disabled_cache_does_not_write(tmp_path):
    cache = ResponseCache(tmp_path / "cache", duration_seconds=0)
    key = make_cache_key("GET", "https://example.com/a")

    cache.set(key, {"ok": True})

    assert cache.get(key) is None
    assert not (tmp_path / "cache").exists()


def test_corrupt_entry_is_ignored(tmp_path):
    cache = ResponseCache(tmp_path, duration_seconds=60)
    key = make_cache_key("GET", "https://example.com/a")
    (tmp_path / f"{key}.json").write_text("{not json", encoding="utf-8")

    assert cache.get(key) is None


def test_cache_key_depends_on_method_url_and_body():
    base = make_cache_key("POST", "https://example.com/q", {"a": 1})

    assert base == make_cache_key("post", "https://example.com/q", {"a": 1})
    assert base != make_cache_key("GET", "https://example.com/q", {"a": 1})
    assert base != make_cache_key("POST", "https://example.com/other", {"a": 1})
    assert base != make_cache_key("POST", "https://example.com/q", {"a": 2})


def test_entry_whose_value_is_not_an_object_is_ignored(tmp_path, caplog):
    clock = FakeClock()
    cache = ResponseCache(tmp_path, duration_seconds=60, clock=clock)
    key = make_cache_key("GET", "https://example.com/blocks/p1/children")
    (tmp_path / f"{key}.json").write_text(
        json.dumps({"cached_at": clock.now, "value": ["bad"]}),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="notion_blog.notion.cache"):
        assert cache.get(key) is None

    assert "value is list, not an object" in caplog.text


def test_async_get_and_set(tmp_path):
    cache = ResponseCache(tmp_path, duration_seconds=60)
    key = make_cache_key("GET", "https://example.com/a")

    async def _inner():
        await cache.aset(key, {"results": []})
        return await cache.aget(key)

    assert asyncio.run(_inner()) == {"results": []}
    assert (tmp_path / f"{key}.json").exists()


def test_async_calls_are_noops_when_disabled(tmp_path):
    cache = ResponseCache(tmp_path / "cache", duration_seconds=0)
    key = make_cache_key("GET", "https://example.com/a")

    async def _inner():
        await cache.aset(key, {"results": []})
        return await cache.aget(key)

    assert asyncio.run(_inner()) is None
    assert not (tmp_path / "cache").exists()
