import asyncio

import pytest

from gateway.cache import ResponseCache, cache_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_cache_key_uses_query_text_only():
    assert cache_key("foo") == "chat:foo"
    assert cache_key("") == "chat:"


@pytest.mark.asyncio
async def test_set_then_get():
    cache = ResponseCache(ttl_sec=30)
    await cache.set("chat:a", "answer")
    assert await cache.get("chat:a") == "answer"
    assert await cache.get("chat:b") is None


@pytest.mark.asyncio
async def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ResponseCache(ttl_sec=30, clock=clock)
    await cache.set("chat:a", "answer")

    clock.now += 30
    assert await cache.get("chat:a") == "answer"

    clock.now += 0.5
    assert await cache.get("chat:a") is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_overwrite_refreshes_entry():
    clock = FakeClock()
    cache = ResponseCache(ttl_sec=10, clock=clock)
    await cache.set("chat:a", "old")
    clock.now += 8
    await cache.set("chat:a", "new")
    clock.now += 8
    assert await cache.get("chat:a") == "new"


@pytest.mark.asyncio
async def test_zero_ttl_never_expires():
    clock = FakeClock()
    cache = ResponseCache(ttl_sec=0, clock=clock)
    await cache.set("chat:a", "kept")
    clock.now += 10 ** 6
    assert await cache.get("chat:a") == "kept"


@pytest.mark.asyncio
async def test_clear():
    cache = ResponseCache()
    await cache.set("chat:a", "x")
    await cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_concurrent_writers():
    cache = ResponseCache()
    await asyncio.gather(*(cache.set(f"chat:{i}", str(i)) for i in range(50)))
    values = await asyncio.gather(*(cache.get(f"chat:{i}") for i in range(50)))
    assert values == [str(i) for i in range(50)]
