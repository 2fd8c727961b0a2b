"""
Tests for the Redis cache store against an in-process stand-in client.
"""

import pytest

from anistream.utils.cache import fetch
from anistream.utils.redis_store import RedisCache


class StubRedis:

    def __init__(self):
        self.values = {}
        self.expiries = {}
        self.closed = False

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value, ex=None):
        self.values[key] = value
        self.expiries[key] = ex

    async def delete(self, key):
        self.values.pop(key, None)

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


@pytest.fixture
def redis_cache():
    store = RedisCache(redis_url="redis://localhost:6379", password=None)
    store._client = StubRedis()
    return store


@pytest.mark.asyncio
async def test_fetch_sets_expiry(redis_cache):
    async def fetcher():
        return {"results": []}

    await fetch(redis_cache, "anitaku:top-airing;1", fetcher, 3600)

    assert redis_cache._client.values["anitaku:top-airing;1"] == '{"results": []}'
    assert redis_cache._client.expiries["anitaku:top-airing;1"] == 3600


@pytest.mark.asyncio
async def test_remove_and_close(redis_cache):
    client = redis_cache._client
    await redis_cache.write("key", "1", 60)
    await redis_cache.remove("key")
    assert await redis_cache.read("key") is None
    assert await redis_cache.ping() is True

    await redis_cache.close()
    assert client.closed
    assert redis_cache._client is None
