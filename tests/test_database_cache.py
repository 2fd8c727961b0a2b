"""
Tests for the SQLite-backed cache store.
"""

import pytest
import pytest_asyncio

from anistream.utils.cache import fetch
from anistream.utils.database import DatabaseCache


@pytest_asyncio.fixture
async def database_cache(tmp_path):
    store = DatabaseCache(database_url=f"sqlite:///{tmp_path}/cache.db", database_type="sqlite")
    await store.connect()
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_write_then_read(database_cache):
    await database_cache.write("anitaku:info;naruto", '{"title": "Naruto"}', 60)
    assert await database_cache.read("anitaku:info;naruto") == '{"title": "Naruto"}'


@pytest.mark.asyncio
async def test_expired_entry_is_not_returned(database_cache):
    await database_cache.write("anitaku:popular;1", "[]", -10)
    assert await database_cache.read("anitaku:popular;1") is None
    await database_cache.delete_expired()
    assert await database_cache.read("anitaku:popular;1") is None


@pytest.mark.asyncio
async def test_overwrite_and_remove(database_cache):
    await database_cache.write("key", '"first"', 60)
    await database_cache.write("key", '"second"', 60)
    assert await database_cache.read("key") == '"second"'

    await database_cache.remove("key")
    assert await database_cache.read("key") is None


@pytest.mark.asyncio
async def test_fetch_through_database_store(database_cache):
    calls = []

    async def fetcher():
        calls.append(1)
        return {"results": ["naruto"]}

    assert await fetch(database_cache, "anitaku:search;1;naruto", fetcher, 60) == {"results": ["naruto"]}
    assert await fetch(database_cache, "anitaku:search;1;naruto", fetcher, 60) == {"results": ["naruto"]}
    assert calls == [1]
    assert await database_cache.ping() is True
