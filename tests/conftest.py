"""
Shared fixtures: an in-memory cache store and a recording fake provider
injected into the application factory.
"""

import time

import pytest
from fastapi.testclient import TestClient

from anistream.main import create_app
from anistream.providers.base import BaseAnimeProvider
from anistream.utils.cache import CacheStore


class MemoryCache(CacheStore):
    """Dict-backed cache store that records every read and write."""

    def __init__(self):
        self.entries = {}
        self.reads = []
        self.writes = []

    def get_backend_name(self):
        return "memory"

    async def read(self, key):
        self.reads.append(key)
        entry = self.entries.get(key)
        if entry is None or entry[1] <= time.time():
            return None
        return entry[0]

    async def write(self, key, content, ttl):
        self.writes.append((key, ttl))
        self.entries[key] = (content, time.time() + ttl)

    async def remove(self, key):
        self.entries.pop(key, None)


class FakeProvider(BaseAnimeProvider):
    """Provider returning canned payloads; ``failures`` maps an operation to the exception it raises."""

    def __init__(self):
        super().__init__("https://anitaku.test")
        self.calls = []
        self.failures = {}

    def get_provider_name(self):
        return "Anitaku"

    async def _record(self, operation, *args):
        self.calls.append((operation, *args))
        if operation in self.failures:
            raise self.failures[operation]
        return {"operation": operation, "args": [str(arg) if arg is not None else None for arg in args]}

    async def search(self, query, page=1):
        return await self._record("search", query, page)

    async def fetch_anime_info(self, anime_id):
        return await self._record("fetch_anime_info", anime_id)

    async def fetch_episode_sources(self, episode_id, server=None):
        return await self._record("fetch_episode_sources", episode_id, server)

    async def fetch_episode_servers(self, episode_id):
        return await self._record("fetch_episode_servers", episode_id)

    async def fetch_genre_info(self, genre, page=1):
        return await self._record("fetch_genre_info", genre, page)

    async def fetch_genre_list(self):
        return await self._record("fetch_genre_list")

    async def fetch_top_airing(self, page=1):
        return await self._record("fetch_top_airing", page)

    async def fetch_recent_movies(self, page=1):
        return await self._record("fetch_recent_movies", page)

    async def fetch_popular(self, page=1):
        return await self._record("fetch_popular", page)

    async def fetch_recent_episodes(self, page=1, episode_type=1):
        return await self._record("fetch_recent_episodes", page, episode_type)

    async def fetch_anime_list(self, page=1):
        return await self._record("fetch_anime_list", page)

    async def fetch_direct_download_link(self, download_url, captcha_token=None):
        return await self._record("fetch_direct_download_link", download_url, captcha_token)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def client(provider, memory_cache):
    """Test client with the in-memory cache configured."""
    with TestClient(create_app(provider=provider, cache=memory_cache)) as test_client:
        yield test_client


@pytest.fixture
def uncached_client(provider):
    """Test client without any cache store."""
    with TestClient(create_app(provider=provider)) as test_client:
        yield test_client
