from typing import Optional

import redis.asyncio as redis

from anistream.config.settings import settings
from anistream.utils.cache import CacheStore
from anistream.utils.logger import cache_logger

# ===========================
# Redis Cache Store
# ===========================
class RedisCache(CacheStore):

    def __init__(self, redis_url: Optional[str] = None, password: Optional[str] = None):
        self.redis_url = redis_url or settings.get_redis_url()
        self.password = password if password is not None else settings.REDIS_PASSWORD
        self._client: Optional[redis.Redis] = None

    def get_backend_name(self) -> str:
        return "redis"

    def get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                password=self.password,
                decode_responses=True,
            )
        return self._client

    async def connect(self):
        try:
            await self.get_client().ping()
            cache_logger.info(f"Redis connected: {self.redis_url}")
        except Exception as e:
            cache_logger.error(f"Redis unavailable: {type(e).__name__}")

    async def read(self, key: str) -> Optional[str]:
        return await self.get_client().get(key)

    async def write(self, key: str, content: str, ttl: int):
        await self.get_client().set(key, content, ex=ttl)

    async def remove(self, key: str):
        await self.get_client().delete(key)

    async def ping(self) -> bool:
        return bool(await self.get_client().ping())

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            cache_logger.info("Redis disconnected")
