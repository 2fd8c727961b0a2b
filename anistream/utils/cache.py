import json
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional

from anistream.utils.logger import cache_logger

# ===========================
# Constants
# ===========================
KEY_DELIMITER = ";"
MISS = object()

# ===========================
# Cache Store Interface
# ===========================
class CacheStore(ABC):

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def write(self, key: str, content: str, ttl: int):
        pass

    @abstractmethod
    async def remove(self, key: str):
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        pass

    async def connect(self):
        pass

    async def close(self):
        pass

    async def ping(self) -> bool:
        return True

# ===========================
# Cache Key Creation
# ===========================
def build_cache_key(prefix: str, tag: str, *parts: Any) -> str:
    if not parts:
        return f"{prefix}{tag}"
    return KEY_DELIMITER.join([f"{prefix}{tag}", *(str(part) for part in parts)])

# ===========================
# Cache Retrieval
# ===========================
async def get_cache(store: CacheStore, key: str) -> Any:
    """Return the decoded value under ``key``, or ``MISS`` when absent or unreadable."""
    try:
        content = await store.read(key)
        if content is None:
            cache_logger.debug(f"Miss: {key}")
            return MISS

        value = json.loads(content)
        cache_logger.debug(f"Hit: {key}")
        return value
    except json.JSONDecodeError as e:
        cache_logger.error(f"Corrupted cache: {type(e).__name__}")
        return MISS
    except Exception as e:
        cache_logger.error(f"Cache read failed: {type(e).__name__}")
        return MISS

# ===========================
# Cache Storage
# ===========================
async def set_cache(store: CacheStore, key: str, fetcher: Callable[[], Awaitable[Any]], ttl: int) -> Any:
    value = await fetcher()

    try:
        await store.write(key, json.dumps(value), ttl)
        cache_logger.debug(f"Saved: {key} ({ttl}s)")
    except Exception as e:
        cache_logger.error(f"Cache save failed: {type(e).__name__}")

    return value

# ===========================
# Cache Fetch
# ===========================
async def fetch(store: CacheStore, key: str, fetcher: Callable[[], Awaitable[Any]], ttl: int) -> Any:
    """Return the value cached under ``key`` or compute, store and return it.

    Errors raised by ``fetcher`` propagate and nothing is written.
    """
    existing = await get_cache(store, key)
    if existing is not MISS:
        return existing
    return await set_cache(store, key, fetcher, ttl)

# ===========================
# Cache Deletion
# ===========================
async def delete_cache(store: CacheStore, key: str):
    try:
        await store.remove(key)
        cache_logger.debug(f"Deleted: {key}")
    except Exception as e:
        cache_logger.error(f"Cache delete failed: {type(e).__name__}")
