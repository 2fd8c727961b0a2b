import asyncio
import os
import time
from typing import Optional

from databases import Database

from anistream.config.settings import settings
from anistream.utils.cache import CacheStore
from anistream.utils.logger import database_logger

# ===========================
# Database Cache Store
# ===========================
class DatabaseCache(CacheStore):

    def __init__(self, database_url: Optional[str] = None, database_type: Optional[str] = None):
        self.database_type = database_type or settings.DATABASE_TYPE
        self.database = Database(database_url or settings.get_database_url())
        self._cleanup_task: Optional[asyncio.Task] = None

    def get_backend_name(self) -> str:
        return self.database_type

    # ===========================
    # Database Setup
    # ===========================
    async def connect(self):
        try:
            database_logger.info(f"Setup {self.database_type} database")
            if self.database_type == "sqlite" and self.database.url.database:
                db_path = self.database.url.database
                db_dir = os.path.dirname(db_path)
                if db_dir:
                    os.makedirs(db_dir, exist_ok=True)

            await self.database.connect()
            database_logger.info("Connected")

            await self.database.execute("CREATE TABLE IF NOT EXISTS db_version (id INTEGER PRIMARY KEY CHECK (id = 1), version TEXT)")
            current_version = await self.database.fetch_val("SELECT version FROM db_version WHERE id = 1")

            if current_version != settings.DATABASE_VERSION:
                if self.database_type == "sqlite":
                    await self.database.execute("DROP TABLE IF EXISTS content_cache")
                    await self.database.execute("INSERT OR REPLACE INTO db_version VALUES (1, :version)", {"version": settings.DATABASE_VERSION})
                else:
                    await self.database.execute("DROP TABLE IF EXISTS content_cache CASCADE")
                    await self.database.execute(
                        "INSERT INTO db_version VALUES (1, :version) ON CONFLICT (id) DO UPDATE SET version = :version",
                        {"version": settings.DATABASE_VERSION}
                    )

            await self.database.execute("CREATE TABLE IF NOT EXISTS content_cache (cache_key TEXT PRIMARY KEY, content TEXT NOT NULL, expires_at INTEGER)")
            await self.database.execute("CREATE INDEX IF NOT EXISTS idx_content_cache_expires ON content_cache(expires_at)")

            if self.database_type == "sqlite":
                await self.database.execute("PRAGMA busy_timeout=30000")
                await self.database.execute("PRAGMA journal_mode=WAL")
                await self.database.execute("PRAGMA synchronous=NORMAL")

            self._cleanup_task = asyncio.create_task(self.cleanup_expired_data())
            database_logger.info("Setup completed")

        except Exception as e:
            database_logger.error(f"Setup failed: {type(e).__name__}")
            raise

    # ===========================
    # Cleanup Expired Data
    # ===========================
    async def cleanup_expired_data(self):
        while True:
            try:
                deleted_cache = await self.delete_expired()
                if deleted_cache:
                    database_logger.debug(f"Cleanup: {deleted_cache} cache")
            except Exception as e:
                database_logger.error(f"Cleanup error: {type(e).__name__}")

            await asyncio.sleep(settings.CLEANUP_INTERVAL)

    async def delete_expired(self):
        return await self.database.execute(
            "DELETE FROM content_cache WHERE expires_at < :current_time",
            {"current_time": int(time.time())}
        )

    # ===========================
    # Key/Value Operations
    # ===========================
    async def read(self, key: str) -> Optional[str]:
        result = await self.database.fetch_one(
            "SELECT content FROM content_cache WHERE cache_key = :cache_key AND expires_at > :current_time",
            {"cache_key": key, "current_time": time.time()}
        )
        if not result:
            return None
        return result["content"]

    async def write(self, key: str, content: str, ttl: int):
        expires_at = int(time.time()) + ttl

        if self.database_type == "sqlite":
            query = """INSERT OR REPLACE INTO content_cache (cache_key, content, expires_at)
                       VALUES (:cache_key, :content, :expires_at)"""
        else:
            query = """INSERT INTO content_cache (cache_key, content, expires_at)
                       VALUES (:cache_key, :content, :expires_at)
                       ON CONFLICT (cache_key) DO UPDATE
                       SET content = :content, expires_at = :expires_at"""

        await self.database.execute(query, {
            "cache_key": key,
            "content": content,
            "expires_at": expires_at
        })

    async def remove(self, key: str):
        await self.database.execute(
            "DELETE FROM content_cache WHERE cache_key = :cache_key",
            {"cache_key": key}
        )

    async def ping(self) -> bool:
        await self.database.fetch_val("SELECT 1")
        return True

    # ===========================
    # Database Teardown
    # ===========================
    async def close(self):
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        try:
            await self.database.disconnect()
            database_logger.info("Disconnected")
        except Exception as e:
            database_logger.error(f"Failed to disconnect: {type(e).__name__}")
