import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from anistream.api.anitaku import create_anitaku_router
from anistream.api.routes import router
from anistream.config.settings import settings
from anistream.providers.anitaku import AnitakuProvider
from anistream.providers.base import BaseAnimeProvider
from anistream.utils.cache import CacheStore
from anistream.utils.http_client import http_client
from anistream.utils.logger import setup_logger, app_logger, api_logger


# ===========================
# Logger Setup
# ===========================
setup_logger(settings.LOG_LEVEL, settings.LOG_FILE, settings.LOG_ROTATION, settings.LOG_RETENTION)


# ===========================
# Custom Middleware
# ===========================
class LoguruMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            api_logger.error(f"Exception: {type(e).__name__}")
            raise
        finally:
            process_time = time.time() - start_time
            if request.url.path != "/health":
                api_logger.debug(f"{request.method} {request.url.path} - {status_code} - {process_time:.2f}s")
        return response


# ===========================
# Cache Store Selection
# ===========================
def build_cache_store() -> Optional[CacheStore]:
    if settings.CACHE_BACKEND == "redis":
        from anistream.utils.redis_store import RedisCache
        return RedisCache()

    if settings.CACHE_BACKEND == "database":
        from anistream.utils.database import DatabaseCache
        return DatabaseCache()

    return None


# ===========================
# Application Factory
# ===========================
def create_app(provider: Optional[BaseAnimeProvider] = None, cache: Optional[CacheStore] = None) -> FastAPI:
    provider = provider or AnitakuProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if cache is not None:
            await cache.connect()

        yield

        if cache is not None:
            await cache.close()
        await http_client.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan
    )

    app.state.cache = cache
    app.state.providers = {"anitaku": provider}

    app.add_middleware(LoguruMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(create_anitaku_router(provider, cache), prefix="/anime/anitaku", tags=["anitaku"])

    return app


app = create_app(cache=build_cache_store())


# ===========================
# Application Entry Point
# ===========================
if __name__ == "__main__":

    cache_store = app.state.cache

    app_logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    app_logger.info(f"Server: http://localhost:{settings.PORT}/")
    app_logger.info(f"Anitaku: {settings.ANITAKU_URL}")
    app_logger.info(f"Cache: {cache_store.get_backend_name() if cache_store else 'disabled'}")
    app_logger.info(f"Proxy: {'enabled' if settings.PROXY_URL else 'disabled'}")
    app_logger.info(f"Log level: {settings.LOG_LEVEL}")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        log_config=None
    )
