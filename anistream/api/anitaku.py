"""Anitaku provider routes.

Every data-producing endpoint goes through the same steps: build a cache key
from its parameters, read through the optional cache store, and send exactly
one response. Provider failures are carried back as a ``ProviderResult`` so
the status code is decided in a single place.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Path, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from anistream.config.settings import settings
from anistream.providers.base import BaseAnimeProvider, ProviderError
from anistream.utils import cache as cache_utils
from anistream.utils.cache import CacheStore, build_cache_key
from anistream.utils.helpers import decode_path_param, default_if_empty
from anistream.utils.logger import api_logger
from anistream.utils.validators import validate_server

# ===========================
# Constants
# ===========================
CACHE_PREFIX = "anitaku:"
RETRY_MESSAGE = "Something went wrong. Please try again later."
CONTACT_MESSAGE = "Something went wrong. Contact developers for help."
ROUTES = [
    "/:query",
    "/info/:id",
    "/watch/:episodeId",
    "/servers/:episodeId",
    "/genre/:genre",
    "/genre/list",
    "/top-airing",
    "/movies",
    "/popular",
    "/recent-episodes",
    "/anime-list",
    "/download",
]


# ===========================
# Provider Result
# ===========================
@dataclass
class ProviderResult:
    value: Any = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def result_response(result: ProviderResult) -> JSONResponse:
    if not result.ok:
        return error_response(404, str(result.error))
    return JSONResponse(status_code=200, content=result.value)


# ===========================
# Router Factory
# ===========================
def create_anitaku_router(provider: BaseAnimeProvider, cache: Optional[CacheStore] = None) -> APIRouter:
    router = APIRouter()
    base_ttl = settings.CACHE_TTL
    long_ttl = settings.CACHE_TTL_LONG

    async def load(key: str, fetcher: Callable[[], Awaitable[Any]], ttl: int) -> Any:
        if cache is None:
            return await fetcher()
        return await cache_utils.fetch(cache, key, fetcher, ttl)

    async def attempt(key: str, fetcher: Callable[[], Awaitable[Any]], ttl: int) -> ProviderResult:
        try:
            return ProviderResult(value=await load(key, fetcher, ttl))
        except ProviderError as e:
            api_logger.debug(f"Not found: {key} ({e})")
            return ProviderResult(error=e)

    async def lookup(key: str, fetcher: Callable[[], Awaitable[Any]], ttl: int = base_ttl) -> JSONResponse:
        try:
            result = await attempt(key, fetcher, ttl)
        except Exception as e:
            api_logger.error(f"Request failed: {key} - {type(e).__name__}")
            return error_response(500, RETRY_MESSAGE)
        return result_response(result)

    async def listing(key: str, fetcher: Callable[[], Awaitable[Any]], ttl: int = base_ttl) -> JSONResponse:
        try:
            value = await load(key, fetcher, ttl)
        except Exception as e:
            api_logger.error(f"Listing failed: {key} - {type(e).__name__}")
            return error_response(500, CONTACT_MESSAGE)
        return JSONResponse(status_code=200, content=value)

    # ===========================
    # Discovery Endpoint
    # ===========================
    @router.get("/", summary="Provider routes", description="Lists the available Anitaku routes")
    async def root():
        return {
            "intro": f"Welcome to the {provider.get_provider_name()} provider: check out the provider's website @ {provider.base_url}/",
            "routes": ROUTES,
            "documentation": settings.ANITAKU_DOCUMENTATION_URL,
        }

    # ===========================
    # Info Endpoints
    # ===========================
    @router.get("/info/{anime_id}", summary="Anime info", description="Returns details and episodes of an anime")
    async def info(anime_id: str = Path(..., description="Anime identifier")):
        anime_id = decode_path_param(anime_id)
        return await lookup(
            build_cache_key(CACHE_PREFIX, "info", anime_id),
            lambda: provider.fetch_anime_info(anime_id),
        )

    @router.get("/genre/list", summary="Genre list", description="Returns every available genre")
    async def genre_list():
        return await lookup(
            build_cache_key(CACHE_PREFIX, "genre-list"),
            provider.fetch_genre_list,
            long_ttl,
        )

    @router.get("/genre/{genre}", summary="Genre listing", description="Returns anime of a genre")
    async def genre(
        genre: str = Path(..., description="Genre identifier"),
        page: Optional[str] = Query(None, description="Page number")
    ):
        page = default_if_empty(page)
        return await lookup(
            build_cache_key(CACHE_PREFIX, "genre", page, genre),
            lambda: provider.fetch_genre_info(genre, page),
        )

    # ===========================
    # Episode Endpoints
    # ===========================
    @router.get("/watch/{episode_id}", summary="Episode sources", description="Returns streaming sources of an episode")
    async def watch(
        episode_id: str = Path(..., description="Episode identifier"),
        server: Optional[str] = Query(None, description="Streaming server")
    ):
        if not validate_server(server):
            return PlainTextResponse("Invalid server", status_code=400)

        return await lookup(
            build_cache_key(CACHE_PREFIX, "watch", server, episode_id),
            lambda: provider.fetch_episode_sources(episode_id, server),
        )

    @router.get("/servers/{episode_id}", summary="Episode servers", description="Returns streaming servers of an episode")
    async def servers(episode_id: str = Path(..., description="Episode identifier")):
        return await lookup(
            build_cache_key(CACHE_PREFIX, "servers", episode_id),
            lambda: provider.fetch_episode_servers(episode_id),
        )

    # ===========================
    # Listing Endpoints
    # ===========================
    @router.get("/top-airing", summary="Top airing", description="Returns currently airing anime")
    async def top_airing(page: Optional[str] = Query(None, description="Page number")):
        page = default_if_empty(page)
        return await listing(
            build_cache_key(CACHE_PREFIX, "top-airing", page),
            lambda: provider.fetch_top_airing(page),
        )

    @router.get("/movies", summary="Recent movies", description="Returns recently added movies")
    async def movies(page: Optional[str] = Query(None, description="Page number")):
        page = default_if_empty(page)
        return await listing(
            build_cache_key(CACHE_PREFIX, "movies", page),
            lambda: provider.fetch_recent_movies(page),
        )

    @router.get("/popular", summary="Popular", description="Returns popular anime")
    async def popular(page: Optional[str] = Query(None, description="Page number")):
        page = default_if_empty(page)
        return await listing(
            build_cache_key(CACHE_PREFIX, "popular", page),
            lambda: provider.fetch_popular(page),
        )

    @router.get("/recent-episodes", summary="Recent episodes", description="Returns recently released episodes")
    async def recent_episodes(
        episode_type: Optional[str] = Query(None, alias="type", description="Release type (1 sub, 2 dub, 3 chinese)"),
        page: Optional[str] = Query(None, description="Page number")
    ):
        episode_type = default_if_empty(episode_type)
        page = default_if_empty(page)
        return await listing(
            build_cache_key(CACHE_PREFIX, "recent-episodes", page, episode_type),
            lambda: provider.fetch_recent_episodes(page, episode_type),
        )

    @router.get("/anime-list", summary="Anime list", description="Returns the alphabetical anime list")
    async def anime_list(page: Optional[str] = Query(None, description="Page number")):
        page = default_if_empty(page)
        return await listing(
            build_cache_key(CACHE_PREFIX, "anime-list", page),
            lambda: provider.fetch_anime_list(page),
        )

    # ===========================
    # Download Endpoint
    # ===========================
    @router.get("/download", summary="Direct download", description="Resolves direct download links")
    async def download(link: Optional[str] = Query(None, description="Download page link")):
        if not link:
            return PlainTextResponse("Invalid link", status_code=400)

        # The captcha token is only sent when the response is not cached.
        token = None if cache is not None else settings.RECAPTCHATOKEN
        return await lookup(
            build_cache_key(CACHE_PREFIX, f"download-{link}"),
            lambda: provider.fetch_direct_download_link(link, token),
            long_ttl,
        )

    # ===========================
    # Search Endpoint
    # ===========================
    @router.get("/{query}", summary="Search", description="Searches anime by title")
    async def search(
        query: str = Path(..., description="Search query"),
        page: Optional[str] = Query(None, description="Page number")
    ):
        page = default_if_empty(page)
        try:
            value = await load(
                build_cache_key(CACHE_PREFIX, "search", page, query),
                lambda: provider.search(query, page),
                base_ttl,
            )
        except Exception as e:
            api_logger.error(f"Search failed: '{query}' - {type(e).__name__}")
            return error_response(500, RETRY_MESSAGE)
        return JSONResponse(status_code=200, content=value)

    return router
