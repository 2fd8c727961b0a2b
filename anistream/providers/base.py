import functools
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from selectolax.parser import HTMLParser

from anistream.utils.http_client import http_client
from anistream.utils.logger import provider_logger

# ===========================
# Provider Error
# ===========================
class ProviderError(Exception):

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


# ===========================
# Operation Decorator
# ===========================
def provider_operation(func):
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except ProviderError as e:
            provider_logger.debug(f"[{self.get_provider_name()}] {func.__name__} failed: {e}")
            raise
        except Exception as e:
            provider_logger.error(f"[{self.get_provider_name()}] {func.__name__} error: {type(e).__name__}")
            raise ProviderError(str(e) or type(e).__name__) from e
    return wrapper


# ===========================
# Base Anime Provider Class
# ===========================
class BaseAnimeProvider(ABC):

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    @abstractmethod
    def get_provider_name(self) -> str:
        pass

    @abstractmethod
    async def search(self, query: str, page=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_anime_info(self, anime_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_episode_sources(self, episode_id: str, server: Optional[str] = None) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_episode_servers(self, episode_id: str) -> List[Dict[str, str]]:
        pass

    @abstractmethod
    async def fetch_genre_info(self, genre: str, page=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_genre_list(self) -> List[Dict[str, str]]:
        pass

    @abstractmethod
    async def fetch_top_airing(self, page=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_recent_movies(self, page=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_popular(self, page=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_recent_episodes(self, page=1, episode_type=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_anime_list(self, page=1) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def fetch_direct_download_link(self, download_url: str, captcha_token: Optional[str] = None) -> List[Dict[str, str]]:
        pass

    async def fetch_html(self, url: str, **kwargs) -> HTMLParser:
        provider_logger.debug(f"[{self.get_provider_name()}] GET {url}")
        response = await http_client.get(url, **kwargs)
        if response.status_code != 200:
            raise ProviderError(f"{self.get_provider_name()} responded with HTTP {response.status_code}", response.status_code)
        return HTMLParser(response.text)
