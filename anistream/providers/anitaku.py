import re
from typing import Any, Dict, List, Optional

from selectolax.parser import HTMLParser, Node

from anistream.config.settings import settings
from anistream.providers.base import BaseAnimeProvider, ProviderError, provider_operation
from anistream.utils.helpers import clean_text, extract_slug, format_url, quote_url_param, strip_label
from anistream.utils.logger import provider_logger
from anistream.utils.validators import StreamingServer

# ===========================
# Constants
# ===========================
SERVER_SELECTORS = {
    StreamingServer.vidstreaming: "div.anime_muti_link li.vidcdn > a",
    StreamingServer.streamsb: "div.anime_muti_link li.streamsb > a",
    StreamingServer.streamwish: "div.anime_muti_link li.streamwish > a",
    StreamingServer.mp4upload: "div.anime_muti_link li.mp4upload > a",
    StreamingServer.filemoon: "div.anime_muti_link li.filemoon > a",
    StreamingServer.vidhide: "div.anime_muti_link li.vidhide > a",
    StreamingServer.streamhub: "div.anime_muti_link li.streamhub > a",
    StreamingServer.mixdrop: "div.anime_muti_link li.mixdrop > a",
    StreamingServer.voe: "div.anime_muti_link li.voe > a",
}
DEFAULT_PLAYER_SELECTOR = "#load_anime iframe"
SERVER_LABEL_SUFFIX = "Choose this server"
BACKGROUND_URL_PATTERN = re.compile(r"url\(['\"]?(.*?)['\"]?\)")

# ===========================
# Anitaku Provider Class
# ===========================
class AnitakuProvider(BaseAnimeProvider):

    def __init__(self, base_url: Optional[str] = None, ajax_url: Optional[str] = None):
        super().__init__(base_url or settings.ANITAKU_URL)
        self.ajax_url = (ajax_url or settings.ANITAKU_AJAX_URL).rstrip("/")

    def get_provider_name(self) -> str:
        return "Anitaku"

    # ===========================
    # Parsing Helpers
    # ===========================
    @staticmethod
    def has_next_page(parser: HTMLParser) -> bool:
        pages = parser.css("ul.pagination-list > li")
        for index, page_node in enumerate(pages):
            if "selected" in (page_node.attributes.get("class") or "").split():
                return index < len(pages) - 1
        return False

    def parse_card(self, node: Node) -> Optional[Dict[str, Any]]:
        link = node.css_first("p.name > a")
        if link is None:
            return None

        href = link.attributes.get("href") or ""
        title = link.attributes.get("title") or link.text(strip=True)
        image = node.css_first("div.img img") or node.css_first("img")
        released = node.css_first("p.released")

        return {
            "id": extract_slug(href),
            "title": clean_text(title),
            "url": format_url(href, self.base_url),
            "image": image.attributes.get("src") if image else None,
            "releaseDate": strip_label(released.text() if released else "", "Released"),
            "subOrDub": "dub" if "(dub)" in title.lower() else "sub",
        }

    def parse_card_page(self, parser: HTMLParser, page) -> Dict[str, Any]:
        results = []
        for node in parser.css("div.last_episodes > ul.items > li"):
            card = self.parse_card(node)
            if card:
                results.append(card)

        return {
            "currentPage": page,
            "hasNextPage": self.has_next_page(parser),
            "results": results,
        }

    def parse_info_fields(self, parser: HTMLParser) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"genres": []}
        for node in parser.css("div.anime_info_body_bg p.type"):
            label_node = node.css_first("span")
            label = clean_text(label_node.text() if label_node else "").rstrip(":").lower()

            if label == "genre":
                fields["genres"] = [
                    clean_text(a.attributes.get("title") or a.text()).lstrip(", ")
                    for a in node.css("a")
                ]
            elif label == "type":
                fields["type"] = strip_label(node.text(), "Type").upper() or None
            elif label == "released":
                fields["releaseDate"] = strip_label(node.text(), "Released") or None
            elif label == "status":
                fields["status"] = strip_label(node.text(), "Status") or None
            elif label == "other name":
                fields["otherName"] = strip_label(node.text(), "Other name") or None
            elif label == "plot summary":
                fields["description"] = strip_label(node.text(), "Plot Summary") or None
        return fields

    # ===========================
    # Search
    # ===========================
    @provider_operation
    async def search(self, query: str, page=1) -> Dict[str, Any]:
        provider_logger.debug(f"[Anitaku] Searching: '{query}' (page {page})")
        parser = await self.fetch_html(f"{self.base_url}/search.html?keyword={quote_url_param(query)}&page={page}")
        return self.parse_card_page(parser, page)

    # ===========================
    # Anime Info
    # ===========================
    @provider_operation
    async def fetch_anime_info(self, anime_id: str) -> Dict[str, Any]:
        info_url = anime_id if anime_id.startswith("http") else f"{self.base_url}/category/{anime_id}"
        parser = await self.fetch_html(info_url)

        title_node = parser.css_first("div.anime_info_body_bg h1")
        if title_node is None:
            raise ProviderError(f"Anime not found: {anime_id}", 404)

        image = parser.css_first("div.anime_info_body_bg img")
        description = parser.css_first("div.anime_info_body_bg div.description")

        info: Dict[str, Any] = {
            "id": extract_slug(info_url),
            "title": clean_text(title_node.text()),
            "url": info_url,
            "image": image.attributes.get("src") if image else None,
            "description": clean_text(description.text()) if description else None,
            "type": None,
            "releaseDate": None,
            "status": None,
            "otherName": None,
        }
        info.update(self.parse_info_fields(parser))
        info["subOrDub"] = "dub" if info["title"].lower().endswith("(dub)") else "sub"

        movie_id = parser.css_first("#movie_id")
        alias = parser.css_first("#alias_anime")
        last_page = parser.css("#episode_page > li > a")
        ep_end = last_page[-1].attributes.get("ep_end") if last_page else "0"

        info["totalEpisodes"] = int(float(ep_end or 0))
        info["episodes"] = []

        if movie_id is not None and info["totalEpisodes"] > 0:
            info["episodes"] = await self.fetch_episode_list(
                movie_id.attributes.get("value") or "",
                alias.attributes.get("value") if alias else "",
                ep_end,
            )

        return info

    async def fetch_episode_list(self, movie_id: str, alias: str, ep_end: str) -> List[Dict[str, Any]]:
        parser = await self.fetch_html(
            f"{self.ajax_url}/load-list-episode",
            params={"ep_start": 0, "ep_end": ep_end, "id": movie_id, "default_ep": 0, "alias": alias},
        )

        episodes = []
        for node in parser.css("#episode_related > li"):
            link = node.css_first("a")
            if link is None:
                continue
            href = clean_text(link.attributes.get("href"))
            name = node.css_first("div.name")
            number = clean_text(name.text() if name else "").replace("EP", "").strip()
            episodes.append({
                "id": extract_slug(href),
                "number": float(number) if number else None,
                "url": format_url(href, self.base_url),
            })

        episodes.reverse()
        return episodes

    # ===========================
    # Episode Servers
    # ===========================
    @provider_operation
    async def fetch_episode_servers(self, episode_id: str) -> List[Dict[str, str]]:
        episode_url = episode_id if episode_id.startswith("http") else f"{self.base_url}/{episode_id}"
        parser = await self.fetch_html(episode_url)

        servers = []
        for link in parser.css("div.anime_muti_link > ul > li > a"):
            video_url = link.attributes.get("data-video")
            if not video_url:
                continue
            servers.append({
                "name": clean_text(link.text().replace(SERVER_LABEL_SUFFIX, "")),
                "url": format_url(video_url, self.base_url),
            })

        if not servers:
            raise ProviderError(f"No servers found for episode: {episode_id}", 404)
        return servers

    # ===========================
    # Episode Sources
    # ===========================
    @provider_operation
    async def fetch_episode_sources(self, episode_id: str, server: Optional[str] = None) -> Dict[str, Any]:
        episode_url = episode_id if episode_id.startswith("http") else f"{self.base_url}/{episode_id}"
        parser = await self.fetch_html(episode_url)

        selected = StreamingServer(server) if server else StreamingServer.gogocdn
        selector = SERVER_SELECTORS.get(selected)

        embed_url = None
        if selector:
            node = parser.css_first(selector)
            embed_url = node.attributes.get("data-video") if node else None
        else:
            node = parser.css_first(DEFAULT_PLAYER_SELECTOR)
            embed_url = node.attributes.get("src") if node else None

        if not embed_url:
            raise ProviderError(f"Server {selected.value} not available for episode: {episode_id}", 404)

        embed_url = format_url(embed_url, self.base_url)
        download = parser.css_first("li.dowloads > a") or parser.css_first("div.favorites_book a[href*='download']")

        return {
            "headers": {"Referer": embed_url},
            "sources": [{"url": embed_url, "isM3U8": ".m3u8" in embed_url}],
            "download": download.attributes.get("href") if download else None,
        }

    # ===========================
    # Genres
    # ===========================
    @provider_operation
    async def fetch_genre_info(self, genre: str, page=1) -> Dict[str, Any]:
        parser = await self.fetch_html(f"{self.base_url}/genre/{genre}?page={page}")
        return self.parse_card_page(parser, page)

    @provider_operation
    async def fetch_genre_list(self) -> List[Dict[str, str]]:
        parser = await self.fetch_html(f"{self.base_url}/home.html")

        genres = []
        for link in parser.css("nav.genre ul > li > a"):
            href = link.attributes.get("href") or ""
            genres.append({
                "id": href.replace("/genre/", "").strip("/"),
                "title": clean_text(link.attributes.get("title") or link.text()),
            })
        return genres

    # ===========================
    # Listings
    # ===========================
    @provider_operation
    async def fetch_top_airing(self, page=1) -> Dict[str, Any]:
        parser = await self.fetch_html(f"{self.ajax_url}/page-recent-release-ongoing.html", params={"page": page})

        results = []
        for node in parser.css("div.added_series_body.popular > ul > li"):
            link = node.css_first("a")
            if link is None:
                continue
            href = link.attributes.get("href") or ""
            thumbnail = node.css_first("div.thumbnail-popular")
            image_match = BACKGROUND_URL_PATTERN.search(thumbnail.attributes.get("style") or "") if thumbnail else None
            latest = node.css("p")
            results.append({
                "id": extract_slug(href),
                "title": clean_text(link.attributes.get("title") or link.text()),
                "image": image_match.group(1) if image_match else None,
                "url": format_url(href, self.base_url),
                "genres": [clean_text(a.attributes.get("title") or a.text()) for a in node.css("p.genres > a")],
                "episodeNumber": clean_text(latest[-1].text()).replace("Episode", "").strip() if latest else None,
            })

        return {
            "currentPage": page,
            "hasNextPage": self.has_next_page(parser),
            "results": results,
        }

    @provider_operation
    async def fetch_recent_movies(self, page=1) -> Dict[str, Any]:
        parser = await self.fetch_html(f"{self.base_url}/anime-movies.html?aph=&page={page}")
        return self.parse_card_page(parser, page)

    @provider_operation
    async def fetch_popular(self, page=1) -> Dict[str, Any]:
        parser = await self.fetch_html(f"{self.base_url}/popular.html?page={page}")
        return self.parse_card_page(parser, page)

    @provider_operation
    async def fetch_recent_episodes(self, page=1, episode_type=1) -> Dict[str, Any]:
        parser = await self.fetch_html(
            f"{self.ajax_url}/page-recent-release.html",
            params={"page": page, "type": episode_type},
        )

        results = []
        for node in parser.css("div.last_episodes > ul > li"):
            link = node.css_first("p.name > a")
            if link is None:
                continue
            href = link.attributes.get("href") or ""
            episode_id = extract_slug(href)
            episode = node.css_first("p.episode")
            episode_number = clean_text(episode.text() if episode else "").replace("Episode", "").strip()
            image = node.css_first("img")
            results.append({
                "id": episode_id.split("-episode")[0],
                "episodeId": episode_id,
                "episodeNumber": float(episode_number) if episode_number else None,
                "title": clean_text(link.attributes.get("title") or link.text()),
                "image": image.attributes.get("src") if image else None,
                "url": format_url(href, self.base_url),
            })

        return {
            "currentPage": page,
            "hasNextPage": self.has_next_page(parser),
            "results": results,
        }

    @provider_operation
    async def fetch_anime_list(self, page=1) -> Dict[str, Any]:
        parser = await self.fetch_html(f"{self.base_url}/anime-list.html?page={page}")

        results = []
        for link in parser.css("div.anime_list_body > ul.listing > li > a"):
            href = link.attributes.get("href") or ""
            results.append({
                "id": extract_slug(href),
                "title": clean_text(link.text()),
                "url": format_url(href, self.base_url),
            })

        return {
            "currentPage": page,
            "hasNextPage": self.has_next_page(parser),
            "results": results,
        }

    # ===========================
    # Direct Download
    # ===========================
    @provider_operation
    async def fetch_direct_download_link(self, download_url: str, captcha_token: Optional[str] = None) -> List[Dict[str, str]]:
        params = {"captcha_v3": captcha_token} if captcha_token else None
        parser = await self.fetch_html(download_url, params=params)

        links = []
        for link in parser.css("div.dowload > a"):
            href = link.attributes.get("href")
            if not href:
                continue
            links.append({
                "source": clean_text(link.text().replace("Download", "")),
                "link": href,
            })

        if not links:
            raise ProviderError("No download links found", 404)
        return links
