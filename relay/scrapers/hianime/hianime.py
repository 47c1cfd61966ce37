"""
Hianime scraper - thin async wrapper over the aniwatch API sources endpoint
"""
import logging
from typing import Optional, Dict, Any

from .base import HianimeBaseClient
from ...core.errors import ProviderError

logger = logging.getLogger(__name__)


class HianimeScraper:
    """
    Async wrapper for the Aniwatch / Hianime API
    Documentation: https://github.com/ghoshRitesh12/aniwatch-api

    One instance is shared by every request; it holds only its base
    client configuration and is never mutated after construction.
    """

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = 8,
    ):
        """
        Initialize the Hianime scraper

        Args:
            base_url: API base URL, e.g. http://localhost:4000/api/v2/hianime
            default_headers: Headers sent with every request
            timeout: Per-request timeout in seconds
        """
        self.client = HianimeBaseClient(base_url, default_headers, timeout)

    async def episode_sources(
        self,
        anime_episode_id: str,
        server: Optional[str] = None,
        category: str = "sub"
    ) -> Dict[str, Any]:
        """
        Get HLS sources, subtitles and intro/outro markers for an episode
        e.g. anime_episode_id = "steinsgate-0-92?ep=2055", category: sub|dub
        """
        params = {"animeEpisodeId": anime_episode_id, "category": category}
        if server:
            params["server"] = server
        resp = await self.client._get("episode/sources", params=params)
        data = resp.get("data")
        if data is None:
            raise ProviderError("Provider response has no data", status=resp.get("status"))
        logger.debug(f"[HianimeScraper] sources for {anime_episode_id} ({server}/{category}) received")
        return data
