"""
Provider adapter: one (episode, server, category) fetch from the upstream
scraper, retried with backoff and mapped onto StreamResult.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Dict, Optional, Protocol

from .backoff import RetryPolicy, Sleeper, retry_with_backoff
from .models import Category, StreamResult, TrackReference, UNKNOWN_WINDOW, UpstreamSources
from ..core.errors import ClientError, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "hd-2"


class DubPolicy(str, Enum):
    """How dub streams are obtained from the provider"""
    # dub is a separate category request to the same provider call
    FETCH = "fetch"
    # the provider has no separate dub feed; dub is never requested
    UNAVAILABLE = "unavailable"


class SourceScraper(Protocol):
    def episode_sources(
        self, anime_episode_id: str, server: Optional[str] = None, category: str = "sub"
    ) -> Awaitable[Dict[str, Any]]:
        ...


def normalize_episode_id(episode_id: str) -> str:
    """'anime-1::ep=2' -> 'anime-1?ep=2'; the '?ep=' form passes through"""
    if not episode_id or not episode_id.strip():
        raise ClientError("Episode ID is required")
    return episode_id.strip().replace("::", "?", 1)


def normalize_server(server_name: Optional[str], default: str = DEFAULT_SERVER) -> str:
    server = (server_name or "").strip().lower()
    return server or default


def map_sources(upstream: UpstreamSources, category: Category, server: str) -> StreamResult:
    """Translate a validated provider payload into the canonical result"""
    refs = [TrackReference.from_upstream(t) for t in upstream.tracks]
    return StreamResult(
        category=category,
        server=server,
        video_url=upstream.sources[0] if upstream.sources else None,
        tracks=tuple(r for r in refs if not r.is_thumbnails),
        thumbnails=tuple(r for r in refs if r.is_thumbnails),
        intro=upstream.intro or UNKNOWN_WINDOW,
        outro=upstream.outro or UNKNOWN_WINDOW,
    )


class ProviderAdapter:
    """
    Wraps the shared scraper handle. All per-request values travel as call
    arguments; the adapter itself holds only configuration.
    """

    def __init__(
        self,
        scraper: SourceScraper,
        dub_policy: DubPolicy = DubPolicy.FETCH,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.scraper = scraper
        self.dub_policy = DubPolicy(dub_policy)
        self._sleep = sleep

    @property
    def dub_enabled(self) -> bool:
        return self.dub_policy is DubPolicy.FETCH

    async def fetch_source(
        self,
        episode_id: str,
        server_name: Optional[str],
        category: Category,
        policy: RetryPolicy,
    ) -> StreamResult:
        """
        Fetch one category from one server.

        Raises ProviderError once the retry policy is exhausted; callers
        decide whether that is fatal.
        """
        normalized_id = normalize_episode_id(episode_id)
        server = normalize_server(server_name)
        category = Category(category)

        if category is Category.DUB and not self.dub_enabled:
            logger.debug(f"[ProviderAdapter] dub policy is {self.dub_policy.value}, skipping {normalized_id}")
            return StreamResult.not_available(category, server)

        async def call():
            try:
                raw = await self.scraper.episode_sources(normalized_id, server, category.value)
            except ProviderError:
                raise
            except Exception as exc:
                raise ProviderError(f"Provider call failed: {exc!r}") from exc
            return UpstreamSources.from_payload(raw)

        upstream = await retry_with_backoff(
            call, policy.max_attempts, policy.base_delay_ms, sleep=self._sleep
        )
        result = map_sources(upstream, category, server)
        logger.info(
            f"[ProviderAdapter] {category.value.upper()} {normalized_id} on {server}: "
            f"video={'yes' if result.available else 'no'}, tracks={len(result.tracks)}"
        )
        return result
