"""
Stream aggregation across categories and servers.

Provider failures never leave this module as exceptions: each fetch is
folded into a Found / NotAvailable outcome and the response carries
"not available" data instead.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from .adapter import ProviderAdapter, normalize_episode_id, normalize_server
from .backoff import DUB_RETRY, MULTI_SERVER_RETRY, SUB_RETRY, RetryPolicy
from .models import (
    AggregatedResponse,
    Category,
    Found,
    NotAvailable,
    ServerBundle,
    ServerSources,
    StreamOutcome,
    StreamResult,
)
from ..core.errors import ClientError, ProviderError

logger = logging.getLogger(__name__)

CANDIDATE_SERVERS = ("hd-1", "hd-2", "hd-3")


class StreamAggregator:
    """Builds player-ready responses from the provider adapter"""

    def __init__(
        self,
        adapter: ProviderAdapter,
        servers: Sequence[str] = CANDIDATE_SERVERS,
        default_server: str = "hd-2",
    ):
        self.adapter = adapter
        self.servers = tuple(servers)
        self.default_server = default_server

    async def _try_fetch(
        self, episode_id: str, server: str, category: Category, policy: RetryPolicy
    ) -> StreamOutcome:
        try:
            result = await self.adapter.fetch_source(episode_id, server, category, policy)
        except ProviderError as e:
            logger.warning(
                f"[StreamAggregator] {category.value.upper()} not available on {server}: "
                f"{e.message} (status={e.status})"
            )
            return NotAvailable(reason=e.message, status=e.status)
        if not result.available:
            return NotAvailable(reason="no sources")
        return Found(result)

    # =========================================================================
    # SINGLE SERVER
    # =========================================================================
    async def get_episode_streams(
        self, episode_id: str, server_name: Optional[str] = None
    ) -> AggregatedResponse:
        """
        Sub and dub streams for one episode on one server.

        Sub uses the heavier retry policy; dub gets a lighter one. With the
        "unavailable" dub policy dub is never attempted and stays None.
        """
        normalized_id = normalize_episode_id(episode_id)
        server = normalize_server(server_name, self.default_server)
        logger.info(f"[StreamAggregator] Fetching stream for {normalized_id} on {server}")

        sub_task = self._try_fetch(normalized_id, server, Category.SUB, SUB_RETRY)
        if self.adapter.dub_enabled:
            sub_outcome, dub_outcome = await asyncio.gather(
                sub_task,
                self._try_fetch(normalized_id, server, Category.DUB, DUB_RETRY),
            )
        else:
            sub_outcome, dub_outcome = await sub_task, None

        if isinstance(sub_outcome, Found):
            sub = sub_outcome.result
        else:
            sub = StreamResult.not_available(Category.SUB, server)

        dub = None
        if isinstance(dub_outcome, Found):
            dub = dub_outcome.result
        elif isinstance(dub_outcome, NotAvailable):
            dub = StreamResult.not_available(Category.DUB, server)

        return AggregatedResponse(sub=sub, dub=dub)

    # =========================================================================
    # MULTI SERVER
    # =========================================================================
    async def get_multi_server_streams(
        self,
        content_type: str,
        content_id: str,
        episode: Optional[str] = None,
    ) -> List[ServerBundle]:
        """
        Sub and dub sources for every candidate server.

        Servers are queried concurrently; the returned list always follows
        the candidate order, whatever succeeded.
        """
        if not content_type or not content_id:
            raise ClientError("Content type and content ID are required")

        episode_id = f"{content_id}?ep={episode}" if episode else content_id
        logger.info(f"[StreamAggregator] Fetching {content_type} {episode_id} on {len(self.servers)} servers")

        return list(await asyncio.gather(
            *(self._server_bundle(episode_id, server) for server in self.servers)
        ))

    async def _server_bundle(self, episode_id: str, server: str) -> ServerBundle:
        sub_outcome, dub_outcome = await asyncio.gather(
            self._try_fetch(episode_id, server, Category.SUB, MULTI_SERVER_RETRY),
            self._try_fetch(episode_id, server, Category.DUB, MULTI_SERVER_RETRY),
        )
        return ServerBundle(
            server_id=server,
            sub=_server_sources(sub_outcome, Category.SUB),
            dub=_server_sources(dub_outcome, Category.DUB),
        )


def _server_sources(outcome: StreamOutcome, category: Category) -> ServerSources:
    if isinstance(outcome, Found):
        sources = ServerSources.from_result(outcome.result)
        logger.debug(
            f"[StreamAggregator] Found {len(sources.captions)} caption languages for "
            f"{category.value.upper()} on {outcome.result.server}"
        )
        return sources
    return ServerSources(category=category)
