from typing import Any, Dict, List, Optional, Tuple

import pytest

from relay.app import create_app
from relay.core.errors import ProviderError
from relay.providers import DubPolicy, ProviderAdapter, StreamAggregator


async def no_sleep(seconds: float) -> None:
    return None


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeScraper:
    """
    Upstream scraper double.

    `responses` maps (server, category) to a payload dict, an exception, or
    a list of those consumed one call at a time. Unmapped calls fall back to
    `default`, which by default is a provider 404.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, str], Any]] = None, default: Any = None):
        self.responses = dict(responses or {})
        self.default = default if default is not None else ProviderError("not found", status=404)
        self.calls: List[Tuple[str, Optional[str], str]] = []

    async def episode_sources(self, anime_episode_id, server=None, category="sub"):
        self.calls.append((anime_episode_id, server, category))
        outcome = self.responses.get((server, category), self.default)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def sources_payload(url="https://cdn.example/hls/master.m3u8", tracks=None, intro=None, outro=None):
    payload = {
        "headers": {"Referer": "https://megacloud.example/"},
        "sources": [{"url": url, "type": "hls"}] if url else [],
        "tracks": tracks if tracks is not None else [],
    }
    if intro is not None:
        payload["intro"] = intro
    if outro is not None:
        payload["outro"] = outro
    return payload


def make_aggregator(scraper, dub_policy=DubPolicy.FETCH, sleep=no_sleep):
    return StreamAggregator(ProviderAdapter(scraper, dub_policy=dub_policy, sleep=sleep))


@pytest.fixture
def scraper():
    return FakeScraper()


@pytest.fixture
def make_client(tmp_path):
    """Build a test client around a given scraper and dub policy."""

    def _make(scraper=None, dub_policy=DubPolicy.FETCH, **overrides):
        scraper = scraper or FakeScraper()
        config = {"DUB_POLICY": dub_policy.value}
        config.update(overrides)
        app = create_app("testing", config_overrides=config, scraper=scraper)
        # same wiring as the factory, minus real backoff delays
        app.stream_aggregator = make_aggregator(scraper, dub_policy)
        return app.test_client()

    return _make


# =========================================================================
# aiohttp doubles for the media proxy
# =========================================================================
class FakeResponse:
    def __init__(self, body: bytes, content_type: Optional[str] = None, status: int = 200):
        self._body = body
        self.status = status
        self.headers = {"Content-Type": content_type} if content_type else {}

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Replaces aiohttp.ClientSession; routes urls to canned responses or errors."""

    routes: Dict[str, Any] = {}
    requests: List[Tuple[str, Dict[str, str]]] = []

    def __init__(self, timeout=None):
        self.timeout = timeout

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def get(self, url, headers=None):
        FakeSession.requests.append((url, dict(headers or {})))
        outcome = FakeSession.routes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_session(monkeypatch):
    import relay.proxy.media as media

    FakeSession.routes = {}
    FakeSession.requests = []
    monkeypatch.setattr(media.aiohttp, "ClientSession", FakeSession)
    return FakeSession
