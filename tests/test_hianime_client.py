import asyncio
import json
from typing import Any, Dict, List, Tuple

import aiohttp
import pytest

from relay.core.errors import ProviderError
from relay.scrapers import HianimeScraper
from relay.scrapers.hianime.base import HianimeBaseClient, _error_details

BASE_URL = "http://aniwatch.test/api/v2/hianime"
SOURCES_URL = f"{BASE_URL}/episode/sources"


class ApiResponse:
    """aiohttp response double; json() decodes the raw body like aiohttp does."""

    def __init__(self, body: Any, status: int = 200):
        if isinstance(body, bytes):
            self._body = body
        else:
            self._body = json.dumps(body).encode("utf-8")
        self.status = status

    async def json(self, content_type="application/json"):
        return json.loads(self._body.decode("utf-8"))

    async def text(self) -> str:
        return self._body.decode("utf-8")

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class ApiSession:
    routes: Dict[str, Any] = {}
    requests: List[Tuple[str, Dict[str, Any]]] = []

    def __init__(self, timeout=None):
        self.timeout = timeout

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def get(self, url, params=None, headers=None):
        ApiSession.requests.append((url, dict(params or {})))
        outcome = ApiSession.routes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def api(monkeypatch):
    import relay.scrapers.hianime.base as base

    ApiSession.routes = {}
    ApiSession.requests = []
    monkeypatch.setattr(base.aiohttp, "ClientSession", ApiSession)
    return ApiSession


def episode_sources(**kwargs):
    scraper = HianimeScraper(BASE_URL)
    return asyncio.run(scraper.episode_sources("anime-1?ep=2", **kwargs))


# =========================================================================
# HianimeScraper.episode_sources
# =========================================================================
def test_returns_data_object_and_sends_params(api):
    data = {"sources": [{"url": "https://v/master.m3u8"}], "tracks": []}
    api.routes[SOURCES_URL] = ApiResponse({"status": 200, "data": data})

    assert episode_sources(server="hd-1", category="dub") == data
    assert api.requests == [
        (SOURCES_URL, {"animeEpisodeId": "anime-1?ep=2", "category": "dub", "server": "hd-1"}),
    ]


def test_server_param_is_omitted_when_not_given(api):
    api.routes[SOURCES_URL] = ApiResponse({"status": 200, "data": {"sources": []}})
    episode_sources()
    assert api.requests[0][1] == {"animeEpisodeId": "anime-1?ep=2", "category": "sub"}


def test_null_data_is_a_provider_error(api):
    api.routes[SOURCES_URL] = ApiResponse({"status": 200, "data": None})
    with pytest.raises(ProviderError) as info:
        episode_sources()
    assert info.value.status == 200


# =========================================================================
# HianimeBaseClient._get error translation
# =========================================================================
def test_json_error_body_status_wins(api):
    api.routes[SOURCES_URL] = ApiResponse({"status": 429, "message": "Too many requests"}, status=500)
    with pytest.raises(ProviderError) as info:
        episode_sources()

    assert info.value.status == 429
    assert info.value.message == "Too many requests"
    assert info.value.unavailable


def test_json_error_without_status_uses_http_status(api):
    api.routes[SOURCES_URL] = ApiResponse({"message": "Episode not found"}, status=404)
    with pytest.raises(ProviderError) as info:
        episode_sources()

    assert info.value.status == 404
    assert info.value.message == "Episode not found"
    assert not info.value.unavailable


@pytest.mark.parametrize("body, status", [
    (b"<html>Bad Gateway</html>", 502),
    (b"<html>challenge</html>", 200),
    (b"\xff\xfe\x00garbage", 503),
])
def test_non_json_body_is_a_provider_error_with_http_status(api, body, status):
    api.routes[SOURCES_URL] = ApiResponse(body, status=status)
    with pytest.raises(ProviderError) as info:
        episode_sources()

    assert info.value.status == status
    assert "Malformed" in info.value.message


def test_non_object_json_is_a_provider_error(api):
    api.routes[SOURCES_URL] = ApiResponse(["not", "an", "object"])
    with pytest.raises(ProviderError):
        episode_sources()


@pytest.mark.parametrize("error, fragment", [
    (asyncio.TimeoutError(), "timed out"),
    (aiohttp.ClientConnectionError("refused"), "refused"),
])
def test_transport_failures_are_provider_errors(api, error, fragment):
    api.routes[SOURCES_URL] = error
    with pytest.raises(ProviderError) as info:
        episode_sources()

    assert info.value.status is None
    assert fragment in info.value.message


def test_base_client_joins_url_and_merges_headers(api):
    api.routes[f"{BASE_URL}/home"] = ApiResponse({"status": 200, "data": {}})
    client = HianimeBaseClient(BASE_URL + "/", default_headers={"Accept": "application/json"})

    assert asyncio.run(client._get("/home")) == {"status": 200, "data": {}}
    assert api.requests[0][0] == f"{BASE_URL}/home"


def test_error_details():
    assert _error_details({"status": 404, "message": "gone"}, 500) == (404, "gone")
    assert _error_details({"status": "404"}, 500) == (500, "Provider request failed")
    assert _error_details("oops", 503) == (503, "Provider request failed")
