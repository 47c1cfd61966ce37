"""
Media fetcher for the /proxy endpoint
Fetches a target with spoofed headers and rewrites playlists on the way out
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp

from .playlist import base_url_of, is_master_playlist, rewrite_playlist
from ..core.errors import ProxyFetchError

logger = logging.getLogger(__name__)

PLAYLIST_EXTENSION = ".m3u8"
PLAYLIST_CONTENT_TYPE = "application/vnd.apple.mpegurl"


@dataclass(frozen=True)
class ProxiedMedia:
    body: bytes
    content_type: Optional[str]
    status: int = 200
    is_playlist: bool = False


def looks_like_playlist(url: str, content_type: Optional[str]) -> bool:
    ctype = (content_type or "").lower()
    return url.endswith(PLAYLIST_EXTENSION) or "mpegurl" in ctype or "m3u8" in ctype


async def fetch_media(
    target_url: str,
    referer: str,
    user_agent: str,
    timeout: float = 5,
) -> ProxiedMedia:
    """
    Fetch `target_url` once (no retries).

    Successful playlists come back rewritten as text; any other body
    (including upstream error pages) is returned byte-for-byte with the
    upstream status and content type.

    Raises:
        ProxyFetchError: on network failure or timeout
    """
    headers: Dict[str, str] = {"Referer": referer, "User-Agent": user_agent}
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(target_url, headers=headers) as resp:
                content_type = resp.headers.get("Content-Type")
                body = await resp.read()
                status = resp.status
    except asyncio.TimeoutError:
        logger.error(f"[MediaProxy] Timeout fetching {target_url}")
        raise ProxyFetchError()
    except aiohttp.ClientError as exc:
        logger.error(f"[MediaProxy] Error fetching {target_url}: {exc}")
        raise ProxyFetchError()

    # error pages pass through untouched, even for .m3u8 targets
    if status >= 400 or not looks_like_playlist(target_url, content_type):
        return ProxiedMedia(body=body, content_type=content_type, status=status)

    text = body.decode("utf-8", errors="replace")
    rewritten = rewrite_playlist(text, base_url_of(target_url), is_master_playlist(text))
    logger.debug(f"[MediaProxy] Rewrote playlist {target_url} ({len(text)} -> {len(rewritten)} chars)")
    return ProxiedMedia(
        body=rewritten.encode("utf-8"),
        content_type=PLAYLIST_CONTENT_TYPE,
        status=status,
        is_playlist=True,
    )
