"""
Base HTTP client for Hianime API requests
Handles timeouts and error translation. Retries are left to the caller.
"""
import asyncio
import logging
from typing import Optional, Dict, Any, Union

import aiohttp

from ...core.errors import ProviderError

logger = logging.getLogger(__name__)


class HianimeBaseClient:
    """Base HTTP client that turns every upstream failure into a ProviderError"""

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = 8,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_headers = default_headers or {}
        self.timeout = timeout

    async def _get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Union[str, int]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Make a single GET request and return the decoded JSON body

        Args:
            endpoint: API endpoint path
            params: Query parameters
            headers: Additional headers

        Returns:
            JSON response dict

        Raises:
            ProviderError: on transport failure, timeout, HTTP error status
                or a body that is not a JSON object
        """
        params = params or {}
        headers = {**self.default_headers, **(headers or {})}
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=headers) as resp:
                    try:
                        payload = await resp.json(content_type=None)
                    except ValueError:
                        # UnicodeDecodeError lands here too, so log raw bytes
                        body = await resp.read()
                        logger.warning(f"[HianimeAPI] Non-JSON body from {url}: {body[:200]!r}")
                        raise ProviderError(
                            f"Malformed response from provider (HTTP {resp.status})",
                            status=resp.status,
                        )

                    if resp.status >= 400:
                        status, message = _error_details(payload, resp.status)
                        logger.warning(f"[HianimeAPI] {url} returned {status}: {message}")
                        raise ProviderError(message, status=status)

                    if not isinstance(payload, dict):
                        raise ProviderError("Malformed response from provider", status=resp.status)
                    return payload
        except asyncio.TimeoutError:
            logger.warning(f"[HianimeAPI] Timeout for {url}")
            raise ProviderError("Provider request timed out")
        except aiohttp.ClientError as exc:
            logger.warning(f"[HianimeAPI] Error for {url}: {exc}")
            raise ProviderError(f"Provider request failed: {exc}")


def _error_details(payload: Any, http_status: int):
    """Prefer the status/message the API reports in its error body"""
    if isinstance(payload, dict):
        status = payload.get("status")
        message = payload.get("message") or "Provider request failed"
        if isinstance(status, int):
            return status, message
        return http_status, message
    return http_status, "Provider request failed"
