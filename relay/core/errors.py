"""
Error taxonomy shared by the providers, the proxy and the route layer.

Route handlers never build error responses by hand for these; the app
factory registers a handler for RelayError that serializes them.
"""
from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ClientError(RelayError):
    """Malformed or missing request input. Never retried."""

    status_code = 400
    default_message = "Bad request"


class ProviderError(RelayError):
    """
    Upstream scraping/fetch failure (network, rate-limit, malformed payload).

    `status` is the structured status reported by the upstream API when it
    gave one, else None for transport failures.
    """

    status_code = 502
    default_message = "Provider request failed"

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    @property
    def unavailable(self) -> bool:
        """True when the provider itself is down or throttling us."""
        return self.status is not None and (self.status >= 500 or self.status == 429)


class ProxyFetchError(RelayError):
    """Failure fetching a proxied media target."""

    status_code = 500
    default_message = "Failed to fetch resource"
