from .media import ProxiedMedia, fetch_media
from .playlist import rewrite_playlist

__all__ = ["ProxiedMedia", "fetch_media", "rewrite_playlist"]
