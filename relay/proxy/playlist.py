"""HLS playlist rewriting: route every child URI back through /proxy."""
import re
from typing import Optional
from urllib.parse import quote

PROXY_PREFIX = "/proxy?url="
STREAM_INF_TAG = "#EXT-X-STREAM-INF"

_CODECS_WITH_LEADING_COMMA = re.compile(r',CODECS="[^"]*"')
_CODECS_ANYWHERE = re.compile(r'CODECS="[^"]*",?')

# characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def is_master_playlist(content: str) -> bool:
    return STREAM_INF_TAG in content


def base_url_of(url: str) -> str:
    """Everything up to and including the last '/'"""
    return url[: url.rfind("/") + 1]


def proxied(url: str) -> str:
    return PROXY_PREFIX + quote(url, safe=_URI_COMPONENT_SAFE)


def strip_codecs(line: str) -> str:
    return _CODECS_ANYWHERE.sub("", _CODECS_WITH_LEADING_COMMA.sub("", line))


def rewrite_playlist(content: str, base_url: str, is_master: Optional[bool] = None) -> str:
    """
    Rewrite an .m3u8 body so that every URI line points at the proxy.

    Master playlists lose their CODECS attributes. Lines already in
    proxied form are left alone, so rewriting twice is harmless.
    """
    if is_master is None:
        is_master = is_master_playlist(content)

    out = []
    for line in content.split("\n"):
        if is_master and "CODECS=" in line:
            line = strip_codecs(line)

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            out.append(line)
            continue

        if stripped.startswith(PROXY_PREFIX):
            out.append(stripped)
            continue

        if stripped.startswith(("http://", "https://")):
            absolute = stripped
        else:
            absolute = base_url + stripped
        out.append(proxied(absolute))

    return "\n".join(out)
