"""
Typed shapes for stream data.

UpstreamSources is the only place that knows the provider's payload
layout; everything past the adapter works with the frozen dataclasses
below and their `to_dict` wire forms.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.errors import ProviderError

DEFAULT_LABEL = "Unknown"
DEFAULT_LANGUAGE = "English"
THUMBNAILS_LABEL = "thumbnails"


class Category(str, Enum):
    SUB = "sub"
    DUB = "dub"


@dataclass(frozen=True)
class Window:
    """Intro/outro range in seconds. (0, 0) means unknown, not a real marker."""
    start: float = 0
    end: float = 0

    @property
    def known(self) -> bool:
        return not (self.start == 0 and self.end == 0)

    def to_dict(self) -> Dict[str, float]:
        return {"start": self.start, "end": self.end}


UNKNOWN_WINDOW = Window()


# =========================================================================
# Upstream payload schema
# =========================================================================
@dataclass(frozen=True)
class UpstreamTrack:
    url: str
    lang: Optional[str] = None
    default: bool = False


@dataclass(frozen=True)
class UpstreamSources:
    sources: Tuple[str, ...] = ()
    tracks: Tuple[UpstreamTrack, ...] = ()
    intro: Optional[Window] = None
    outro: Optional[Window] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "UpstreamSources":
        """
        Validate the `data` object of an episode/sources response.

        Accepts both `tracks` and the older `subtitles` key, and `lang` or
        `label` for a track's language. Raises ProviderError when the
        payload does not have the expected layout.
        """
        if not isinstance(payload, dict):
            raise ProviderError("Malformed provider payload: expected an object")

        sources = []
        for item in _as_list(payload.get("sources"), "sources"):
            if not isinstance(item, dict):
                raise ProviderError("Malformed provider payload: source entry is not an object")
            url = item.get("url") or item.get("file")
            if isinstance(url, str) and url:
                sources.append(url)

        raw_tracks = payload.get("tracks")
        if raw_tracks is None:
            raw_tracks = payload.get("subtitles")
        tracks = []
        for item in _as_list(raw_tracks, "tracks"):
            if not isinstance(item, dict):
                raise ProviderError("Malformed provider payload: track entry is not an object")
            url = item.get("url") or item.get("file")
            if not isinstance(url, str) or not url:
                continue
            lang = item.get("lang") or item.get("label")
            tracks.append(UpstreamTrack(
                url=url,
                lang=lang if isinstance(lang, str) else None,
                default=bool(item.get("default", False)),
            ))

        return cls(
            sources=tuple(sources),
            tracks=tuple(tracks),
            intro=_window(payload.get("intro")),
            outro=_window(payload.get("outro")),
        )


def _as_list(value: Any, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProviderError(f"Malformed provider payload: '{name}' is not a list")
    return value


def _window(value: Any) -> Optional[Window]:
    if not isinstance(value, dict):
        return None
    start, end = value.get("start"), value.get("end")
    if isinstance(start, bool) or isinstance(end, bool):
        return None
    if not isinstance(start, (int, float)) or not isinstance(end, (int, float)):
        return None
    return Window(start=start, end=end)


# =========================================================================
# Canonical shapes
# =========================================================================
@dataclass(frozen=True)
class TrackReference:
    url: str
    label: str = DEFAULT_LABEL
    kind: str = "captions"
    is_default: bool = False

    @classmethod
    def from_upstream(cls, track: UpstreamTrack) -> "TrackReference":
        label = track.lang or DEFAULT_LABEL
        return cls(
            url=track.url,
            label=label,
            kind="thumbnails" if label == THUMBNAILS_LABEL else "captions",
            is_default=label == DEFAULT_LANGUAGE,
        )

    @property
    def is_thumbnails(self) -> bool:
        return self.kind == "thumbnails"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.url,
            "label": self.label,
            "kind": self.kind,
            "default": self.is_default,
        }


@dataclass(frozen=True)
class StreamResult:
    category: Category
    server: str
    video_url: Optional[str] = None
    tracks: Tuple[TrackReference, ...] = ()
    thumbnails: Tuple[TrackReference, ...] = ()
    intro: Window = UNKNOWN_WINDOW
    outro: Window = UNKNOWN_WINDOW

    @classmethod
    def not_available(cls, category: Category, server: str) -> "StreamResult":
        return cls(category=category, server=server)

    @property
    def available(self) -> bool:
        return self.video_url is not None

    def captions(self) -> Dict[str, str]:
        """Flat label -> url map; a repeated label keeps the last url."""
        return {track.label: track.url for track in self.tracks if not track.is_thumbnails}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.category.value,
            "link": {"file": self.video_url},
            "tracks": [t.to_dict() for t in self.tracks],
            "thumbnails": [t.to_dict() for t in self.thumbnails],
            "intro": self.intro.to_dict(),
            "outro": self.outro.to_dict(),
            "server": self.server,
        }


NOTE_LOADED = "Stream loaded"
NOTE_NOT_AVAILABLE = "Stream not available - try another server"


@dataclass(frozen=True)
class AggregatedResponse:
    sub: StreamResult
    # None: dub was never attempted, serialized as {}
    dub: Optional[StreamResult] = None

    @property
    def note(self) -> str:
        return NOTE_LOADED if self.sub.available else NOTE_NOT_AVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "data": {
                "sub": self.sub.to_dict(),
                "dub": self.dub.to_dict() if self.dub is not None else {},
            },
            "note": self.note,
        }


@dataclass(frozen=True)
class ServerSources:
    category: Category
    link: Optional[str] = None
    captions: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_result(cls, result: StreamResult) -> "ServerSources":
        if not result.available:
            return cls(category=result.category)
        return cls(category=result.category, link=result.video_url, captions=result.captions())

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.category.value, "link": self.link, "captions": dict(self.captions)}


@dataclass(frozen=True)
class ServerBundle:
    server_id: str
    sub: ServerSources
    dub: ServerSources

    @property
    def name(self) -> str:
        return self.server_id[:1].upper() + self.server_id[1:]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.server_id,
            "sources": {"sub": self.sub.to_dict(), "dub": self.dub.to_dict()},
        }


# =========================================================================
# Fetch outcome
# =========================================================================
@dataclass(frozen=True)
class Found:
    result: StreamResult


@dataclass(frozen=True)
class NotAvailable:
    reason: str
    status: Optional[int] = None


StreamOutcome = Union[Found, NotAvailable]
