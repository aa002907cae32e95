"""Dataclasses describing parsed HLS playlists."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

URI_ATTRIBUTE = "URI"


def _read_only(attributes: Mapping[str, str]) -> Mapping[str, str]:
    if isinstance(attributes, MappingProxyType):
        return attributes
    return MappingProxyType(dict(attributes))


@dataclass(frozen=True)
class Tag:
    """A single ``#NAME[:VALUE]`` directive line.

    ``attributes`` is a read-only mapping, shared by every model holding the tag.
    """

    name: str
    raw_value: Optional[str] = None
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _read_only(self.attributes))

    def with_uri(self, uri: str) -> "Tag":
        """Return a copy carrying ``uri`` under the synthetic URI attribute."""
        attributes = dict(self.attributes)
        attributes[URI_ATTRIBUTE] = uri
        return replace(self, attributes=attributes)


@dataclass(frozen=True)
class EncryptionInfo:
    """Key information announced by an ``EXT-X-KEY`` tag."""

    method: Optional[str]
    key_uri: Optional[str] = None
    iv: Optional[str] = None
    key_format: Optional[str] = None
    key_format_versions: Optional[str] = None


@dataclass(frozen=True)
class MediaSegment:
    """One media segment of a media playlist."""

    uri: str
    sequence_number: int
    duration: float = 0.0
    title: Optional[str] = None
    has_discontinuity: bool = False
    byte_range: Optional[str] = None
    encryption: Optional[EncryptionInfo] = None
    program_date_time: Optional[datetime] = None
    tags: Tuple[Tag, ...] = ()


@dataclass(frozen=True)
class StreamInfo:
    """A variant stream announced by ``EXT-X-STREAM-INF``."""

    bandwidth: int
    uri: Optional[str] = None
    average_bandwidth: Optional[int] = None
    codecs: Optional[str] = None
    resolution: Optional[str] = None
    frame_rate: Optional[float] = None
    name: Optional[str] = None
    audio_group: Optional[str] = None
    subtitle_group: Optional[str] = None
    cc_group: Optional[str] = None
    video_range: Optional[str] = None
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _read_only(self.attributes))


@dataclass(frozen=True)
class Rendition:
    """An alternate rendition announced by ``EXT-X-MEDIA``."""

    name: Optional[str] = None
    language: Optional[str] = None
    default: bool = False
    forced: bool = False
    autoselect: bool = False
    characteristics: Optional[str] = None
    uri: Optional[str] = None
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _read_only(self.attributes))


@dataclass(frozen=True)
class RenditionGroup:
    """Renditions sharing one ``(TYPE, GROUP-ID)`` pair."""

    type: str
    group_id: str
    renditions: Tuple[Rendition, ...] = ()


@dataclass(frozen=True)
class Playlist:
    """Data shared by master and media playlists."""

    version: int
    location: str
    tags: Tuple[Tag, ...] = ()


@dataclass(frozen=True)
class MasterPlaylist(Playlist):
    """A playlist listing variant streams and rendition groups."""

    streams: Tuple[StreamInfo, ...] = ()
    rendition_groups: Tuple[RenditionGroup, ...] = ()
    i_frame_streams: Tuple[StreamInfo, ...] = ()


@dataclass(frozen=True)
class MediaPlaylist(Playlist):
    """A playlist listing the media segments of a single rendition."""

    target_duration: float = 0.0
    is_endless: bool = True
    media_sequence: int = 0
    has_discontinuity: bool = False
    playlist_type: Optional[str] = None
    i_frames_only: bool = False
    segments: Tuple[MediaSegment, ...] = ()

    @property
    def total_duration(self) -> float:
        return sum(segment.duration for segment in self.segments)


@dataclass
class ClientConfig:
    """Configuration for :class:`hlsparser.client.HlsClient`."""

    timeout: float = 30.0
    headers: Dict[str, str] | None = None
    user_agent: Optional[str] = None
