"""hlsparser: Parse HLS (.m3u8) playlists into master and media playlist models."""

from .client import HlsClient
from .models import (
    ClientConfig,
    EncryptionInfo,
    MasterPlaylist,
    MediaPlaylist,
    MediaSegment,
    Playlist,
    Rendition,
    RenditionGroup,
    StreamInfo,
    Tag,
)
from .playlist_parser import (
    PlaylistFormatError,
    PlaylistParser,
    UnexpectedPlaylistError,
    parse,
    parse_master,
    parse_media,
)

__all__ = [
    "ClientConfig",
    "EncryptionInfo",
    "HlsClient",
    "MasterPlaylist",
    "MediaPlaylist",
    "MediaSegment",
    "Playlist",
    "PlaylistFormatError",
    "PlaylistParser",
    "Rendition",
    "RenditionGroup",
    "StreamInfo",
    "Tag",
    "UnexpectedPlaylistError",
    "parse",
    "parse_master",
    "parse_media",
]
