"""Parse HLS playlists into master or media playlist models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from isodate import ISO8601Error, parse_datetime

from .models import (
    URI_ATTRIBUTE,
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
from .tag_parser import parse_tag_line
from .uri import resolve_optional_uri, resolve_uri

logger = logging.getLogger(__name__)

HEADER = "#EXTM3U"


class PlaylistFormatError(ValueError):
    """Raised when content is not an HLS playlist."""


class UnexpectedPlaylistError(TypeError):
    """Raised when a master playlist was required but a media one was found, or vice versa."""


@dataclass(frozen=True)
class _SegmentState:
    """State carried from one segment to the next."""

    encryption: Optional[EncryptionInfo] = None
    program_date_time: Optional[datetime] = None
    discontinuity: bool = False


class PlaylistParser:
    """Parser for HLS master and media playlists."""

    STREAM_ATTRIBUTES = {
        "BANDWIDTH",
        "AVERAGE-BANDWIDTH",
        "CODECS",
        "RESOLUTION",
        "FRAME-RATE",
        "NAME",
        "AUDIO",
        "SUBTITLES",
        "CLOSED-CAPTIONS",
        "VIDEO-RANGE",
        URI_ATTRIBUTE,
    }
    RENDITION_ATTRIBUTES = {
        "NAME",
        "LANGUAGE",
        "DEFAULT",
        "FORCED",
        "AUTOSELECT",
        "CHARACTERISTICS",
        URI_ATTRIBUTE,
    }

    @staticmethod
    def parse(content: str, location: str) -> Playlist:
        """
        Parse playlist content.

        Args:
            content: Playlist text, starting with ``#EXTM3U``
            location: URI the playlist was loaded from; relative references
                are resolved against it

        Returns:
            A MasterPlaylist if any ``EXT-X-STREAM-INF`` tag is present,
            otherwise a MediaPlaylist
        """
        if not content:
            raise ValueError("Content cannot be empty")
        if not location:
            raise ValueError("A playlist location is required")

        tags = PlaylistParser.read_tags(content)
        version = PlaylistParser._extract_version(tags)

        if PlaylistParser._is_master(tags):
            playlist: Playlist = PlaylistParser._build_master(tags, version, location)
        else:
            playlist = PlaylistParser._build_media(tags, version, location)

        logger.debug(
            "Parsed %s from %s (%d tags)", type(playlist).__name__, location, len(tags)
        )
        return playlist

    @staticmethod
    def parse_master(content: str, location: str) -> MasterPlaylist:
        playlist = PlaylistParser.parse(content, location)
        if not isinstance(playlist, MasterPlaylist):
            raise UnexpectedPlaylistError(f"The playlist at {location} is not a master playlist")
        return playlist

    @staticmethod
    def parse_media(content: str, location: str) -> MediaPlaylist:
        playlist = PlaylistParser.parse(content, location)
        if not isinstance(playlist, MediaPlaylist):
            raise UnexpectedPlaylistError(f"The playlist at {location} is not a media playlist")
        return playlist

    # ------------------------------------------------------------------
    # Line classification
    # ------------------------------------------------------------------

    @staticmethod
    def read_tags(content: str) -> List[Tag]:
        """Split content into tags, folding URI lines into the preceding tag."""
        lines = (line.strip() for line in content.lstrip("\ufeff").splitlines())
        lines = (line for line in lines if line)

        first = next(lines, None)
        if first is None or not first.startswith(HEADER):
            raise PlaylistFormatError("Invalid playlist format: missing required header #EXTM3U")

        tags: List[Tag] = []
        for line in lines:
            if line.startswith("#"):
                tag = parse_tag_line(line)
                if tag is None:
                    logger.debug("Dropping malformed tag line %r", line)
                    continue
                tags.append(tag)
            elif tags:
                tags[-1] = tags[-1].with_uri(line)
            else:
                logger.debug("Dropping URI line without a preceding tag: %r", line)
        return tags

    # ------------------------------------------------------------------
    # Playlist assembly
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_version(tags: List[Tag]) -> int:
        tag = PlaylistParser._first(tags, "EXT-X-VERSION")
        if tag is None:
            return 1
        return PlaylistParser._safe_int(tag.raw_value, default=1)

    @staticmethod
    def _is_master(tags: List[Tag]) -> bool:
        return any(tag.name == "EXT-X-STREAM-INF" for tag in tags)

    @staticmethod
    def _build_master(tags: List[Tag], version: int, location: str) -> MasterPlaylist:
        streams = tuple(
            PlaylistParser._build_stream_info(tag, location)
            for tag in tags
            if tag.name == "EXT-X-STREAM-INF"
        )
        i_frame_streams = tuple(
            PlaylistParser._build_stream_info(tag, location)
            for tag in tags
            if tag.name == "EXT-X-I-FRAME-STREAM-INF"
        )
        rendition_groups = PlaylistParser._build_rendition_groups(
            [tag for tag in tags if tag.name == "EXT-X-MEDIA"], location
        )

        return MasterPlaylist(
            version=version,
            location=location,
            tags=tuple(tags),
            streams=streams,
            rendition_groups=rendition_groups,
            i_frame_streams=i_frame_streams,
        )

    @staticmethod
    def _build_stream_info(tag: Tag, location: str) -> StreamInfo:
        attrs = tag.attributes
        return StreamInfo(
            bandwidth=PlaylistParser._safe_int(attrs.get("BANDWIDTH"), default=0),
            uri=resolve_optional_uri(location, attrs.get(URI_ATTRIBUTE)),
            average_bandwidth=PlaylistParser._maybe_int(attrs.get("AVERAGE-BANDWIDTH")),
            codecs=attrs.get("CODECS"),
            resolution=attrs.get("RESOLUTION"),
            frame_rate=PlaylistParser._maybe_float(attrs.get("FRAME-RATE")),
            name=attrs.get("NAME"),
            audio_group=attrs.get("AUDIO"),
            subtitle_group=attrs.get("SUBTITLES"),
            cc_group=attrs.get("CLOSED-CAPTIONS"),
            video_range=attrs.get("VIDEO-RANGE"),
            attributes=PlaylistParser._residual(attrs, PlaylistParser.STREAM_ATTRIBUTES),
        )

    @staticmethod
    def _build_rendition_groups(
        media_tags: List[Tag], location: str
    ) -> Tuple[RenditionGroup, ...]:
        grouped: Dict[str, Dict[str, List[Rendition]]] = {}
        for tag in media_tags:
            media_type = tag.attributes.get("TYPE")
            group_id = tag.attributes.get("GROUP-ID")
            if media_type is None or group_id is None:
                continue
            renditions = grouped.setdefault(media_type, {}).setdefault(group_id, [])
            renditions.append(PlaylistParser._build_rendition(tag, location))

        return tuple(
            RenditionGroup(type=media_type, group_id=group_id, renditions=tuple(renditions))
            for media_type, groups in grouped.items()
            for group_id, renditions in groups.items()
        )

    @staticmethod
    def _build_rendition(tag: Tag, location: str) -> Rendition:
        attrs = tag.attributes
        return Rendition(
            name=attrs.get("NAME"),
            language=attrs.get("LANGUAGE"),
            default=PlaylistParser._is_yes(attrs.get("DEFAULT")),
            forced=PlaylistParser._is_yes(attrs.get("FORCED")),
            autoselect=PlaylistParser._is_yes(attrs.get("AUTOSELECT")),
            characteristics=attrs.get("CHARACTERISTICS"),
            uri=resolve_optional_uri(location, attrs.get(URI_ATTRIBUTE)),
            attributes=PlaylistParser._residual(attrs, PlaylistParser.RENDITION_ATTRIBUTES),
        )

    @staticmethod
    def _build_media(tags: List[Tag], version: int, location: str) -> MediaPlaylist:
        names = {tag.name for tag in tags}

        target_tag = PlaylistParser._first(tags, "EXT-X-TARGETDURATION")
        sequence_tag = PlaylistParser._first(tags, "EXT-X-MEDIA-SEQUENCE")
        type_tag = PlaylistParser._first(tags, "EXT-X-PLAYLIST-TYPE")

        target_duration = PlaylistParser._maybe_float(
            target_tag.raw_value if target_tag else None
        )
        media_sequence = PlaylistParser._safe_int(
            sequence_tag.raw_value if sequence_tag else None, default=0
        )

        return MediaPlaylist(
            version=version,
            location=location,
            tags=tuple(tags),
            target_duration=target_duration if target_duration is not None else 0.0,
            is_endless="EXT-X-ENDLIST" not in names,
            media_sequence=media_sequence,
            has_discontinuity="EXT-X-DISCONTINUITY" in names,
            playlist_type=(type_tag.raw_value or None) if type_tag else None,
            i_frames_only="EXT-X-I-FRAMES-ONLY" in names,
            segments=PlaylistParser._build_segments(tags, media_sequence, location),
        )

    # ------------------------------------------------------------------
    # Segment reconstruction
    # ------------------------------------------------------------------

    @staticmethod
    def _build_segments(
        tags: List[Tag], media_sequence: int, location: str
    ) -> Tuple[MediaSegment, ...]:
        info_positions = [idx for idx, tag in enumerate(tags) if tag.name == "EXTINF"]
        boundaries = info_positions[1:] + [len(tags)]

        segments: List[MediaSegment] = []
        state = _SegmentState()

        for start, end in zip(info_positions, boundaries):
            info_tag = tags[start]
            if URI_ATTRIBUTE not in info_tag.attributes:
                # Dropping the segment leaves no gap in sequence numbers.
                logger.warning(
                    "Skipping EXTINF without URI in %s (tag %d)", location, start
                )
                continue

            segment, state = PlaylistParser._build_segment(
                info_tag,
                tags[start + 1 : end],
                state,
                sequence_number=media_sequence + len(segments),
                location=location,
            )
            segments.append(segment)

        return tuple(segments)

    @staticmethod
    def _build_segment(
        info_tag: Tag,
        window: Iterable[Tag],
        state: _SegmentState,
        *,
        sequence_number: int,
        location: str,
    ) -> Tuple[MediaSegment, _SegmentState]:
        """Build one segment from its EXTINF tag and the tags up to the next EXTINF."""
        byte_range: Optional[str] = None
        extra_tags: List[Tag] = []

        for tag in window:
            if tag.name == URI_ATTRIBUTE:
                continue
            if tag.name == "EXT-X-DISCONTINUITY":
                state = replace(state, discontinuity=True)
            elif tag.name == "EXT-X-KEY":
                state = replace(
                    state, encryption=PlaylistParser._build_encryption(tag, location)
                )
            elif tag.name == "EXT-X-BYTERANGE":
                byte_range = tag.raw_value
            elif tag.name == "EXT-X-PROGRAM-DATE-TIME":
                program_date_time = PlaylistParser._parse_datetime(tag.raw_value)
                if program_date_time is not None:
                    state = replace(state, program_date_time=program_date_time)
            else:
                extra_tags.append(tag)

        attrs = info_tag.attributes
        segment = MediaSegment(
            uri=resolve_uri(location, attrs[URI_ATTRIBUTE]),
            sequence_number=sequence_number,
            duration=PlaylistParser._maybe_float(attrs.get("DURATION")) or 0.0,
            title=attrs.get("TITLE"),
            has_discontinuity=state.discontinuity,
            byte_range=byte_range,
            encryption=state.encryption,
            program_date_time=state.program_date_time,
            tags=tuple(extra_tags),
        )
        return segment, replace(state, discontinuity=False)

    @staticmethod
    def _build_encryption(tag: Tag, location: str) -> EncryptionInfo:
        attrs = tag.attributes
        return EncryptionInfo(
            method=attrs.get("METHOD"),
            key_uri=resolve_optional_uri(location, attrs.get(URI_ATTRIBUTE)),
            iv=attrs.get("IV"),
            key_format=attrs.get("KEYFORMAT"),
            key_format_versions=attrs.get("KEYFORMATVERSIONS"),
        )

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------

    @staticmethod
    def _first(tags: List[Tag], name: str) -> Optional[Tag]:
        return next((tag for tag in tags if tag.name == name), None)

    @staticmethod
    def _residual(attributes: Dict[str, str], known: set[str]) -> Dict[str, str]:
        return {key: value for key, value in attributes.items() if key not in known}

    @staticmethod
    def _is_yes(value: Optional[str]) -> bool:
        return value is not None and value.upper() == "YES"

    @staticmethod
    def _safe_int(value: Optional[str], default: int = 0) -> int:
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _maybe_int(value: Optional[str]) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _maybe_float(value: Optional[str]) -> Optional[float]:
        if value in (None, ""):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return parse_datetime(value.strip())
        except (ISO8601Error, ValueError):
            return None


def parse(content: str, location: str) -> Playlist:
    """Parse ``content`` loaded from ``location`` into a playlist model."""
    return PlaylistParser.parse(content, location)


def parse_master(content: str, location: str) -> MasterPlaylist:
    """Parse ``content`` and require a master playlist."""
    return PlaylistParser.parse_master(content, location)


def parse_media(content: str, location: str) -> MediaPlaylist:
    """Parse ``content`` and require a media playlist."""
    return PlaylistParser.parse_media(content, location)
