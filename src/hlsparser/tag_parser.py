"""Parsers turning playlist tag lines into :class:`Tag` values."""

from __future__ import annotations

import re
from typing import FrozenSet, Optional, Protocol, Tuple

from .attributes import parse_attributes
from .models import Tag

TAG_PATTERN = re.compile(r"^#([^:]+)(?::(.*))?$")
DURATION_PATTERN = re.compile(r"^([\d.]+)(?:,(.*))?$")

ATTRIBUTE_TAGS: FrozenSet[str] = frozenset(
    {
        "EXT-X-MEDIA",
        "EXT-X-I-FRAME-STREAM-INF",
        "EXT-X-SESSION-KEY",
        "EXT-X-SESSION-DATA",
        "EXT-X-KEY",
        "EXT-X-MAP",
        "EXT-X-DATERANGE",
    }
)


class TagParser(Protocol):
    """Interface for parsing one kind of tag line."""

    def can_parse(self, tag_name: str) -> bool:
        """Return True if this parser handles ``tag_name``."""

    def parse(self, line: str) -> Optional[Tag]:
        """Parse ``line``; return None when it is not a well-formed tag."""


def split_tag_line(line: str) -> Optional[Tuple[str, Optional[str]]]:
    """Split ``#NAME[:VALUE]`` into its name and raw value."""
    match = TAG_PATTERN.match(line)
    if not match:
        return None
    return match.group(1), match.group(2)


def tag_name_of(line: str) -> str:
    return line[1:].split(":", 1)[0]


class _NamedTagParser:
    """Base for parsers bound to exactly one tag name."""

    tag_name = ""

    def can_parse(self, tag_name: str) -> bool:
        return tag_name == self.tag_name

    def _split(self, line: str) -> Optional[Tuple[str, Optional[str]]]:
        parts = split_tag_line(line)
        if parts is None or parts[0] != self.tag_name:
            return None
        return parts


class VersionTagParser(_NamedTagParser):
    """Keeps the ``EXT-X-VERSION`` value verbatim."""

    tag_name = "EXT-X-VERSION"

    def parse(self, line: str) -> Optional[Tag]:
        parts = self._split(line)
        if parts is None:
            return None
        name, raw_value = parts
        return Tag(name, raw_value)


class StreamInfTagParser(_NamedTagParser):
    """Tokenizes the attribute list of ``EXT-X-STREAM-INF``."""

    tag_name = "EXT-X-STREAM-INF"

    def parse(self, line: str) -> Optional[Tag]:
        parts = self._split(line)
        if parts is None:
            return None
        name, raw_value = parts
        return Tag(name, raw_value, parse_attributes(raw_value))


class InfoTagParser(_NamedTagParser):
    """Extracts ``DURATION`` and ``TITLE`` from ``EXTINF:<duration>[,<title>]``."""

    tag_name = "EXTINF"

    def parse(self, line: str) -> Optional[Tag]:
        parts = self._split(line)
        if parts is None:
            return None
        name, raw_value = parts

        attributes = {}
        match = DURATION_PATTERN.match(raw_value or "")
        if match:
            duration_str, title = match.groups()
            try:
                attributes["DURATION"] = str(float(duration_str))
            except ValueError:
                pass
            if title:
                attributes["TITLE"] = title
        return Tag(name, raw_value, attributes)


class GeneralTagParser:
    """Fallback parser accepting any tag name."""

    def can_parse(self, tag_name: str) -> bool:
        return True

    def parse(self, line: str) -> Optional[Tag]:
        parts = split_tag_line(line)
        if parts is None:
            return None
        name, raw_value = parts
        if name in ATTRIBUTE_TAGS:
            return Tag(name, raw_value, parse_attributes(raw_value))
        return Tag(name, raw_value)


# Priority order; the catch-all must stay last.
TAG_PARSERS: Tuple[TagParser, ...] = (
    VersionTagParser(),
    StreamInfTagParser(),
    InfoTagParser(),
    GeneralTagParser(),
)


def parse_tag_line(line: str) -> Optional[Tag]:
    """Run ``line`` through :data:`TAG_PARSERS`; the first Tag produced wins."""
    tag_name = tag_name_of(line)
    for parser in TAG_PARSERS:
        if not parser.can_parse(tag_name):
            continue
        tag = parser.parse(line)
        if tag is not None:
            return tag
    return None
