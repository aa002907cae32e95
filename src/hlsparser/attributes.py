"""Tokenizer for HLS ``KEY=VALUE`` attribute lists."""

from __future__ import annotations

import re
from typing import Dict, Optional

ATTRIBUTE_PATTERN = re.compile(r'([A-Z0-9-]+)=(?:"([^"]*)"|([^,"]*))(?:,|$)')


def parse_attributes(value: Optional[str]) -> Dict[str, str]:
    """
    Parse an attribute list such as ``BANDWIDTH=1280000,CODECS="a,b"``.

    Quoted values keep their commas. Fragments without ``=`` are skipped and
    the last occurrence of a duplicated key wins.

    Args:
        value: Raw attribute list, possibly empty

    Returns:
        Mapping of attribute names to unquoted values
    """
    attributes: Dict[str, str] = {}
    if not value:
        return attributes

    for match in ATTRIBUTE_PATTERN.finditer(value):
        key, quoted, plain = match.groups()
        attributes[key] = quoted if quoted is not None else plain
    return attributes
