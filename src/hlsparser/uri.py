"""Helpers for resolving URIs found in playlists."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse


def resolve_uri(base: str, reference: Optional[str]) -> str:
    """Resolve ``reference`` against ``base``; an empty reference yields ``base``."""
    if not base:
        raise ValueError("A base URI is required")
    if not reference:
        return base
    if urlparse(reference).scheme:
        return reference
    return urljoin(base, reference)


def resolve_optional_uri(base: str, reference: Optional[str]) -> Optional[str]:
    """Like :func:`resolve_uri`, but an empty reference yields ``None``."""
    if not reference:
        return None
    return resolve_uri(base, reference)


def base_uri(uri: str) -> str:
    if not uri:
        raise ValueError("A URI is required")
    parsed = urlparse(uri)
    path = parsed.path
    if path.endswith("/"):
        return parsed._replace(query="", fragment="").geturl()
    if "/" not in path:
        return parsed._replace(path="/", query="", fragment="").geturl()
    return parsed._replace(path=path.rsplit("/", 1)[0] + "/", query="", fragment="").geturl()


def file_name(uri: str) -> str:
    if not uri:
        raise ValueError("A URI is required")
    path = urlparse(uri).path
    if path in ("", "/"):
        return ""
    return path.rstrip("/").rsplit("/", 1)[-1]
