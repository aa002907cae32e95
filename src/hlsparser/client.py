"""Async HTTP client that fetches and parses HLS playlists."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import aiohttp

from .models import ClientConfig, MasterPlaylist, MediaPlaylist, MediaSegment, Playlist
from .playlist_parser import PlaylistParser, UnexpectedPlaylistError
from .uri import file_name

logger = logging.getLogger(__name__)


class HlsClient:
    """Fetches playlists and segments over HTTP."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        config: Optional[ClientConfig] = None,
    ):
        """
        Initialize the client.

        Args:
            session: Optional aiohttp session. If None, one is created on enter
                and closed on exit.
            config: Timeout and header settings for owned sessions and requests
        """
        self.session = session
        self.config = config or ClientConfig()
        self._own_session = session is None

    async def __aenter__(self):
        if self._own_session:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_session and self.session:
            await self.session.close()
            self.session = None

    def _headers(self) -> Dict[str, str]:
        headers = dict(self.config.headers or {})
        if self.config.user_agent:
            headers["User-Agent"] = self.config.user_agent
        return headers

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("Session not initialized. Use 'async with' context manager.")
        return self.session

    async def fetch_text(self, uri: str) -> str:
        """Download ``uri`` and return its body as text."""
        if not uri:
            raise ValueError("A URI is required")
        session = self._require_session()

        logger.debug("Fetching playlist %s", uri)
        try:
            async with session.get(uri, headers=self._headers()) as response:
                response.raise_for_status()
                return await response.text()
        except aiohttp.ClientError as exc:
            logger.error("Playlist download from %s failed: %s", uri, exc)
            raise

    async def fetch_bytes(self, uri: str) -> bytes:
        """Download ``uri`` and return its raw body."""
        if not uri:
            raise ValueError("A URI is required")
        session = self._require_session()

        logger.debug("Fetching segment %s", uri)
        try:
            async with session.get(uri, headers=self._headers()) as response:
                response.raise_for_status()
                return await response.read()
        except aiohttp.ClientError as exc:
            logger.error("Segment download from %s failed: %s", uri, exc)
            raise

    async def get_playlist(self, uri: str) -> Playlist:
        content = await self.fetch_text(uri)
        return PlaylistParser.parse(content, uri)

    async def get_master_playlist(self, uri: str) -> MasterPlaylist:
        playlist = await self.get_playlist(uri)
        if not isinstance(playlist, MasterPlaylist):
            raise UnexpectedPlaylistError(f"The playlist at {uri} is not a master playlist")
        return playlist

    async def get_media_playlist(self, uri: str) -> MediaPlaylist:
        playlist = await self.get_playlist(uri)
        if not isinstance(playlist, MediaPlaylist):
            raise UnexpectedPlaylistError(f"The playlist at {uri} is not a media playlist")
        return playlist

    async def get_segment(self, segment: MediaSegment) -> bytes:
        if segment is None:
            raise ValueError("A segment is required")
        if not segment.uri:
            raise ValueError("Segment URI cannot be empty")
        return await self.fetch_bytes(segment.uri)

    async def download_segment(self, segment: MediaSegment, output_dir: Path) -> Path:
        """
        Download a segment into ``output_dir``.

        The file is named ``<sequence>_<name>`` after the last path component
        of the segment URI, so byte ranges of one resource land in separate
        files. URIs without a usable name fall back to ``segment_<sequence>.ts``.

        Returns:
            Path of the written file
        """
        content = await self.get_segment(segment)
        name = file_name(segment.uri)
        if name in ("", ".", ".."):
            name = f"segment_{segment.sequence_number}.ts"
        else:
            name = f"{segment.sequence_number}_{name}"
        output_path = output_dir / name
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(content)
        return output_path
