#!/usr/bin/env python3
"""Test the hlsparser command-line interface."""

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from hlsparser import HlsClient
from hlsparser.cli import cli

MEDIA = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-TARGETDURATION:6
#EXT-X-PLAYLIST-TYPE:VOD
#EXTINF:6,
seg0.ts
#EXT-X-KEY:METHOD=AES-128,URI="key.bin"
#EXTINF:6,
seg1.ts
#EXTINF:6,
seg2.ts
#EXT-X-ENDLIST
"""

MASTER = """#EXTM3U
#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="aac",NAME="English",LANGUAGE="en",DEFAULT=YES
#EXT-X-STREAM-INF:BANDWIDTH=640000,RESOLUTION=640x360,CODECS="avc1.4d401e"
low.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2560000,RESOLUTION=1280x720,CODECS="avc1.4d401f"
high.m3u8
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "playlist.m3u8"
    path.write_text(content, encoding="utf-8")
    return path


def test_show_media_playlist(tmp_path):
    path = _write(tmp_path, MEDIA)

    result = CliRunner().invoke(
        cli, ["show", str(path), "--location", "http://example.com/vod/index.m3u8", "--segments", "2"]
    )

    assert result.exit_code == 0, result.output
    assert "MEDIA PLAYLIST" in result.output
    assert "Endless: False" in result.output
    assert "Playlist Type: VOD" in result.output
    assert "URI: http://example.com/vod/seg0.ts" in result.output
    assert "Key URI: http://example.com/vod/key.bin" in result.output
    assert "... 1 more segments ..." in result.output


def test_show_master_playlist_sorted_by_bandwidth(tmp_path):
    path = _write(tmp_path, MASTER)

    result = CliRunner().invoke(cli, ["show", str(path)])

    assert result.exit_code == 0, result.output
    assert "MASTER PLAYLIST" in result.output
    assert result.output.index("Bandwidth: 2560 kbps") < result.output.index("Bandwidth: 640 kbps")
    assert "Group ID: aac" in result.output
    assert path.resolve().as_uri().rsplit("/", 1)[0] + "/low.m3u8" in result.output


def test_show_invalid_playlist_exits_with_error(tmp_path):
    path = _write(tmp_path, "This is not a valid playlist")

    result = CliRunner().invoke(cli, ["show", str(path)])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_inspect_rejects_malformed_header():
    result = CliRunner().invoke(cli, ["inspect", "http://example.com/x.m3u8", "--header", "nocolon"])

    assert result.exit_code != 0
    assert "Name:Value" in result.output


class _Response:
    def __init__(self, body: str):
        self._body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    def raise_for_status(self):
        return None

    async def text(self):
        return self._body


class _Session:
    """Serves one playlist body and records every requested URL."""

    def __init__(self, body: str):
        self.body = body
        self.requested = []

    def get(self, url, headers=None):
        self.requested.append(url)
        return _Response(self.body)


def _patch_client(monkeypatch, session: _Session) -> None:
    monkeypatch.setattr(
        "hlsparser.cli.HlsClient", lambda config=None: HlsClient(session=session, config=config)
    )


def test_inspect_media_playlist_fetches_once(monkeypatch):
    session = _Session(MEDIA)
    _patch_client(monkeypatch, session)

    result = CliRunner().invoke(
        cli, ["inspect", "http://cdn.test/live.m3u8", "--header", "Referer: http://site.test/"]
    )

    assert result.exit_code == 0, result.output
    assert "MEDIA PLAYLIST" in result.output
    assert "URI: http://cdn.test/seg0.ts" in result.output
    assert session.requested == ["http://cdn.test/live.m3u8"]


def test_inspect_master_playlist(monkeypatch):
    session = _Session(MASTER)
    _patch_client(monkeypatch, session)

    result = CliRunner().invoke(cli, ["inspect", "http://cdn.test/master.m3u8"])

    assert result.exit_code == 0, result.output
    assert "MASTER PLAYLIST" in result.output
    assert "http://cdn.test/high.m3u8" in result.output
    assert session.requested == ["http://cdn.test/master.m3u8"]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__]))
