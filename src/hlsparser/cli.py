"""Command-line interface for hlsparser."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from .client import HlsClient
from .models import ClientConfig, MasterPlaylist, MediaPlaylist, Playlist
from .playlist_parser import PlaylistParser


def _parse_headers(header) -> dict:
    headers = {}
    for header_entry in header:
        if ":" not in header_entry:
            raise click.BadParameter("Headers must be in the form Name:Value")
        name, value = header_entry.split(":", 1)
        headers[name.strip()] = value.strip()
    return headers


def echo_master(playlist: MasterPlaylist) -> None:
    click.echo("MASTER PLAYLIST")
    click.echo(f"Version: {playlist.version}")
    click.echo(f"URI: {playlist.location}")
    click.echo()
    click.echo(f"Stream Variants: {len(playlist.streams)}")

    streams = sorted(playlist.streams, key=lambda stream: stream.bandwidth, reverse=True)
    for index, stream in enumerate(streams, start=1):
        click.echo()
        click.echo(f"  Stream #{index}:")
        click.echo(f"  Resolution: {stream.resolution}")
        click.echo(f"  Bandwidth: {stream.bandwidth // 1000} kbps")
        if stream.average_bandwidth is not None:
            click.echo(f"  Average Bandwidth: {stream.average_bandwidth // 1000} kbps")
        click.echo(f"  Codecs: {stream.codecs}")
        if stream.frame_rate is not None:
            click.echo(f"  Frame Rate: {stream.frame_rate} fps")
        if stream.uri:
            click.echo(f"  URI: {stream.uri}")

    if playlist.rendition_groups:
        click.echo()
        click.echo(f"Rendition Groups: {len(playlist.rendition_groups)}")
        for group in playlist.rendition_groups:
            click.echo()
            click.echo(f"  Group Type: {group.type}")
            click.echo(f"  Group ID: {group.group_id}")
            click.echo(f"  Renditions: {len(group.renditions)}")
            for rendition in group.renditions:
                click.echo(f"    Name: {rendition.name}")
                if rendition.language:
                    click.echo(f"    Language: {rendition.language}")
                click.echo(f"    Default: {rendition.default}")
                click.echo(f"    Autoselect: {rendition.autoselect}")

    if playlist.i_frame_streams:
        click.echo()
        click.echo(f"I-Frame Streams: {len(playlist.i_frame_streams)}")


def echo_media(playlist: MediaPlaylist, limit: int = 10) -> None:
    click.echo("MEDIA PLAYLIST")
    click.echo(f"Version: {playlist.version}")
    click.echo(f"URI: {playlist.location}")
    click.echo(f"Target Duration: {playlist.target_duration} seconds")
    click.echo(f"Media Sequence: {playlist.media_sequence}")
    click.echo(f"Endless: {playlist.is_endless}")
    if playlist.playlist_type:
        click.echo(f"Playlist Type: {playlist.playlist_type}")
    click.echo(f"Has Discontinuity: {playlist.has_discontinuity}")
    click.echo()
    click.echo(f"Segments: {len(playlist.segments)} ({playlist.total_duration:.3f} seconds)")

    for index, segment in enumerate(playlist.segments[:limit], start=1):
        click.echo()
        click.echo(f"  Segment #{index}:")
        click.echo(f"  Duration: {segment.duration} seconds")
        click.echo(f"  Sequence: {segment.sequence_number}")
        click.echo(f"  URI: {segment.uri}")
        if segment.has_discontinuity:
            click.echo("  Has Discontinuity: True")
        if segment.byte_range:
            click.echo(f"  Byte Range: {segment.byte_range}")
        if segment.program_date_time:
            click.echo(f"  Program Date Time: {segment.program_date_time.isoformat()}")
        if segment.encryption:
            click.echo(f"  Encryption Method: {segment.encryption.method}")
            click.echo(f"  Key URI: {segment.encryption.key_uri}")

    remaining = len(playlist.segments) - limit
    if remaining > 0:
        click.echo()
        click.echo(f"  ... {remaining} more segments ...")


def echo_playlist(playlist: Playlist, limit: int = 10) -> None:
    if isinstance(playlist, MasterPlaylist):
        echo_master(playlist)
    elif isinstance(playlist, MediaPlaylist):
        echo_media(playlist, limit=limit)

    click.echo()
    click.echo("Tags:")
    for tag in playlist.tags:
        click.echo(f"  {tag.name}: {tag.raw_value}")


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """HLS playlist parser CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command()
@click.argument("url")
@click.option("--header", multiple=True, help="Additional HTTP header as Name:Value")
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout in seconds")
@click.option("--segments", "limit", type=int, default=10, show_default=True, help="Number of segments to display")
def inspect(url, header, timeout, limit):
    """Fetch a playlist from URL and display it."""
    config = ClientConfig(timeout=timeout, headers=_parse_headers(header))

    async def _run():
        async with HlsClient(config=config) as client:
            return await client.get_playlist(url)

    try:
        playlist = asyncio.run(_run())
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    echo_playlist(playlist, limit=limit)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--location", help="URI used to resolve relative references (defaults to the file URI)")
@click.option("--segments", "limit", type=int, default=10, show_default=True, help="Number of segments to display")
def show(path, location, limit):
    """Parse a playlist file from disk and display it."""
    try:
        content = path.read_text(encoding="utf-8")
        playlist = PlaylistParser.parse(content, location or path.resolve().as_uri())
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    echo_playlist(playlist, limit=limit)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
