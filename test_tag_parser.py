#!/usr/bin/env python3
"""Test the attribute tokenizer and per-tag parsers."""

import sys

import pytest

from hlsparser.attributes import parse_attributes
from hlsparser.tag_parser import (
    GeneralTagParser,
    InfoTagParser,
    StreamInfTagParser,
    VersionTagParser,
    parse_tag_line,
)


def test_attributes_keep_commas_in_quoted_values():
    attrs = parse_attributes('BANDWIDTH=1280000,RESOLUTION=720x480,CODECS="avc1.66.30,mp4a.40.2"')

    assert attrs == {
        "BANDWIDTH": "1280000",
        "RESOLUTION": "720x480",
        "CODECS": "avc1.66.30,mp4a.40.2",
    }


def test_attributes_last_duplicate_wins():
    assert parse_attributes("NAME=a,NAME=b") == {"NAME": "b"}


def test_attributes_skip_malformed_fragments():
    attrs = parse_attributes("garbage,TYPE=AUDIO,,GROUP-ID=\"aac\"")

    assert attrs == {"TYPE": "AUDIO", "GROUP-ID": "aac"}


@pytest.mark.parametrize("value", [None, ""])
def test_attributes_empty_input(value):
    assert parse_attributes(value) == {}


def test_version_parser_keeps_raw_value():
    parser = VersionTagParser()
    tag = parser.parse("#EXT-X-VERSION:4")

    assert parser.can_parse("EXT-X-VERSION")
    assert not parser.can_parse("EXTINF")
    assert tag.name == "EXT-X-VERSION"
    assert tag.raw_value == "4"
    assert tag.attributes == {}


def test_stream_inf_parser_tokenizes():
    tag = StreamInfTagParser().parse("#EXT-X-STREAM-INF:BANDWIDTH=640000,AUDIO=\"aac\"")

    assert tag.attributes == {"BANDWIDTH": "640000", "AUDIO": "aac"}


def test_info_parser_extracts_duration_and_title():
    tag = InfoTagParser().parse("#EXTINF:9.009,Opening credits")

    assert tag.attributes["DURATION"] == "9.009"
    assert tag.attributes["TITLE"] == "Opening credits"


def test_info_parser_omits_empty_title():
    tag = InfoTagParser().parse("#EXTINF:10,")

    assert tag.attributes == {"DURATION": "10.0"}


def test_info_parser_tolerates_bad_duration():
    tag = InfoTagParser().parse("#EXTINF:abc,title")

    assert tag.name == "EXTINF"
    assert tag.attributes == {}


def test_named_parser_rejects_other_tag():
    assert InfoTagParser().parse("#EXT-X-VERSION:3") is None


def test_general_parser_tokenizes_allow_listed_tags():
    tag = GeneralTagParser().parse('#EXT-X-KEY:METHOD=AES-128,URI="key.bin"')

    assert tag.attributes == {"METHOD": "AES-128", "URI": "key.bin"}


def test_general_parser_keeps_raw_value_for_other_tags():
    tag = GeneralTagParser().parse("#EXT-X-PROGRAM-DATE-TIME:2024-01-01T00:00:00Z")

    assert tag.name == "EXT-X-PROGRAM-DATE-TIME"
    assert tag.raw_value == "2024-01-01T00:00:00Z"
    assert tag.attributes == {}


def test_tag_without_value():
    tag = parse_tag_line("#EXT-X-ENDLIST")

    assert tag.name == "EXT-X-ENDLIST"
    assert tag.raw_value is None


def test_malformed_tag_line_yields_nothing():
    assert parse_tag_line("#") is None


def test_registry_prefers_specific_parser():
    tag = parse_tag_line("#EXT-X-STREAM-INF:BANDWIDTH=1")

    assert tag.attributes == {"BANDWIDTH": "1"}


if __name__ == "__main__":
    sys.exit(pytest.main([__file__]))
