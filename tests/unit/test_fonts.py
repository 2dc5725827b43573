"""Unit tests for @font-face rewriting."""

import pytest

from vitae.contexts.packaging.exceptions import AssetReadError
from vitae.contexts.packaging.fonts import (
    decode_data_uri,
    embed_font,
    encode_data_uri,
    external_font_urls,
    source_format,
    source_url,
    strip_legacy_sources,
)
from vitae.utils.css_parser import parse_css, serialize_css

FONT_AWESOME_FACE = (
    "@font-face{font-family:'FontAwesome';"
    "src:url('../fonts/fontawesome-webfont.eot?v=4.7.0');"
    "src:url('../fonts/fontawesome-webfont.eot?#iefix&v=4.7.0') format('embedded-opentype'),"
    "url('../fonts/fontawesome-webfont.woff2?v=4.7.0') format('woff2'),"
    "url('../fonts/fontawesome-webfont.woff?v=4.7.0') format('woff'),"
    "url('../fonts/fontawesome-webfont.ttf?v=4.7.0') format('truetype'),"
    "url('../fonts/fontawesome-webfont.svg?v=4.7.0#fontawesomeregular') format('svg');"
    "font-weight:normal;font-style:normal}"
)

LEGACY_FRAGMENTS = ["embedded-opentype", "format('woff')", "truetype", "format('svg')", ".eot", ".ttf"]


@pytest.fixture
def font_file(tmp_path):
    path = tmp_path / "FontAwesome-subset.woff2"
    path.write_bytes(b"wOF2\x00\x01\x00\x00subset-bytes\xff")
    return path


@pytest.mark.unit
@pytest.mark.parametrize(
    "entry,url,fmt",
    [
        ("url('a.woff2?v=1') format('woff2')", "a.woff2?v=1", "woff2"),
        ('url("a.eot?#iefix") format("embedded-opentype")', "a.eot?#iefix", "embedded-opentype"),
        ("url(a.ttf)", "a.ttf", "truetype"),
        ("url(a.eot?v=4.7.0)", "a.eot?v=4.7.0", "embedded-opentype"),
        ("local('Font Awesome')", None, None),
    ],
)
def test_source_url_and_format(entry, url, fmt):
    assert source_url(entry) == url
    assert source_format(entry) == fmt


@pytest.mark.unit
def test_data_uri_round_trip(font_file):
    uri = encode_data_uri(font_file)

    assert uri.startswith("data:font/woff2;base64,")
    assert decode_data_uri(uri) == font_file.read_bytes()


@pytest.mark.unit
def test_encode_missing_file_raises(tmp_path):
    with pytest.raises(AssetReadError):
        encode_data_uri(tmp_path / "missing.woff2")


@pytest.mark.unit
def test_strip_legacy_sources():
    sheet = parse_css(FONT_AWESOME_FACE)

    removed = strip_legacy_sources(sheet)
    css = serialize_css(sheet)

    assert removed == 5
    assert "src:url('../fonts/fontawesome-webfont.woff2?v=4.7.0') format('woff2')" in css
    assert css.count("src:") == 1
    for fragment in LEGACY_FRAGMENTS:
        assert fragment not in css
    assert "font-weight:normal" in css


@pytest.mark.unit
def test_embed_font_replaces_woff2_url(font_file):
    sheet = parse_css(FONT_AWESOME_FACE)
    strip_legacy_sources(sheet)

    replaced = embed_font(sheet, font_file, match_name="fontawesome-webfont.woff2")
    css = serialize_css(sheet)

    assert replaced == 1
    assert "fontawesome-webfont.woff2" not in css
    uri = css.split("url(", 1)[1].split(")", 1)[0]
    assert decode_data_uri(uri) == font_file.read_bytes()


@pytest.mark.unit
def test_embed_font_respects_match_name(font_file):
    sheet = parse_css("@font-face{font-family:Other;src:url(other.woff2) format('woff2')}")

    assert embed_font(sheet, font_file, match_name="fontawesome-webfont.woff2") == 0
    assert "url(other.woff2)" in serialize_css(sheet)


@pytest.mark.unit
def test_embed_font_not_read_without_font_face(tmp_path):
    sheet = parse_css(".a{color:red}")

    assert embed_font(sheet, tmp_path / "missing.woff2") == 0


@pytest.mark.unit
def test_external_font_urls(font_file):
    sheet = parse_css(
        "@font-face{font-family:A;src:local('A'),url(a.woff2) format('woff2')}"
        "@font-face{font-family:B;src:url(\"b.woff2\") format('woff2')}"
        ".a{background:url(bg.png)}"
    )
    embed_font(sheet, font_file, match_name="a.woff2")

    assert external_font_urls(sheet) == ["b.woff2"]
