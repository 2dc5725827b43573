"""Unit tests for the single-file packager (renderer output already captured)."""

import os
import re
import stat
import sys

import pytest

from vitae.contexts.packaging import (
    AssetReadError,
    ExternalFontError,
    MissingMarkerError,
    MissingPlaceholderError,
    package_html,
)
from vitae.contexts.packaging.fonts import decode_data_uri
from vitae.contexts.packaging.packager import extract_licenses, find_stylesheet, format_licenses
from vitae.utils.css_parser import parse_css

PLACEHOLDER = "*Please see the attached CSS file*"

SITE_CSS = """/*! normalize.css v8.0.1 | MIT License | github.com/necolas/normalize.css */
@font-face {
  font-family: 'FontAwesome';
  src: url('../fonts/fontawesome-webfont.eot?v=4.7.0');
  src: url('../fonts/fontawesome-webfont.eot?#iefix&v=4.7.0') format('embedded-opentype'),
       url('../fonts/fontawesome-webfont.woff2?v=4.7.0') format('woff2'),
       url('../fonts/fontawesome-webfont.woff?v=4.7.0') format('woff'),
       url('../fonts/fontawesome-webfont.ttf?v=4.7.0') format('truetype'),
       url('../fonts/fontawesome-webfont.svg?v=4.7.0#fontawesomeregular') format('svg');
}
/*!
 *  Font Awesome 4.7.0 by @davegandy - http://fontawesome.io
 */
.fa { display: inline-block; font: normal normal normal 14px/1 FontAwesome; }
.experience h2 { color: #1a1a1a; }
.unused-widget { color: red; }
@media print { .no-print { display: none; } }
"""


def rendered_page(marker="<!--style:public/dist/global.min.css-->", placeholder=PLACEHOLDER):
    return (
        "<!DOCTYPE html><html><head><title>CV</title>"
        f"{marker}"
        "</head><body>"
        '<section class="experience"><h2><i class="fa"></i> Experience</h2></section>'
        f"<footer><pre>{placeholder}</pre></footer>"
        "</body></html>"
    )


@pytest.fixture
def site(config):
    css_path = config.dist_dir / "global.min.css"
    css_path.write_text(SITE_CSS, encoding="utf-8")
    config.optimized_font_file.write_bytes(b"wOF2-subset-\x00\x01\x02")
    return config


@pytest.mark.unit
class TestPackageHtml:
    def test_style_inlined(self, site):
        result = package_html(site, rendered_page())
        page = site.output_html.read_text(encoding="utf-8")

        assert result.output_path == site.output_html
        assert "<!--style:" not in page
        assert "<link" not in page
        style = re.search(r"<style>(.*?)</style>", page, re.DOTALL).group(1)
        assert ".experience h2{color:#1a1a1a}" in style
        assert "\n" not in style

    def test_unused_rules_purged(self, site):
        result = package_html(site, rendered_page())
        page = site.output_html.read_text(encoding="utf-8")

        assert "unused-widget" not in page
        assert "no-print" not in page
        assert result.rules_removed == 2
        assert result.css_bytes_after < result.css_bytes_before

    def test_licenses_moved_into_page(self, site):
        result = package_html(site, rendered_page())
        page = site.output_html.read_text(encoding="utf-8")
        style = re.search(r"<style>(.*?)</style>", page, re.DOTALL).group(1)

        assert PLACEHOLDER not in page
        assert "normalize.css v8.0.1 | MIT License" in page
        assert "Font Awesome 4.7.0 by @davegandy" in page
        assert "/*" not in style
        assert "normalize.css" not in style
        assert len(result.licenses) == 2

    def test_font_embedded_and_legacy_formats_removed(self, site):
        result = package_html(site, rendered_page())
        page = site.output_html.read_text(encoding="utf-8")

        assert result.font_embedded
        for fragment in ["embedded-opentype", "format('woff')", "truetype", "format('svg')", ".eot", ".ttf"]:
            assert fragment not in page
        uri = re.search(r"url\((data:font/woff2;base64,[^)]+)\)", page).group(1)
        assert decode_data_uri(uri) == site.optimized_font_file.read_bytes()

    def test_minimal_page(self, config):
        """One license comment and one rule yield an inline style and the license text."""
        (config.project_root / "a.css").write_text("/*! Copyright Jane */\n.x { color: red; }", encoding="utf-8")
        html = f'<html><head><!--style:a.css--></head><body><p class="x">{PLACEHOLDER}</p></body></html>'

        package_html(config, html)
        page = config.output_html.read_text(encoding="utf-8")

        assert "<style>.x{color:red}</style>" in page
        assert '<p class="x">\n Copyright Jane \n</p>' in page

    def test_style_end_tag_escaped(self, config):
        (config.project_root / "a.css").write_text('.x:after { content: "</style>"; }', encoding="utf-8")
        html = f'<head><!--style:a.css--></head><p class="x">{PLACEHOLDER}</p>'

        package_html(config, html)
        page = config.output_html.read_text(encoding="utf-8")

        assert page.count("</style>") == 1

    def test_missing_marker_is_fatal(self, site):
        with pytest.raises(MissingMarkerError):
            package_html(site, rendered_page(marker='<link rel="stylesheet" href="global.css">'))

        assert not site.output_html.exists()

    def test_missing_placeholder_is_fatal(self, site):
        with pytest.raises(MissingPlaceholderError):
            package_html(site, rendered_page(placeholder="MIT"))

        assert not site.output_html.exists()

    def test_missing_stylesheet(self, config):
        with pytest.raises(AssetReadError):
            package_html(config, rendered_page(marker="<!--style:public/dist/nope.css-->"))

        assert not config.output_html.exists()

    def test_missing_font_subset(self, site):
        site.optimized_font_file.unlink()

        with pytest.raises(AssetReadError):
            package_html(site, rendered_page())

        assert not site.output_html.exists()

    def test_existing_output_replaced(self, site):
        site.output_html.write_text("old", encoding="utf-8")

        package_html(site, rendered_page())

        assert site.output_html.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
        assert list(site.output_html.parent.glob("*.html")) == [site.output_html]

    def test_unmatched_font_url_is_fatal(self, config):
        (config.project_root / "a.css").write_text(
            "@font-face{font-family:X;src:url(../fonts/fa-solid-900.woff2) format('woff2'),"
            "url(../fonts/fa-solid-900.woff) format('woff')}.x{font-family:X}",
            encoding="utf-8",
        )
        config.optimized_font_file.write_bytes(b"wOF2")
        html = f'<head><!--style:a.css--></head><p class="x">{PLACEHOLDER}</p>'

        with pytest.raises(ExternalFontError) as excinfo:
            package_html(config, html)

        assert excinfo.value.urls == ["../fonts/fa-solid-900.woff2"]
        assert not config.output_html.exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_output_mode_follows_umask(self, site):
        previous = os.umask(0o022)
        try:
            package_html(site, rendered_page())
        finally:
            os.umask(previous)

        assert stat.S_IMODE(site.output_html.stat().st_mode) == 0o644

    def test_stylesheet_not_utf8(self, config):
        (config.project_root / "a.css").write_bytes(b".x{content:'\xff\xfe'}")
        html = f'<head><!--style:a.css--></head><p class="x">{PLACEHOLDER}</p>'

        with pytest.raises(AssetReadError, match="not valid UTF-8"):
            package_html(config, html)

        assert not config.output_html.exists()


@pytest.mark.unit
def test_find_stylesheet():
    match, path = find_stylesheet("<head><!--style: css/site.css --></head>", "<!--style:(.+?)-->")

    assert path == "css/site.css"
    assert match.group(0) == "<!--style: css/site.css -->"


@pytest.mark.unit
def test_extract_licenses_from_nested_blocks():
    sheet = parse_css("/*! top */.a{color:red}@media print{/*! nested */.b{color:blue}}")

    nodes, licenses = extract_licenses(sheet.nodes)

    assert licenses == [" top ", " nested "]
    assert len(nodes) == 2


@pytest.mark.unit
def test_format_licenses():
    assert format_licenses([" MIT ", "\n * Apache\n "]) == "\n MIT \n\n\n * Apache\n \n"
    assert format_licenses([]) == ""
