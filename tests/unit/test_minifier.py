"""Unit tests for minification helpers and vendor font copying."""

from dataclasses import replace
from pathlib import Path

import pytest

from vitae.contexts.assets import clean_minify, copy_vendor_fonts, minify_app_stylesheet
from vitae.contexts.assets.minifier import minified_name, minify_js, terser_options


@pytest.mark.unit
def test_minified_name():
    assert minified_name(Path("dist/global.js")) == Path("dist/global.min.js")
    assert minified_name(Path("global.css")) == Path("global.min.css")


@pytest.mark.unit
def test_terser_options(config):
    assert terser_options(config) == ["--compress", "drop_console=true", "--mangle", "toplevel"]

    plain = replace(config, drop_console=False, mangle_toplevel=False)
    assert terser_options(plain) == ["--compress", "--mangle"]


@pytest.mark.unit
def test_clean_minify_removes_only_minified(config):
    for name in ["global.min.css", "global.min.js", "global.css", "global.js"]:
        (config.dist_dir / name).write_text("x", encoding="utf-8")

    removed = clean_minify(config)

    assert sorted(p.name for p in removed) == ["global.min.css", "global.min.js"]
    assert sorted(p.name for p in config.dist_dir.iterdir()) == ["global.css", "global.js"]


@pytest.mark.unit
def test_clean_minify_without_dist(config):
    config.dist_dir.rmdir()

    assert clean_minify(config) == []


@pytest.mark.unit
class TestMinifyStylesheet:
    def test_writes_minified_css(self, config):
        (config.dist_dir / "global.css").write_text(
            "/*! MIT */\n/* grid */\n.row {\n  display: flex;\n}\n", encoding="utf-8"
        )

        result = minify_app_stylesheet(config)

        assert result.success
        assert result.outputs == [config.dist_dir / "global.min.css"]
        assert (config.dist_dir / "global.min.css").read_text(encoding="utf-8") == "/*! MIT */.row{display:flex}"

    def test_byte_identical_on_rerun(self, config):
        (config.dist_dir / "global.css").write_text(".a { color: red }\n.b{margin:0 auto}", encoding="utf-8")
        minified = config.dist_dir / "global.min.css"

        minify_app_stylesheet(config)
        first = minified.read_bytes()
        minify_app_stylesheet(config)

        assert minified.read_bytes() == first

    def test_missing_source(self, config):
        result = minify_app_stylesheet(config)

        assert not result.success
        assert "Stylesheet not found" in result.errors[0]

    def test_parse_error_reported(self, config):
        (config.dist_dir / "global.css").write_text(".a { color: red", encoding="utf-8")

        result = minify_app_stylesheet(config)

        assert not result.success
        assert result.errors[0].startswith("global.css:")


@pytest.mark.unit
def test_minify_js_missing_source(config):
    result = minify_js(config, config.dist_dir / "global.js", config.dist_dir / "global.min.js")

    assert not result.success
    assert "Script not found" in result.errors[0]


@pytest.mark.unit
class TestVendorFonts:
    def test_copies_configured_fonts(self, config):
        config.font_root.mkdir(parents=True)
        for name in config.font_files:
            (config.font_root / name).write_bytes(name.encode())

        result = copy_vendor_fonts(config)

        assert result.success
        assert sorted(p.name for p in config.vendor_fonts_dir.iterdir()) == sorted(config.font_files)
        assert (config.vendor_fonts_dir / "fontawesome-webfont.woff2").read_bytes() == b"fontawesome-webfont.woff2"

    def test_missing_font_reported(self, config):
        config.font_root.mkdir(parents=True)
        (config.font_root / "fontawesome-webfont.woff2").write_bytes(b"x")

        result = copy_vendor_fonts(config)

        assert not result.success
        assert len(result.errors) == 2
        assert result.outputs == [config.vendor_fonts_dir / "fontawesome-webfont.woff2"]
