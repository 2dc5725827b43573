"""
Single-file packager.

Renders the résumé page with the PHP renderer in standalone mode and turns
the output into one self-contained HTML document:

1. the stylesheet named by the ``<!--style:PATH-->`` marker is read,
2. its /*! license */ comments are moved out of the CSS,
3. selectors unused by the page are purged,
4. legacy font formats are dropped and the woff2 subset is embedded,
5. the marker becomes an inline <style> block and the license placeholder
   receives the collected license text,
6. the page is written atomically to the output path.
"""

import os
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from vitae.contexts.packaging.exceptions import (
    AssetReadError,
    ExternalFontError,
    MissingMarkerError,
    MissingPlaceholderError,
    RendererError,
)
from vitae.contexts.packaging.fonts import embed_font, external_font_urls, strip_legacy_sources
from vitae.contexts.packaging.logger import _log_debug, _log_info, log_packaging_result
from vitae.contexts.packaging.purge import PurgeStats, purge_stylesheet
from vitae.utils.config import BuildConfig
from vitae.utils.css_parser import AtRule, Comment, Node, parse_css, serialize_css


@dataclass
class PackagingResult:
    """
    Outcome of package_one_file().

    Attributes:
        output_path: Standalone HTML file written
        licenses: License texts moved from the CSS into the page
        css_bytes_before: Size of the referenced stylesheet
        css_bytes_after: Size of the inlined CSS
        rules_total: Style rules before purging
        rules_removed: Style rules purged
        html_bytes: Size of the written page
        font_embedded: Whether a font URL was replaced by a data URI
    """

    output_path: Path
    licenses: List[str] = field(default_factory=list)
    css_bytes_before: int = 0
    css_bytes_after: int = 0
    rules_total: int = 0
    rules_removed: int = 0
    html_bytes: int = 0
    font_embedded: bool = False


def render_page(config: BuildConfig) -> str:
    """
    Run the renderer in standalone mode and return its standard output.

    Raises:
        RendererError: If the renderer is missing, fails, or prints more than
                       config.max_output_bytes
    """
    cmd = config.renderer_command()
    executable = shutil.which(cmd[0])
    if executable is None:
        raise RendererError(f"Renderer executable not found: {cmd[0]}", command=cmd)

    _log_info("Generating HTML...")
    try:
        proc = subprocess.run(
            [executable, *cmd[1:]],
            cwd=config.project_root,
            capture_output=True,
        )
    except OSError as e:
        raise RendererError(f"Could not start renderer: {e}", command=cmd) from e

    stderr = proc.stderr.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise RendererError("Renderer failed", command=cmd, returncode=proc.returncode, stderr=stderr)
    if len(proc.stdout) > config.max_output_bytes:
        raise RendererError(
            f"Renderer output exceeds {config.max_output_bytes:,} bytes ({len(proc.stdout):,})",
            command=cmd,
        )
    if stderr.strip():
        _log_debug(f"Renderer stderr: {stderr.strip()}")
    try:
        return proc.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RendererError(
            f"Renderer output is not valid UTF-8 ({e.reason} at byte {e.start})", command=cmd
        ) from e


def find_stylesheet(html: str, marker_pattern: str) -> Tuple[re.Match, str]:
    """
    Locate the style marker.

    Returns:
        (match, stylesheet path as written in the marker)

    Raises:
        MissingMarkerError: If the page has no style marker
    """
    match = re.search(marker_pattern, html)
    if match is None:
        raise MissingMarkerError("<!--style:PATH-->")
    return match, match.group(1).strip()


def extract_licenses(nodes: List[Node]) -> Tuple[List[Node], List[str]]:
    """
    Split license comments out of a node list, nested blocks included.

    Returns:
        (nodes without license comments, license bodies without the leading "!")
    """
    kept: List[Node] = []
    licenses: List[str] = []
    for node in nodes:
        if isinstance(node, Comment) and node.is_license:
            licenses.append(node.text[1:])
            continue
        if isinstance(node, AtRule) and node.rules is not None:
            node.rules, nested = extract_licenses(node.rules)
            licenses.extend(nested)
        kept.append(node)
    return kept, licenses


def format_licenses(licenses: List[str]) -> str:
    """Text that replaces the license placeholder in the page."""
    return "".join(f"\n{body}\n" for body in licenses)


def build_inline_css(
    css: str,
    html: str,
    font_file: Path,
    font_name: Optional[str] = None,
) -> Tuple[str, List[str], PurgeStats, int]:
    """
    Produce the CSS inlined in the standalone page.

    Args:
        css: Minified stylesheet referenced by the page
        html: Rendered page (purge reference)
        font_file: WOFF2 subset to embed
        font_name: File name of the woff2 URL to replace (None: any woff2 URL)

    Returns:
        (css without newlines, license bodies, purge statistics, fonts embedded)

    Raises:
        CSSParseError: If the stylesheet cannot be parsed
        AssetReadError: If the font file cannot be read
        ExternalFontError: If an @font-face src still names a font file
    """
    stylesheet = parse_css(css)
    stylesheet.nodes, licenses = extract_licenses(stylesheet.nodes)
    stats = purge_stylesheet(stylesheet, html)
    stripped = strip_legacy_sources(stylesheet)
    _log_debug(f"Removed {stripped} legacy font source(s)")
    embedded = embed_font(stylesheet, font_file, match_name=font_name)
    remaining = external_font_urls(stylesheet)
    if remaining:
        raise ExternalFontError(remaining)
    inline = serialize_css(stylesheet, keep_licenses=False).replace("\n", "")
    return inline, licenses, stats, embedded


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _write_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(suffix=".html", dir=path.parent, text=True)
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(content)
        # mkstemp creates 0600; publish with the mode a plain open() would give
        os.chmod(temp_path, 0o666 & ~_current_umask())
        # Only replace the published page once the write succeeded
        shutil.move(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def package_html(config: BuildConfig, html: str) -> PackagingResult:
    """
    Turn rendered standalone HTML into the self-contained output page.

    Args:
        config: Build configuration
        html: Renderer output containing the style marker and license placeholder

    Returns:
        PackagingResult describing the written page

    Raises:
        MissingMarkerError: If the style marker is absent
        MissingPlaceholderError: If the license placeholder is absent
        AssetReadError: If the stylesheet or font file cannot be read
        ExternalFontError: If a font URL is left external after embedding
        CSSParseError: If the stylesheet is malformed
    """
    match, css_ref = find_stylesheet(html, config.style_marker_pattern)
    if config.license_placeholder not in html:
        raise MissingPlaceholderError(config.license_placeholder)

    css_path = Path(css_ref)
    if not css_path.is_absolute():
        css_path = config.project_root / css_path
    _log_info(f"Reading CSS {css_path}")
    try:
        css = css_path.read_text(encoding="utf-8")
    except OSError as e:
        raise AssetReadError(css_path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise AssetReadError(css_path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e

    inline_css, licenses, stats, embedded = build_inline_css(
        css, html, config.optimized_font_file, font_name=config.embedded_font_name
    )
    inline_css = inline_css.replace("</style", "<\\/style")

    page = html[: match.start()] + f"<style>{inline_css}</style>" + html[match.end() :]
    page = page.replace(config.license_placeholder, format_licenses(licenses), 1)

    _write_atomic(config.output_html, page)

    result = PackagingResult(
        output_path=config.output_html,
        licenses=licenses,
        css_bytes_before=len(css.encode("utf-8")),
        css_bytes_after=len(inline_css.encode("utf-8")),
        rules_total=stats.rules_total,
        rules_removed=stats.rules_removed,
        html_bytes=len(page.encode("utf-8")),
        font_embedded=embedded > 0,
    )
    log_packaging_result(result)
    return result


def package_one_file(config: BuildConfig) -> PackagingResult:
    """
    Render the page in standalone mode and package it into config.output_html.

    Spawns exactly one renderer process and writes exactly one file; on any
    failure nothing is written.

    Raises:
        PackagingError: On renderer, marker, placeholder or read failures
        CSSParseError: If the referenced stylesheet is malformed
    """
    return package_html(config, render_page(config))
