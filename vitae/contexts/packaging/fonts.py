"""
@font-face rewriting for the standalone page.

Only a WOFF2 subset of the icon font ships with the standalone page, so the
src lists of @font-face rules are reduced to their woff2 entries and the
woff2 URL is replaced with a base64 data URI of the subset file.
"""

import base64
import mimetypes
import re
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlsplit

from vitae.contexts.packaging.exceptions import AssetReadError
from vitae.utils.css_parser import AtRule, Declaration, Stylesheet, split_top_level

LEGACY_FONT_FORMATS = {"embedded-opentype", "woff", "truetype", "svg", "opentype"}
KEPT_FONT_FORMAT = "woff2"

FONT_MIME_TYPES = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
    ".svg": "image/svg+xml",
}

FORMAT_BY_EXTENSION = {
    ".woff2": "woff2",
    ".woff": "woff",
    ".ttf": "truetype",
    ".otf": "opentype",
    ".eot": "embedded-opentype",
    ".svg": "svg",
}

URL = re.compile(r"url\(\s*(?:\"([^\"]*)\"|'([^']*)'|([^)]*?))\s*\)", re.IGNORECASE)
FORMAT = re.compile(r"format\(\s*[\"']?([^\"')]+)[\"']?\s*\)", re.IGNORECASE)


def encode_data_uri(path: Path) -> str:
    """
    Encode a file as a base64 data URI.

    Raises:
        AssetReadError: If the file cannot be read
    """
    try:
        payload = Path(path).read_bytes()
    except OSError as e:
        raise AssetReadError(path, e.strerror or str(e)) from e
    suffix = Path(path).suffix.lower()
    mime = FONT_MIME_TYPES.get(suffix) or mimetypes.guess_type(str(path))[0] or "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def decode_data_uri(uri: str) -> bytes:
    """Inverse of encode_data_uri() for base64 data URIs."""
    header, _, payload = uri.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError(f"Not a base64 data URI: {uri[:40]}")
    return base64.b64decode(payload, validate=True)


def source_url(entry: str) -> Optional[str]:
    """URL of one src entry, e.g. ``url(a.woff2) format("woff2")`` -> ``a.woff2``."""
    match = URL.search(entry)
    if not match:
        return None
    return next(group for group in match.groups() if group is not None).strip()


def source_format(entry: str) -> Optional[str]:
    """
    Font format of one src entry.

    Uses the format() hint when present, otherwise the URL's file extension.
    ``local()`` entries have no format.
    """
    hint = FORMAT.search(entry)
    if hint:
        return hint.group(1).strip().lower()
    url = source_url(entry)
    if url is None or url.startswith("data:"):
        return None
    return FORMAT_BY_EXTENSION.get(Path(urlsplit(url).path).suffix.lower())


def strip_legacy_sources(stylesheet: Stylesheet) -> int:
    """
    Reduce every @font-face src list to its non-legacy entries.

    ``src`` declarations left with no entries (the IE-only
    ``src:url(font.eot)`` line) are removed.

    Returns:
        Number of src entries removed
    """
    removed = 0
    for rule in _font_faces(stylesheet):
        declarations: List[Declaration] = []
        for declaration in rule.declarations:
            if declaration.name.lower() != "src":
                declarations.append(declaration)
                continue
            entries = split_top_level(declaration.value, ",")
            kept = [entry for entry in entries if source_format(entry) not in LEGACY_FONT_FORMATS]
            removed += len(entries) - len(kept)
            if kept:
                declarations.append(Declaration(name=declaration.name, value=",".join(kept)))
        rule.declarations = declarations
    return removed


def embed_font(stylesheet: Stylesheet, font_file: Path, match_name: Optional[str] = None) -> int:
    """
    Replace woff2 URLs in @font-face rules with the font file's data URI.

    Args:
        stylesheet: Parsed stylesheet (modified)
        font_file: Font subset to embed
        match_name: Only replace URLs whose file name equals this
                    (default: replace every external woff2 URL)

    Returns:
        Number of URLs replaced

    Raises:
        AssetReadError: If the font file cannot be read
    """
    data_uri = None
    replaced = 0
    for rule in _font_faces(stylesheet):
        for declaration in rule.declarations:
            if declaration.name.lower() != "src":
                continue
            entries = split_top_level(declaration.value, ",")
            for i, entry in enumerate(entries):
                url = source_url(entry)
                if url is None or url.startswith("data:") or source_format(entry) != KEPT_FONT_FORMAT:
                    continue
                if match_name and Path(urlsplit(url).path).name != match_name:
                    continue
                if data_uri is None:
                    data_uri = encode_data_uri(font_file)
                entries[i] = URL.sub(lambda _: f"url({data_uri})", entry, count=1)
                replaced += 1
            declaration.value = ",".join(entries)
    return replaced


def external_font_urls(stylesheet: Stylesheet) -> List[str]:
    """URLs in @font-face src lists that are not data URIs."""
    urls = []
    for rule in _font_faces(stylesheet):
        for declaration in rule.declarations:
            if declaration.name.lower() != "src":
                continue
            for entry in split_top_level(declaration.value, ","):
                url = source_url(entry)
                if url is not None and not url.startswith("data:"):
                    urls.append(url)
    return urls


def _font_faces(stylesheet: Stylesheet) -> List[AtRule]:
    return [
        node
        for node in stylesheet.walk()
        if isinstance(node, AtRule) and node.name == "font-face" and node.declarations is not None
    ]
