"""
Packaging Context

Responsibilities:
- Runs the page renderer in standalone mode
- Inlines the purged stylesheet and moves its license notices into the page
- Embeds the icon font subset as a data URI
- Writes the standalone index.html

Owns: The standalone page
Never: Compiles or minifies assets (reads what the assets context produced)
"""

from vitae.contexts.packaging.exceptions import (
    AssetReadError,
    ExternalFontError,
    MissingMarkerError,
    MissingPlaceholderError,
    PackagingError,
    RendererError,
)
from vitae.contexts.packaging.packager import (
    PackagingResult,
    package_html,
    package_one_file,
    render_page,
)

__all__ = [
    "package_one_file",
    "package_html",
    "render_page",
    "PackagingResult",
    # Errors
    "PackagingError",
    "RendererError",
    "MissingMarkerError",
    "MissingPlaceholderError",
    "AssetReadError",
    "ExternalFontError",
]
