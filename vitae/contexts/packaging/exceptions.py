"""Custom exceptions for the packaging context."""

from typing import List, Optional


class PackagingError(Exception):
    """Base class for failures while building the single-file page."""


class RendererError(PackagingError):
    """
    Raised when the page renderer fails or misbehaves.

    Attributes:
        message: Error description
        command: Renderer command line
        returncode: Exit status (None if the process did not finish)
        stderr: Renderer standard error
    """

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.message = message
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

        parts = [message]
        if command:
            parts.append(f"\nCommand: {' '.join(command)}")
        if returncode is not None:
            parts.append(f"Exit status: {returncode}")
        if stderr:
            snippet = stderr[:200] + "..." if len(stderr) > 200 else stderr
            parts.append(f"\nStderr:\n{snippet}")

        super().__init__("\n".join(parts))


class MissingMarkerError(PackagingError):
    """
    Raised when rendered HTML lacks a required marker.

    Attributes:
        marker: Description or literal of the missing marker
    """

    def __init__(self, marker: str):
        self.marker = marker
        super().__init__(f"Rendered HTML does not contain the expected marker: {marker}")


class MissingPlaceholderError(MissingMarkerError):
    """Raised when the license placeholder is absent from rendered HTML."""


class AssetReadError(PackagingError):
    """
    Raised when a file referenced by the page cannot be read.

    Attributes:
        path: File that failed to load
    """

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}")


class ExternalFontError(PackagingError):
    """
    Raised when an @font-face rule still points at a font file after embedding.

    Attributes:
        urls: External font URLs left in the stylesheet
    """

    def __init__(self, urls: List[str]):
        self.urls = urls
        super().__init__(
            f"Standalone page would load external fonts: {', '.join(urls)} "
            "(check packaging.embedded_font_name)"
        )
