"""
Packaging context logger.

Provides logging interface for packaging context with automatic [package] prefix.
All packaging modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from vitae.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[package]"


def setup_packaging_logger(log_dir: Path, renderer: str, console_level: str = "INFO") -> Path:
    """
    Setup logger for packaging context.

    Args:
        log_dir: Directory for this packaging session
        renderer: Renderer command line, recorded in the provenance header
        console_level: Minimum console level

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="package",
        log_dir=log_dir,
        extra_provenance={"Renderer": renderer},
        console_level=console_level,
    )


def _log_info(message: str) -> None:
    """Log info message with [package] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [package] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [package] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [package] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_packaging_result(result) -> None:
    """
    Log sizes and purge statistics of a finished package.

    Args:
        result: PackagingResult from package_one_file()
    """
    _log_success(f"Standalone page written: {result.output_path}")
    _log_info(
        f"CSS: {result.css_bytes_before:,} -> {result.css_bytes_after:,} bytes "
        f"({result.rules_removed} of {result.rules_total} rules purged)"
    )
    _log_info(f"HTML: {result.html_bytes:,} bytes, {len(result.licenses)} license block(s) inlined")
    if result.font_embedded:
        _log_debug("  Font subset embedded as data URI")
