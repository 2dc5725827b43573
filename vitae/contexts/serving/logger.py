"""
Serving context logger.

Provides logging interface for the serving context with automatic [serve] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[serve]"


def _log_info(message: str) -> None:
    """Log info message with [serve] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [serve] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [serve] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [serve] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_file_changed(path) -> None:
    _log_info(f"File {path} was modified, running tasks...")
