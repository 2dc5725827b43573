"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """
    Current local time as a compact, sortable string for directory names.

    Returns:
        Timestamp like "20251114_123456"
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """Current local time in ISO 8601 format with microseconds."""
    return datetime.now().isoformat()


def format_duration(seconds: float) -> str:
    """
    Format an elapsed time for log and CLI output.

    Examples:
        format_duration(0.42)   # "0.42s"
        format_duration(75.0)   # "1m 15s"
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}m {secs:02d}s"
