"""
Shared utilities for VITAE.

Common functionality used across contexts:
- Configuration loading
- Logger setup
- Error reporting and desktop notifications
- Timestamps
"""

from vitae.utils.config import BuildConfig, load_build_config
from vitae.utils.notifications import ErrorReporter
from vitae.utils.timestamp import now, now_exact

__all__ = ["BuildConfig", "ErrorReporter", "load_build_config", "now", "now_exact"]
