"""
Error reporting for build tasks.

Every task failure goes through one ErrorReporter: the error is normalized to
a single-line message, logged, and announced with a desktop notification.
The reporter keeps the list of failures so the CLI can choose its exit code.

Usage:
    from vitae.utils.notifications import ErrorReporter

    reporter = ErrorReporter.from_config(config)
    reporter.report(exc, task="sass")
    if reporter.failed:
        ...
"""

import shutil
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from vitae.utils.timestamp import now_exact


@dataclass
class ReportedError:
    """One failure passed through the reporter."""

    task: str
    message: str
    timestamp: str


def normalize_error(error) -> str:
    """
    Reduce any task failure to a one-line message.

    Accepts exceptions, failed CompilationResult-like objects (anything with an
    ``errors`` list) and plain strings.

    Args:
        error: The failure to describe

    Returns:
        First meaningful line of the error description
    """
    if isinstance(error, str):
        text = error
    elif isinstance(error, subprocess.CalledProcessError):
        output = error.stderr or error.stdout or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        text = output.strip() or f"Command {error.cmd!r} exited with status {error.returncode}"
    elif isinstance(error, BaseException):
        text = str(error) or type(error).__name__
    elif hasattr(error, "errors"):
        text = str(error.errors[0]) if error.errors else "Task failed"
    else:
        text = str(error)

    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return "Unknown error"


def send_desktop_notification(title: str, subtitle: str, message: str) -> bool:
    """
    Show a desktop notification with notify-send (Linux) or osascript (macOS).

    Returns:
        True if a notifier was found and accepted the notification
    """
    if sys.platform == "darwin" and shutil.which("osascript"):
        script = (
            f"display notification {_applescript_quote(message)} "
            f"with title {_applescript_quote(title)} "
            f"subtitle {_applescript_quote(subtitle)} "
            'sound name "Beep"'
        )
        cmd = ["osascript", "-e", script]
    elif shutil.which("notify-send"):
        cmd = ["notify-send", "--urgency=critical", title, f"{subtitle}\n{message}"]
    else:
        return False

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"Desktop notification failed: {e}")
        return False
    return result.returncode == 0


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class ErrorReporter:
    """
    Single sink for task failures.

    Thread-safe: parallel task groups report into the same instance.
    """

    def __init__(
        self,
        notifications_enabled: bool = True,
        title: str = "Build",
        subtitle: str = "Failure!",
    ):
        self.notifications_enabled = notifications_enabled
        self.title = title
        self.subtitle = subtitle
        self.errors: List[ReportedError] = []
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config) -> "ErrorReporter":
        """Create a reporter from a BuildConfig."""
        return cls(
            notifications_enabled=config.notifications_enabled,
            title=config.notification_title,
            subtitle=config.notification_subtitle,
        )

    @property
    def failed(self) -> bool:
        """Whether any failure has been reported."""
        return bool(self.errors)

    def report(self, error, task: str = "build", details: Optional[str] = None) -> str:
        """
        Log and announce a failure.

        Args:
            error: Exception, failed result or message
            task: Name of the failing task
            details: Extra output (e.g. subprocess stderr) logged at DEBUG

        Returns:
            The normalized message
        """
        message = normalize_error(error)
        logger.error(f"[{task}] Error: {message}")
        if details:
            logger.opt(raw=True).debug(f"\n{'=' * 80}\n{task.upper()} OUTPUT:\n{'=' * 80}\n{details}\n")

        with self._lock:
            self.errors.append(ReportedError(task=task, message=message, timestamp=now_exact()))

        if self.notifications_enabled:
            send_desktop_notification(self.title, self.subtitle, f"Error: {message}")
            logger.debug(f"Notify {task}")

        return message
