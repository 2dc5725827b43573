"""Unit tests for error normalization and the ErrorReporter."""

import subprocess
import threading

import pytest

from vitae.contexts.assets import CompilationResult
from vitae.contexts.packaging import MissingMarkerError
from vitae.utils import notifications
from vitae.utils.notifications import ErrorReporter, normalize_error
from vitae.utils.tools import ToolNotFoundError


@pytest.mark.unit
@pytest.mark.parametrize(
    "error,expected",
    [
        ("plain message", "plain message"),
        ("\n\n  first line  \nsecond", "first line"),
        (ValueError("bad value"), "bad value"),
        (KeyError(), "KeyError"),
        (MissingMarkerError("<!--style:PATH-->"), "Rendered HTML does not contain the expected marker: <!--style:PATH-->"),
        (ToolNotFoundError("sass", "npm install --global sass"), "Build tool not found: sass (npm install --global sass)"),
        (CompilationResult(success=False, errors=["global.scss:3 expected ';'"]), "global.scss:3 expected ';'"),
        (CompilationResult(success=False), "Task failed"),
        ("", "Unknown error"),
    ],
)
def test_normalize_error(error, expected):
    assert normalize_error(error) == expected


@pytest.mark.unit
def test_normalize_called_process_error():
    error = subprocess.CalledProcessError(2, ["composer", "install"], stderr=b"\nYour lock file is out of date\n")

    assert normalize_error(error) == "Your lock file is out of date"


@pytest.mark.unit
def test_normalize_called_process_error_without_output():
    error = subprocess.CalledProcessError(1, ["composer", "update"])

    assert normalize_error(error) == "Command ['composer', 'update'] exited with status 1"


@pytest.mark.unit
class TestErrorReporter:
    def test_report_records_failure(self, reporter):
        message = reporter.report(RuntimeError("boom\ntraceback"), task="sass")

        assert message == "boom"
        assert reporter.failed
        assert [(e.task, e.message) for e in reporter.errors] == [("sass", "boom")]

    def test_notification_sent_when_enabled(self, monkeypatch):
        sent = []
        monkeypatch.setattr(notifications, "send_desktop_notification", lambda *args: sent.append(args) or True)
        reporter = ErrorReporter(notifications_enabled=True)

        reporter.report("Unexpected token", task="typescript")

        assert sent == [("Build", "Failure!", "Error: Unexpected token")]

    def test_notification_skipped_when_disabled(self, monkeypatch, reporter):
        monkeypatch.setattr(
            notifications, "send_desktop_notification", lambda *args: pytest.fail("notification sent")
        )

        reporter.report("Unexpected token")

    def test_thread_safe(self, reporter):
        threads = [threading.Thread(target=reporter.report, args=(f"e{i}",)) for i in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(reporter.errors) == 20


@pytest.mark.unit
def test_no_notifier_available(monkeypatch):
    monkeypatch.setattr(notifications.shutil, "which", lambda name: None)

    assert notifications.send_desktop_notification("Build", "Failure!", "Error: x") is False
