"""Unit tests for the polling watcher."""

import os
import threading

import pytest

from vitae.contexts.serving import PollingWatcher
from vitae.pipeline import Task
from vitae.pipeline.graph import watch


def touch(path, mtime):
    path.write_text(path.name, encoding="utf-8")
    os.utime(path, (mtime, mtime))


@pytest.fixture
def sources(tmp_path):
    (tmp_path / "sass").mkdir()
    touch(tmp_path / "sass" / "main.scss", 1_000_000)
    touch(tmp_path / "composer.lock", 1_000_000)
    return tmp_path


@pytest.mark.unit
class TestPollingWatcher:
    def test_existing_files_are_baseline(self, sources):
        watcher = PollingWatcher(sources)
        watcher.add("sass", ["sass/**/*.scss"])

        assert watcher.poll_once() == []

    def test_modified_file_detected_once(self, sources):
        watcher = PollingWatcher(sources)
        watch_entry = watcher.add("sass", ["sass/**/*.scss"])

        touch(sources / "sass" / "main.scss", 1_000_010)

        assert watcher.poll_once() == [(watch_entry, sources / "sass" / "main.scss")]
        assert watcher.poll_once() == []

    def test_new_file_detected(self, sources):
        watcher = PollingWatcher(sources)
        watcher.add("sass", ["sass/**/*.scss"])

        touch(sources / "sass" / "_vars.scss", 1_000_000)

        assert [path.name for _, path in watcher.poll_once()] == ["_vars.scss"]

    def test_unrelated_files_ignored(self, sources):
        watcher = PollingWatcher(sources)
        watcher.add("lock", ["composer.lock"])

        touch(sources / "sass" / "main.scss", 1_000_010)

        assert watcher.poll_once() == []

    def test_dispatch_runs_callbacks_in_order(self, sources):
        calls = []
        watcher = PollingWatcher(sources)
        entry = watcher.add(
            "lock",
            ["composer.lock"],
            lambda p: calls.append(("first", p.name)),
            lambda p: calls.append(("second", p.name)),
        )

        watcher.dispatch(entry, sources / "composer.lock", wait=True)

        assert calls == [("first", "composer.lock"), ("second", "composer.lock")]

    def test_run_until_stopped(self, sources):
        changed = threading.Event()
        stop = threading.Event()
        watcher = PollingWatcher(sources, interval=0.01)
        watcher.add("lock", ["composer.lock"], lambda p: changed.set())

        thread = threading.Thread(target=watcher.run, args=(stop,))
        thread.start()
        touch(sources / "composer.lock", 1_000_010)
        try:
            assert changed.wait(timeout=5)
        finally:
            stop.set()
            thread.join(timeout=5)

        assert not thread.is_alive()


@pytest.mark.unit
def test_watch_target_keeps_running_after_failure(task_ctx):
    """A failing triggered task is reported and later changes still trigger it."""
    root = task_ctx.config.project_root
    scss = root / "front" / "sass" / "main.scss"
    touch(scss, 1_000_000)
    runs = []

    def failing_sass(ctx):
        runs.append(len(runs))
        if len(runs) == 1:
            raise RuntimeError("Undefined variable")
        if len(runs) == 2:
            ctx.stop_event.set()

    tasks = {name: Task(name) for name in ["typescript", "serviceWorker", "composerInstall", "composerUpdate"]}
    tasks["sass"] = Task("sass", failing_sass)
    task_ctx.watcher.interval = 0.01

    thread = threading.Thread(target=watch, args=(task_ctx,), kwargs={"tasks": tasks})
    thread.start()
    try:
        for _ in range(500):
            if len(task_ctx.watcher.watches) == 6:
                break
            thread.join(timeout=0.01)
        touch(scss, 1_000_010)
        for _ in range(500):
            if runs:
                break
            thread.join(timeout=0.01)
        touch(scss, 1_000_020)
        thread.join(timeout=5)
    finally:
        task_ctx.stop_event.set()
        thread.join(timeout=5)

    assert runs == [0, 1]
    assert [e.message for e in task_ctx.reporter.errors] == ["Undefined variable"]
