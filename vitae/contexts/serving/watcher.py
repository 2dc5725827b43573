"""
Polling file watcher.

Each registered watch maps glob patterns to a callback. The watcher takes
an mtime snapshot of every matching file; on each poll, files that appeared
or whose mtime changed trigger their callbacks. Callbacks run on a thread
pool so a slow task never stalls polling, and runs for the same file are
not coordinated with each other.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from vitae.contexts.serving.logger import _log_debug, _log_info, log_file_changed

ChangeCallback = Callable[[Path], None]


@dataclass
class Watch:
    """Patterns (relative to the watcher root) and the callbacks they trigger."""

    name: str
    patterns: List[str]
    callbacks: List[ChangeCallback] = field(default_factory=list)
    mtimes: Dict[Path, float] = field(default_factory=dict)


class PollingWatcher:
    """
    mtime-polling watcher shared by every watch task.

    Usage:
        watcher = PollingWatcher(project_root, interval=0.5)
        watcher.add("sass", ["front/sass/**/*.scss"], lambda path: run("sass"))
        watcher.run(stop_event)
    """

    def __init__(self, root: Path, interval: float = 0.5, max_workers: int = 4):
        self.root = Path(root)
        self.interval = interval
        self.watches: List[Watch] = []
        self._executor: Optional[ThreadPoolExecutor] = None
        self._max_workers = max_workers
        self._lock = threading.Lock()

    def add(self, name: str, patterns: Sequence[str], *callbacks: ChangeCallback) -> Watch:
        """
        Register a watch. Files already present are part of the baseline.

        Args:
            name: Label used in log messages
            patterns: Glob patterns relative to the watcher root
            callbacks: Called with the changed path, in order

        Returns:
            The registered Watch
        """
        watch = Watch(name=name, patterns=list(patterns), callbacks=list(callbacks))
        watch.mtimes = self._scan(watch)
        with self._lock:
            self.watches.append(watch)
        _log_debug(f"Watching {name}: {', '.join(watch.patterns)} ({len(watch.mtimes)} files)")
        return watch

    def _scan(self, watch: Watch) -> Dict[Path, float]:
        mtimes = {}
        for pattern in watch.patterns:
            for path in self.root.glob(pattern):
                try:
                    if path.is_file():
                        mtimes[path] = path.stat().st_mtime
                except FileNotFoundError:
                    # Deleted between glob and stat
                    continue
        return mtimes

    def poll_once(self) -> List[Tuple[Watch, Path]]:
        """
        Compare every watch against its last snapshot.

        Returns:
            (watch, path) pairs for new or modified files, in pattern order
        """
        changes = []
        with self._lock:
            watches = list(self.watches)
        for watch in watches:
            current = self._scan(watch)
            for path, mtime in current.items():
                previous = watch.mtimes.get(path)
                if previous is None or mtime != previous:
                    changes.append((watch, path))
            watch.mtimes = current
        return changes

    def dispatch(self, watch: Watch, path: Path, wait: bool = False) -> None:
        """Announce a change and run the watch's callbacks."""
        log_file_changed(path.relative_to(self.root) if path.is_relative_to(self.root) else path)
        if wait or self._executor is None:
            self._run_callbacks(watch, path)
        else:
            self._executor.submit(self._run_callbacks, watch, path)

    @staticmethod
    def _run_callbacks(watch: Watch, path: Path) -> None:
        for callback in watch.callbacks:
            callback(path)

    def run(self, stop_event: Optional[threading.Event] = None) -> None:
        """
        Poll until ``stop_event`` is set (or forever).

        Callback errors are the callbacks' business: task callbacks report
        through the ErrorReporter and never raise.
        """
        stop_event = stop_event or threading.Event()
        _log_info(f"Watching {len(self.watches)} pattern group(s), polling every {self.interval}s")
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="watch") as executor:
            self._executor = executor
            try:
                while not stop_event.wait(self.interval):
                    for watch, path in self.poll_once():
                        self.dispatch(watch, path)
            finally:
                self._executor = None
