"""
Per-invocation state shared by every task.

The configuration, error reporter, watcher and spawned background processes
travel together in one TaskContext that is passed to each task explicitly.
"""

import subprocess
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from vitae.contexts.serving import PollingWatcher, stop_dev_server
from vitae.utils.config import BuildConfig
from vitae.utils.notifications import ErrorReporter


@dataclass
class TaskContext:
    """
    Everything a task may touch besides the filesystem.

    Attributes:
        config: Resolved build configuration
        reporter: Single sink for task failures
        verbose: Log external tool output even on success
        processes: Background processes started by tasks (dev server)
        stop_event: Set to end long-running tasks (watch)
    """

    config: BuildConfig
    reporter: ErrorReporter
    verbose: bool = False
    processes: List[subprocess.Popen] = field(default_factory=list)
    stop_event: threading.Event = field(default_factory=threading.Event)
    _watcher: Optional[PollingWatcher] = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: BuildConfig, verbose: bool = False) -> "TaskContext":
        return cls(config=config, reporter=ErrorReporter.from_config(config), verbose=verbose)

    @property
    def watcher(self) -> PollingWatcher:
        """The watcher registry, created on first use."""
        if self._watcher is None:
            self._watcher = PollingWatcher(self.config.project_root, interval=self.config.poll_interval)
        return self._watcher

    def shutdown(self) -> None:
        """Stop the watch loop and every background process."""
        self.stop_event.set()
        while self.processes:
            stop_dev_server(self.processes.pop())
