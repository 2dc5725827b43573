"""
Serving Context

Responsibilities:
- Runs the PHP development server on the public directory
- Watches source files and re-runs the tasks that produce their artifacts
- Runs Composer actions (install, update, create-project)

Owns: Long-running processes (dev server, watch loop), vendor/ via Composer
Never: Compiles assets or packages pages itself (it triggers tasks that do)
"""

from vitae.contexts.serving.composer import COMPOSER_ACTIONS, run_composer
from vitae.contexts.serving.server import server_command, start_dev_server, stop_dev_server
from vitae.contexts.serving.watcher import PollingWatcher, Watch

__all__ = [
    "COMPOSER_ACTIONS",
    "run_composer",
    "server_command",
    "start_dev_server",
    "stop_dev_server",
    "PollingWatcher",
    "Watch",
]
