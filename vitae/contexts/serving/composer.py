"""Composer actions: install, update and create-project."""

import subprocess

from vitae.contexts.serving.logger import _log_debug, _log_info, _log_success
from vitae.utils.config import BuildConfig
from vitae.utils.tools import resolve_tool

COMPOSER_ACTIONS = ("install", "update", "create-project")


def run_composer(config: BuildConfig, action: str = "install") -> subprocess.CompletedProcess:
    """
    Run one Composer action in the project root.

    Args:
        config: Build configuration
        action: One of COMPOSER_ACTIONS

    Returns:
        The finished process

    Raises:
        ValueError: On an unknown action
        ToolNotFoundError: If Composer is not installed
        subprocess.CalledProcessError: If Composer exits with a non-zero status
    """
    if action not in COMPOSER_ACTIONS:
        raise ValueError(f"Unknown composer action '{action}'. Available: {list(COMPOSER_ACTIONS)}")

    composer = resolve_tool(config.composer_command)
    cmd = [composer, action, "--no-interaction"]
    _log_info(f"composer {action}")
    proc = subprocess.run(
        cmd,
        cwd=config.project_root,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=True,
    )
    # Composer reports progress on stderr
    for line in proc.stderr.splitlines():
        if line.strip():
            _log_debug(f"  {line.strip()}")
    _log_success(f"composer {action} finished")
    return proc
