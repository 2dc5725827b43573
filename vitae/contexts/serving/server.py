"""
Development server.

Serves the public directory through PHP's built-in web server so pages are
rendered on every request.
"""

import subprocess
from typing import Optional

from vitae.contexts.serving.logger import _log_debug, _log_info, _log_success
from vitae.utils.config import BuildConfig
from vitae.utils.tools import resolve_tool


def server_command(config: BuildConfig) -> list:
    """php -S host:port -t public"""
    return [
        config.php_command,
        "-S",
        f"{config.server_host}:{config.server_port}",
        "-t",
        str(config.public_root),
    ]


def start_dev_server(config: BuildConfig) -> subprocess.Popen:
    """
    Start the PHP development server in the background.

    Args:
        config: Build configuration (host, port, public root)

    Returns:
        The running server process; the caller stops it with stop_dev_server()

    Raises:
        ToolNotFoundError: If PHP is not installed
    """
    cmd = server_command(config)
    cmd[0] = resolve_tool(config.php_command)
    _log_debug(f"Running: {' '.join(cmd)}")
    process = subprocess.Popen(cmd, cwd=config.project_root)
    _log_success(f"Development server on http://{config.server_host}:{config.server_port}/")
    return process


def stop_dev_server(process: Optional[subprocess.Popen], timeout: float = 5.0) -> None:
    """Terminate the server, killing it if it does not exit within ``timeout``."""
    if process is None or process.poll() is not None:
        return
    _log_info("Stopping development server")
    process.terminate()
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
