"""
Shared loguru setup for the build CLI.

Each context wraps this in its own logger.py with a fixed prefix, so that
one session log interleaves [assets], [package], [serve] and [tasks] lines.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from loguru import logger

from vitae.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, str]] = None,
    level_colors: Optional[Dict[str, str]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Route loguru to `<log_dir>/<context_name>.log` and to the terminal.

    The file always receives DEBUG; the console honours `console_level`.
    A provenance header is written first so a session log says which
    invocation produced it.

    Args:
        context_name: "assets", "package", "serve" or "tasks"
        log_dir: Session directory, see session_log_dir
        extra_provenance: Extra header lines, e.g. {"Renderer": "php public/index.php --one-file"}
        level_colors: Per-level console colour overrides
        console_level: DEBUG when the CLI runs with --verbose

    Returns:
        Path to the log file
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def session_log_dir(task_name: str, logs_path: Optional[Path] = None) -> Path:
    """Directory for one CLI run, e.g. outs/logs/one-file_20251114_123456 (not created)."""
    return (logs_path or LOGS_PATH) / f"{task_name}_{now()}"


def log_provenance(extra_context: Optional[Dict[str, str]] = None) -> None:
    """Write the session header: argv, cwd, interpreter, then any extra pairs."""
    header = {
        "Command": " ".join(sys.argv),
        "Working directory": str(Path.cwd()),
        "Python": sys.version.split()[0],
        **(extra_context or {}),
    }
    logger.info("-" * 60)
    for key, value in header.items():
        logger.info(f"{key}: {value}")
    logger.info("-" * 60)
