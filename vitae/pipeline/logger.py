"""
Pipeline logger.

Provides logging interface for the task graph with automatic [tasks] prefix.
"""

from pathlib import Path

from loguru import logger

from vitae.utils.logger import setup_logger as _setup_logger
from vitae.utils.timestamp import format_duration

CONTEXT_PREFIX = "[tasks]"


def setup_tasks_logger(log_dir: Path, task_name: str, config_path: str, console_level: str = "INFO") -> Path:
    """
    Setup logger for a task graph run (serving and composite targets).

    Args:
        log_dir: Directory for this run
        task_name: Target being run
        config_path: Pipeline configuration file, recorded in the provenance header
        console_level: Minimum console level

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="tasks",
        log_dir=log_dir,
        extra_provenance={"Task": task_name, "Config": config_path},
        console_level=console_level,
    )


def _log_info(message: str) -> None:
    """Log info message with [tasks] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [tasks] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [tasks] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [tasks] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_task_start(name: str) -> None:
    _log_info(f"Starting '{name}'...")


def log_task_result(result) -> None:
    """
    Log the outcome of one task node.

    Args:
        result: TaskResult with name, success and elapsed_s
    """
    elapsed = format_duration(result.elapsed_s)
    if result.success:
        _log_success(f"Finished '{result.name}' after {elapsed}")
    else:
        _log_error(f"'{result.name}' errored after {elapsed}")
