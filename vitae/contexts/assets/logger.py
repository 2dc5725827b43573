"""
Assets context logger.

Provides logging interface for the assets context with automatic [assets] prefix.
All assets modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from vitae.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[assets]"


def setup_assets_logger(log_dir: Path, tools: dict = None, console_level: str = "INFO") -> Path:
    """
    Setup logger for the assets context.

    Args:
        log_dir: Directory for this build session
        tools: External tool names to record in the provenance header
        console_level: Minimum console level

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="assets",
        log_dir=log_dir,
        extra_provenance=tools,
        console_level=console_level,
    )


def _log_info(message: str) -> None:
    """Log info message with [assets] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [assets] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [assets] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [assets] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [assets] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_compilation_start(step: str, sources: list, destination: Path) -> None:
    """Log start of a compile step with its inputs."""
    _log_info(f"Starting {step}: {len(sources)} source file(s) -> {destination}")
    for source in sources[:10]:
        _log_debug(f"  Source: {source}")
    if len(sources) > 10:
        _log_debug(f"  ... and {len(sources) - 10} more")


def _log_diagnostics(kind: str, items: list, limit: int, log) -> None:
    """List the first `limit` tool diagnostics, then a count of the rest."""
    for number, item in enumerate(items[:limit], 1):
        log(f"  {kind} {number}: {item}")
    hidden = len(items) - limit
    if hidden > 0:
        log(f"  ({hidden} more {kind.lower()}s in the tool output)")


def log_compilation_result(step: str, result, elapsed_time: float, verbose: bool = False) -> None:
    """
    Log the outcome of one asset step.

    Successful steps list their outputs at debug level. Failed steps list
    their errors; the raw tool output goes to the log file whenever the step
    failed or --verbose is set.
    """
    if result.success:
        _log_success(f"{step} wrote {len(result.outputs)} file(s) in {elapsed_time:.2f}s")
        for output in result.outputs:
            _log_debug(f"  -> {output}")
    else:
        _log_error(f"{step} failed after {elapsed_time:.2f}s ({len(result.errors)} error(s))")
        _log_diagnostics("Error", result.errors, 10 if verbose else 5, _log_error)

    if result.warnings:
        _log_warning(f"{step} emitted {len(result.warnings)} warning(s)")
        _log_diagnostics("Warning", result.warnings, 10 if verbose else 3, _log_debug)

    if verbose or not result.success:
        for stream, text in (("stdout", result.stdout), ("stderr", result.stderr)):
            if text:
                # raw keeps multi-line tool output unprefixed
                logger.opt(raw=True).debug(f"\n--- {step} {stream} ---\n{text}\n")
