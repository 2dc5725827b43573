"""
External tool invocation shared by the compile and minify steps.

Every step shells out to a command-line tool (sass, tsc, terser) and reports
a CompilationResult with parsed errors and warnings.
"""

import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from vitae.contexts.assets.logger import _log_debug, log_compilation_result


@dataclass
class CompilationResult:
    """
    Result of one external compile or minify step.

    Attributes:
        success: Whether the step succeeded
        outputs: Files written by the step
        stdout: Standard output of the tool
        stderr: Standard error of the tool
        errors: Parsed error messages
        warnings: Parsed warning messages
    """

    success: bool
    outputs: List[Path] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def run_tool(cmd: Sequence, cwd: Path) -> subprocess.CompletedProcess:
    """Run an external tool with captured, UTF-8 decoded output."""
    cmd = [str(part) for part in cmd]
    _log_debug(f"Running: {' '.join(cmd)}")
    return subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
    )


def finish_step(
    step: str,
    proc: subprocess.CompletedProcess,
    outputs: List[Path],
    errors: List[str],
    warnings: List[str],
    start_time: float,
    verbose: bool = False,
) -> CompilationResult:
    """
    Turn a finished tool process into a logged CompilationResult.

    A step succeeds only if the tool exited with status 0, reported no
    errors, and every expected output file exists.
    """
    success = proc.returncode == 0 and not errors
    missing = [path for path in outputs if not path.exists()]
    if success and missing:
        success = False
        errors.append(f"Output file was not generated: {missing[0]}")
    if not success and not errors:
        lines = (proc.stderr or proc.stdout or "").strip().splitlines()
        errors.append(lines[-1] if lines else f"{step} exited with status {proc.returncode}")

    result = CompilationResult(
        success=success,
        outputs=list(outputs) if success else [],
        stdout=proc.stdout,
        stderr=proc.stderr,
        errors=errors,
        warnings=warnings,
    )
    log_compilation_result(step, result, time.time() - start_time, verbose=verbose)
    return result
