"""
Front-end Compilation Module

Compiles Sass to CSS and TypeScript to JavaScript (application bundle and
service worker) by invoking the sass and tsc command-line compilers.
"""

import re
import tempfile
import time
from pathlib import Path
from typing import List

from vitae.contexts.assets.logger import log_compilation_start
from vitae.contexts.assets.minifier import minify_js
from vitae.contexts.assets.tools import CompilationResult, finish_step, run_tool
from vitae.utils.config import BuildConfig
from vitae.utils.tools import resolve_tool

# Options for the application bundle: one AMD file, ES5 output
TYPESCRIPT_APP_OPTIONS = [
    "--noImplicitAny",
    "--lib",
    "es2018,dom,dom.iterable",
    "--downlevelIteration",
    "--target",
    "ES5",
    "--module",
    "amd",
]

TYPESCRIPT_SW_OPTIONS = ["--noImplicitAny", "--target", "ES6"]

APP_BUNDLE_NAME = "global.js"


def _parse_sass_output(output: str) -> tuple[List[str], List[str]]:
    """
    Parse sass CLI output for errors and warnings.

    Args:
        output: Combined stdout/stderr of the sass command

    Returns:
        Tuple of (errors, warnings)
    """
    errors = [m.group(1).strip() for m in re.finditer(r"^Error: (.+)$", output, re.MULTILINE)]
    warnings = [
        m.group(1).strip()
        for m in re.finditer(r"^(?:DEPRECATION )?WARNING(?: on line \d+)?: (.+)$", output, re.MULTILINE | re.IGNORECASE)
    ]
    return errors, warnings


def _parse_tsc_output(output: str) -> tuple[List[str], List[str]]:
    """
    Parse tsc output (``file(line,col): error TS1234: message``).

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    for match in re.finditer(r"^(.*?)(?:\((\d+),(\d+)\))?: error (TS\d+): (.+)$", output, re.MULTILINE):
        location = match.group(1).strip()
        if match.group(2):
            location += f":{match.group(2)}"
        errors.append(f"{location} {match.group(4)}: {match.group(5).strip()}".strip())
    # tsc has no warnings; unused-code checks are errors when enabled
    return errors, []


def sass_targets(config: BuildConfig) -> List[tuple[Path, Path]]:
    """
    Map Sass entry points to their CSS outputs in the dist directory.

    Partials (files starting with an underscore) are only compiled through
    the files that import them.

    Returns:
        List of (source, destination) pairs
    """
    base = config.project_root / _glob_base(config.sass_sources)
    targets = []
    for source in config.glob(config.sass_sources):
        if source.name.startswith("_"):
            continue
        relative = source.relative_to(base) if source.is_relative_to(base) else Path(source.name)
        targets.append((source, (config.dist_dir / relative).with_suffix(".css")))
    return targets


def _glob_base(pattern: str) -> Path:
    """Leading directory of a glob pattern (the part without wildcards)."""
    parts = []
    for part in Path(pattern).parts:
        if any(char in part for char in "*?["):
            break
        parts.append(part)
    return Path(*parts) if parts else Path(".")


def compile_sass(config: BuildConfig, verbose: bool = False) -> CompilationResult:
    """
    Compile every Sass entry point into the dist directory.

    Args:
        config: Build configuration
        verbose: Log tool output even on success

    Returns:
        CompilationResult listing the CSS files written
    """
    targets = sass_targets(config)
    if not targets:
        return CompilationResult(success=False, errors=[f"No Sass sources match {config.sass_sources}"])

    sass = resolve_tool(config.sass_command)
    config.dist_dir.mkdir(parents=True, exist_ok=True)
    log_compilation_start("sass", [source for source, _ in targets], config.dist_dir)

    start_time = time.time()
    cmd = [
        sass,
        "--no-source-map",
        "--style=expanded",
        f"--load-path={config.project_root / _glob_base(config.sass_sources)}",
    ]
    cmd += [f"{source}:{destination}" for source, destination in targets]
    proc = run_tool(cmd, cwd=config.project_root)

    errors, warnings = _parse_sass_output(proc.stderr + "\n" + proc.stdout)
    return finish_step("sass", proc, [d for _, d in targets], errors, warnings, start_time, verbose)


def compile_typescript(config: BuildConfig, verbose: bool = False) -> CompilationResult:
    """
    Bundle the application TypeScript into dist/global.js (ES5, AMD).

    Args:
        config: Build configuration
        verbose: Log tool output even on success

    Returns:
        CompilationResult with the bundle path
    """
    sources = config.glob(config.typescript_sources)
    if not sources:
        return CompilationResult(
            success=False, errors=[f"No TypeScript sources match {config.typescript_sources}"]
        )

    tsc = resolve_tool(config.tsc_command)
    config.dist_dir.mkdir(parents=True, exist_ok=True)
    bundle = config.dist_dir / APP_BUNDLE_NAME
    log_compilation_start("typescript", sources, bundle)

    start_time = time.time()
    cmd = [tsc, *TYPESCRIPT_APP_OPTIONS, "--outFile", bundle, *sources]
    cmd += config.glob(config.type_definitions)
    proc = run_tool(cmd, cwd=config.project_root)

    errors, warnings = _parse_tsc_output(proc.stdout + "\n" + proc.stderr)
    return finish_step("typescript", proc, [bundle], errors, warnings, start_time, verbose)


def compile_service_worker(config: BuildConfig, verbose: bool = False) -> CompilationResult:
    """
    Compile the service worker (ES6) and write it minified to the project root.

    The worker must be served from the site root to control every page,
    which is why it does not go to the dist directory.

    Args:
        config: Build configuration
        verbose: Log tool output even on success

    Returns:
        CompilationResult with the service worker path
    """
    source = config.project_root / config.service_worker_source
    if not source.exists():
        return CompilationResult(success=False, errors=[f"Service worker source not found: {source}"])

    tsc = resolve_tool(config.tsc_command)
    log_compilation_start("serviceWorker", [source], config.service_worker_out)

    with tempfile.TemporaryDirectory(prefix="vitae-sw-") as tmp:
        compiled = Path(tmp) / config.service_worker_out.name
        start_time = time.time()
        cmd = [tsc, *TYPESCRIPT_SW_OPTIONS, "--outFile", compiled, source]
        cmd += config.glob(config.type_definitions)
        proc = run_tool(cmd, cwd=config.project_root)

        errors, warnings = _parse_tsc_output(proc.stdout + "\n" + proc.stderr)
        result = finish_step("serviceWorker", proc, [compiled], errors, warnings, start_time, verbose)
        if not result.success:
            return result
        return minify_js(config, compiled, config.service_worker_out, verbose=verbose)

