"""
Minification of compiled assets.

JavaScript goes through terser (top-level mangling, console calls dropped).
CSS is re-serialized in-process by the shared CSS parser, which keeps
/*! license */ comments so the single-file packager can still collect them.
"""

import re
import time
from pathlib import Path
from typing import List

from vitae.contexts.assets.logger import _log_debug, _log_info, _log_success
from vitae.contexts.assets.tools import CompilationResult, finish_step, run_tool
from vitae.utils.config import BuildConfig
from vitae.utils.css_parser import CSSParseError, minify_css
from vitae.utils.tools import resolve_tool

MINIFIED_SUFFIX = ".min"
APP_STYLESHEET = "global.css"
APP_SCRIPT = "global.js"


def minified_name(path: Path) -> Path:
    """global.js -> global.min.js"""
    return path.with_name(f"{path.stem}{MINIFIED_SUFFIX}{path.suffix}")


def terser_options(config: BuildConfig) -> List[str]:
    """Command-line options equivalent to the site's uglify settings."""
    compress = ["drop_console=true"] if config.drop_console else []
    options = ["--compress", ",".join(compress)] if compress else ["--compress"]
    options += ["--mangle", "toplevel"] if config.mangle_toplevel else ["--mangle"]
    return options


def clean_minify(config: BuildConfig) -> List[Path]:
    """
    Delete previously minified artifacts (dist/*.min.*).

    Returns:
        Paths that were removed
    """
    removed = []
    if not config.dist_dir.exists():
        return removed
    for path in sorted(config.dist_dir.glob(f"*{MINIFIED_SUFFIX}.*")):
        if path.is_file():
            path.unlink()
            removed.append(path)
    _log_debug(f"Removed {len(removed)} minified artifact(s)")
    return removed


def minify_js(
    config: BuildConfig, source: Path, destination: Path, verbose: bool = False
) -> CompilationResult:
    """
    Minify one JavaScript file with terser.

    Args:
        config: Build configuration
        source: Input script
        destination: Output path (may equal ``source``)
        verbose: Log tool output even on success
    """
    if not source.exists():
        return CompilationResult(success=False, errors=[f"Script not found: {source}"])

    terser = resolve_tool(config.terser_command)
    destination.parent.mkdir(parents=True, exist_ok=True)
    start_time = time.time()
    cmd = [terser, source, "--output", destination, *terser_options(config)]
    proc = run_tool(cmd, cwd=config.project_root)

    errors = [m.group(1).strip() for m in re.finditer(r"^(?:Parse error|ERROR): (.+)$", proc.stderr, re.MULTILINE)]
    warnings = [m.group(1).strip() for m in re.finditer(r"^WARN: (.+)$", proc.stderr, re.MULTILINE)]
    return finish_step("terser", proc, [destination], errors, warnings, start_time, verbose)


def minify_stylesheet(source: Path, destination: Path) -> CompilationResult:
    """
    Minify one CSS file in-process.

    License comments survive; ordinary comments and whitespace do not.
    The result depends only on the input text, so re-running on unchanged
    sources produces byte-identical output.
    """
    if not source.exists():
        return CompilationResult(success=False, errors=[f"Stylesheet not found: {source}"])

    css = source.read_text(encoding="utf-8")
    try:
        minified = minify_css(css, keep_licenses=True)
    except CSSParseError as e:
        return CompilationResult(success=False, errors=[f"{source.name}: {e}"])

    destination.write_text(minified, encoding="utf-8")
    _log_success(f"Minified {source.name}: {len(css):,} -> {len(minified):,} bytes")
    return CompilationResult(success=True, outputs=[destination])


def minify_app_script(config: BuildConfig, verbose: bool = False) -> CompilationResult:
    """dist/global.js -> dist/global.min.js"""
    source = config.dist_dir / APP_SCRIPT
    _log_info(f"Minifying {source.name}")
    return minify_js(config, source, minified_name(source), verbose=verbose)


def minify_app_stylesheet(config: BuildConfig) -> CompilationResult:
    """dist/global.css -> dist/global.min.css"""
    source = config.dist_dir / APP_STYLESHEET
    _log_info(f"Minifying {source.name}")
    return minify_stylesheet(source, minified_name(source))
