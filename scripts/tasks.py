#!/usr/bin/env python3
"""
Site Build Tasks CLI

Compiles the front-end assets, packages the standalone page, serves the site
and keeps everything rebuilt while sources change.

Commands:
    build               - Dev server + compile + watch (default)
    connect             - PHP development server on public/
    sass                - Compile Sass to public/dist
    typescript          - Compile TypeScript to public/dist/global.js
    service-worker      - Compile and minify public/sw.ts to sw.js
    vendor-dependencies - Copy vendor fonts to public/fonts
    clean-minify        - Delete public/dist/*.min.*
    minify              - Clean, compile, then minify global.js and global.css
    one-file            - Minify, then package the page into index.html
    watch               - Re-run tasks when their sources change
    composer-install    - composer install
    composer-update     - composer update
    init                - composer create-project

Examples:\n

    tasks.py                                # Serve, compile and watch

    tasks.py one-file                       # Standalone index.html

    tasks.py --verbose sass                 # Show compiler output

    tasks.py --config config/ci.yaml minify # Alternative configuration

    tasks.py --no-notify watch              # No desktop notifications
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from vitae.contexts.assets.logger import setup_assets_logger
from vitae.contexts.packaging.logger import setup_packaging_logger
from vitae.pipeline import DEFAULT_TASK, TASKS, TaskContext, TaskResult
from vitae.pipeline.logger import setup_tasks_logger
from vitae.utils.config import BuildConfig, load_build_config
from vitae.utils.logger import session_log_dir
from vitae.utils.timestamp import format_duration

load_dotenv()
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", Path.cwd()))

ASSET_TASKS = {
    "sass",
    "typescript",
    "serviceWorker",
    "vendor_dependencies",
    "cleanMinify",
    "minify",
}


def display_path(path: Path) -> str:
    """Return path relative to PROJECT_ROOT for cleaner display."""
    try:
        return str(path.relative_to(PROJECT_ROOT))
    except ValueError:
        return str(path)


def configure_logging(task_name: str, config: BuildConfig, config_path: Optional[Path], verbose: bool) -> Path:
    """Set up the session log for one target and return the log file."""
    log_dir = session_log_dir(task_name)
    console_level = "DEBUG" if verbose else "INFO"
    if task_name == "one-file":
        return setup_packaging_logger(log_dir, renderer=" ".join(config.renderer_command()), console_level=console_level)
    if task_name in ASSET_TASKS:
        tools = {
            "Sass": config.sass_command,
            "TypeScript": config.tsc_command,
            "Terser": config.terser_command,
        }
        return setup_assets_logger(log_dir, tools=tools, console_level=console_level)
    return setup_tasks_logger(log_dir, task_name, str(config_path or "default"), console_level=console_level)


def wait_for_processes(task_ctx: TaskContext) -> None:
    """Block until every background process exits, reporting abnormal exits."""
    for process in list(task_ctx.processes):
        returncode = process.wait()
        if returncode != 0:
            task_ctx.reporter.report(f"Development server exited with status {returncode}", task="connect")


def print_summary(result: TaskResult, log_file: Path) -> None:
    typer.echo("")
    if result.success:
        typer.secho(
            f"✓ {result.name} finished after {format_duration(result.elapsed_s)}",
            fg=typer.colors.GREEN,
            bold=True,
        )
    else:
        typer.secho(f"✗ {result.name} failed with {len(result.errors)} errors", fg=typer.colors.RED, bold=True)
        typer.echo("\nErrors:")
        for error in result.errors[:10]:  # Limit to first 10
            typer.secho(f"  - {error}", fg=typer.colors.RED)
        if len(result.errors) > 10:
            typer.echo(f"  ... and {len(result.errors) - 10} more")
    typer.echo(f"  Log: {display_path(log_file)}")
    typer.echo("")


def run_target(ctx: typer.Context, task_name: str) -> None:
    """Run one named target and exit with its status."""
    options = ctx.obj or {}
    config_path = options.get("config")
    verbose = options.get("verbose", False)
    notifications = False if options.get("no_notify") else None

    config = load_build_config(config_path, notifications=notifications)
    log_file = configure_logging(task_name, config, config_path, verbose)
    task_ctx = TaskContext.from_config(config, verbose=verbose)

    typer.secho(f"\nRunning: {task_name}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Project: {config.project_root}")
    typer.echo("")

    try:
        result = TASKS[task_name](task_ctx)
        if result.success and task_name == "connect":
            wait_for_processes(task_ctx)
    except KeyboardInterrupt:
        typer.secho("\nInterrupted, shutting down", fg=typer.colors.YELLOW)
        raise typer.Exit(code=0)
    finally:
        task_ctx.shutdown()

    print_summary(result, log_file)
    raise typer.Exit(code=0 if result.success and not task_ctx.reporter.failed else 1)


app = typer.Typer(
    help="Build, package and serve the résumé site",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Pipeline configuration file (default: VITAE_CONFIG or config/pipeline.yaml)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show detailed tool output (compiler stdout/stderr)",
        ),
    ] = False,
    no_notify: Annotated[
        bool,
        typer.Option(
            "--no-notify",
            help="Disable desktop notifications on failure",
        ),
    ] = False,
):
    """Run the default build target when no command is provided."""
    ctx.obj = {"config": config, "verbose": verbose, "no_notify": no_notify}
    if ctx.invoked_subcommand is None:
        run_target(ctx, DEFAULT_TASK)


@app.command("build")
def build_command(ctx: typer.Context):
    """
    Start the dev server, compile everything and watch for changes.

    Runs until interrupted with Ctrl-C.
    """
    run_target(ctx, "build")


@app.command("connect")
def connect_command(ctx: typer.Context):
    """Serve public/ with the PHP development server until interrupted."""
    run_target(ctx, "connect")


@app.command("sass")
def sass_command(ctx: typer.Context):
    """Compile front/sass/**/*.scss to public/dist/*.css."""
    run_target(ctx, "sass")


@app.command("typescript")
def typescript_command(ctx: typer.Context):
    """Compile front/ts/*.ts to public/dist/global.js (ES5, AMD)."""
    run_target(ctx, "typescript")


@app.command("service-worker")
def service_worker_command(ctx: typer.Context):
    """Compile public/sw.ts to sw.js at the project root and minify it."""
    run_target(ctx, "serviceWorker")


@app.command("vendor-dependencies")
def vendor_dependencies_command(ctx: typer.Context):
    """Copy the font-awesome web fonts into public/fonts."""
    run_target(ctx, "vendor_dependencies")


@app.command("clean-minify")
def clean_minify_command(ctx: typer.Context):
    """Delete previously minified files (public/dist/*.min.*)."""
    run_target(ctx, "cleanMinify")


@app.command("minify")
def minify_command(ctx: typer.Context):
    """
    Clean and recompile, then minify the bundles.

    Produces public/dist/global.min.js and public/dist/global.min.css.
    """
    run_target(ctx, "minify")


@app.command("one-file")
def one_file_command(ctx: typer.Context):
    """
    Minify, then package the rendered page into a standalone index.html.

    The stylesheet is purged and inlined, license notices move into the page,
    and the icon font subset is embedded as a data URI.

    Examples:\n

        $ tasks.py one-file                # Write index.html

        $ tasks.py --verbose one-file      # Include renderer and tool output
    """
    run_target(ctx, "one-file")


@app.command("watch")
def watch_command(ctx: typer.Context):
    """Re-run the matching task whenever a source file changes."""
    run_target(ctx, "watch")


@app.command("composer-install")
def composer_install_command(ctx: typer.Context):
    """Run composer install."""
    run_target(ctx, "composerInstall")


@app.command("composer-update")
def composer_update_command(ctx: typer.Context):
    """Run composer update."""
    run_target(ctx, "composerUpdate")


@app.command("init")
def init_command(ctx: typer.Context):
    """Run composer create-project in the project root."""
    run_target(ctx, "init")


if __name__ == "__main__":
    app()
