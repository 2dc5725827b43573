"""
Named build targets.

Task names (camelCase where the targets have always been spelled that way):

    connect               PHP development server on public/
    sass                  front/sass/**/*.scss -> public/dist/*.css
    typescript            front/ts/*.ts -> public/dist/global.js
    serviceWorker         public/sw.ts -> sw.js (minified)
    vendor_dependencies   font-awesome fonts -> public/fonts
    frontCompile          parallel(sass, typescript, serviceWorker, vendor_dependencies)
    cleanMinify           delete public/dist/*.min.*
    minify                series(parallel(cleanMinify, frontCompile), parallel(minifyJs, minifyCss))
    packing               package the rendered page into index.html
    one-file              series(minify, packing)
    composerInstall       composer install
    composerUpdate        composer update
    init                  composer create-project
    watch                 re-run tasks when their sources change
    build                 parallel(connect, frontCompile, watch)
"""

from functools import partial
from typing import Dict, List, Tuple

from vitae.contexts.assets import (
    clean_minify,
    compile_sass,
    compile_service_worker,
    compile_typescript,
    copy_vendor_fonts,
    minify_app_script,
    minify_app_stylesheet,
)
from vitae.contexts.packaging import package_one_file
from vitae.contexts.serving import run_composer, start_dev_server
from vitae.pipeline.context import TaskContext
from vitae.pipeline.logger import _log_info
from vitae.pipeline.tasks import Task, parallel, series

DEFAULT_TASK = "build"


def connect(ctx: TaskContext) -> None:
    ctx.processes.append(start_dev_server(ctx.config))


def run_clean_minify(ctx: TaskContext) -> None:
    clean_minify(ctx.config)


def run_packing(ctx: TaskContext) -> None:
    package_one_file(ctx.config)


def watch_table(ctx: TaskContext, tasks: Dict[str, Task]) -> List[Tuple[str, List[str], List[Task]]]:
    """
    (label, patterns, tasks to run) for every watched source group.

    JSON content and PHP templates are rendered on request, so their changes
    are only announced.
    """
    config = ctx.config
    return [
        ("sass", [config.sass_sources], [tasks["sass"]]),
        ("typescript", [config.typescript_sources, config.type_definitions], [tasks["typescript"]]),
        ("serviceWorker", [config.service_worker_source], [tasks["serviceWorker"]]),
        ("content", [config.json_sources, config.php_sources], []),
        ("composer.lock", [config.composer_lock], [tasks["composerInstall"]]),
        ("composer.json", [config.composer_json], [tasks["composerUpdate"]]),
    ]


def watch(ctx: TaskContext, tasks: Dict[str, Task]) -> None:
    """Register the watch table and poll until ctx.stop_event is set."""
    for label, patterns, targets in watch_table(ctx, tasks):
        callbacks = [partial(_run_on_change, task, ctx) for task in targets]
        ctx.watcher.add(label, patterns, *callbacks)
    _log_info("Watching for changes (Ctrl-C to stop)")
    ctx.watcher.run(ctx.stop_event)


def _run_on_change(task: Task, ctx: TaskContext, path) -> None:
    # Task reports its own failures; the watch loop keeps going
    task(ctx)


def build_task_graph() -> Dict[str, Task]:
    """
    Create every named target.

    Returns:
        Mapping of task name to Task, group tasks included
    """
    tasks: Dict[str, Task] = {}

    def add(task: Task) -> Task:
        tasks[task.name] = task
        return task

    add(Task("connect", connect, "Start the PHP development server on public/"))
    add(Task("sass", lambda ctx: compile_sass(ctx.config, verbose=ctx.verbose), "Compile Sass to public/dist"))
    add(Task(
        "typescript",
        lambda ctx: compile_typescript(ctx.config, verbose=ctx.verbose),
        "Compile TypeScript to public/dist/global.js",
    ))
    add(Task(
        "serviceWorker",
        lambda ctx: compile_service_worker(ctx.config, verbose=ctx.verbose),
        "Compile and minify the service worker to sw.js",
    ))
    add(Task("vendor_dependencies", lambda ctx: copy_vendor_fonts(ctx.config), "Copy vendor fonts to public/fonts"))
    add(Task("cleanMinify", run_clean_minify, "Delete minified artifacts"))
    add(Task(
        "minifyJs",
        lambda ctx: minify_app_script(ctx.config, verbose=ctx.verbose),
        "Minify global.js to global.min.js",
    ))
    add(Task("minifyCss", lambda ctx: minify_app_stylesheet(ctx.config), "Minify global.css to global.min.css"))
    add(Task("composerInstall", lambda ctx: run_composer(ctx.config, "install"), "Run composer install"))
    add(Task("composerUpdate", lambda ctx: run_composer(ctx.config, "update"), "Run composer update"))
    add(Task("init", lambda ctx: run_composer(ctx.config, "create-project"), "Run composer create-project"))
    add(Task("packing", run_packing, "Package the rendered page into one HTML file"))

    add(parallel(
        tasks["sass"], tasks["typescript"], tasks["serviceWorker"], tasks["vendor_dependencies"],
        name="frontCompile",
    ))
    add(series(
        parallel(tasks["cleanMinify"], tasks["frontCompile"], name="cleanAndCompile"),
        parallel(tasks["minifyJs"], tasks["minifyCss"], name="minifyBundles"),
        name="minify",
    ))
    add(series(tasks["minify"], tasks["packing"], name="one-file"))
    add(Task("watch", partial(watch, tasks=tasks), "Re-run tasks when their sources change"))
    add(parallel(tasks["connect"], tasks["frontCompile"], tasks["watch"], name="build"))
    return tasks


TASKS = build_task_graph()
