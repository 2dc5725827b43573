"""
Task graph primitives.

A Task wraps one action taking the TaskContext. series() and parallel()
compose tasks into groups that are themselves tasks, so the named build
targets are plain nested structures.

Every task failure is reported exactly once, by the leaf that failed, through
ctx.reporter. Groups only aggregate child results.

Example:
    front = parallel(Task("sass", run_sass), Task("typescript", run_tsc), name="frontCompile")
    result = series(front, Task("packing", run_packer), name="one-file")(ctx)
    result.success
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from vitae.pipeline.context import TaskContext
from vitae.pipeline.logger import _log_debug, log_task_result, log_task_start


@dataclass
class TaskResult:
    """
    Outcome of one task node.

    Attributes:
        name: Task name
        success: Whether the task (and, for groups, every child run) succeeded
        errors: One-line error messages, children's included
        elapsed_s: Wall-clock duration in seconds
        children: Results of the child tasks that ran (groups only)
    """

    name: str
    success: bool
    errors: List[str] = field(default_factory=list)
    elapsed_s: float = 0.0
    children: List["TaskResult"] = field(default_factory=list)

    def find(self, name: str) -> Optional["TaskResult"]:
        """Depth-first lookup of a (possibly nested) result by task name."""
        if self.name == name:
            return self
        for child in self.children:
            found = child.find(name)
            if found is not None:
                return found
        return None


class Task:
    """
    Leaf task.

    The action may return None (success), a TaskResult, or any result object
    with ``success`` and ``errors`` attributes such as CompilationResult.
    Other return values count as success. Exceptions raised by the action
    are reported and turned into a failed TaskResult; KeyboardInterrupt
    propagates.
    """

    def __init__(self, name: str, action: Optional[Callable] = None, description: str = ""):
        self.name = name
        self.action = action
        self.description = description

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def __call__(self, ctx: TaskContext) -> TaskResult:
        log_task_start(self.name)
        start_time = time.time()
        try:
            result = self.run(ctx)
        except Exception as e:
            message = ctx.reporter.report(e, task=self.name, details=_error_details(e))
            result = TaskResult(name=self.name, success=False, errors=[message])
        result.elapsed_s = time.time() - start_time
        log_task_result(result)
        return result

    def run(self, ctx: TaskContext) -> TaskResult:
        outcome = self.action(ctx) if self.action is not None else None
        if outcome is None:
            return TaskResult(name=self.name, success=True)
        if isinstance(outcome, TaskResult):
            return outcome
        if getattr(outcome, "success", True):
            return TaskResult(name=self.name, success=True)

        message = ctx.reporter.report(outcome, task=self.name, details=getattr(outcome, "stderr", None))
        errors = list(getattr(outcome, "errors", [])) or [message]
        return TaskResult(name=self.name, success=False, errors=errors)


class TaskGroup(Task):
    """Named group of child tasks."""

    def __init__(self, name: str, tasks: List[Task]):
        super().__init__(name)
        self.tasks = list(tasks)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.tasks!r})"

    def _aggregate(self, children: List[TaskResult]) -> TaskResult:
        return TaskResult(
            name=self.name,
            success=all(child.success for child in children),
            errors=[error for child in children for error in child.errors],
            children=children,
        )


class Series(TaskGroup):
    """Runs children in order, stopping at the first failure."""

    def run(self, ctx: TaskContext) -> TaskResult:
        children = []
        for task in self.tasks:
            result = task(ctx)
            children.append(result)
            if not result.success:
                skipped = [t.name for t in self.tasks[len(children):]]
                if skipped:
                    _log_debug(f"'{self.name}' stopped after '{task.name}' failed; skipped {skipped}")
                break
        return self._aggregate(children)


class Parallel(TaskGroup):
    """Runs children concurrently and waits for all of them."""

    def run(self, ctx: TaskContext) -> TaskResult:
        if not self.tasks:
            return self._aggregate([])
        with ThreadPoolExecutor(max_workers=len(self.tasks), thread_name_prefix=self.name) as executor:
            futures = [executor.submit(task, ctx) for task in self.tasks]
            try:
                children = [future.result() for future in futures]
            except KeyboardInterrupt:
                # Long-running children (watch) only return once stopped
                ctx.stop_event.set()
                raise
        return self._aggregate(children)


def series(*tasks: Task, name: str = "series") -> Series:
    return Series(name, list(tasks))


def parallel(*tasks: Task, name: str = "parallel") -> Parallel:
    return Parallel(name, list(tasks))


def _error_details(error: Exception) -> Optional[str]:
    details = getattr(error, "stderr", None)
    if isinstance(details, bytes):
        details = details.decode("utf-8", errors="replace")
    return details or None
