"""
Pipeline

Responsibilities:
- Composes context operations into named targets (series/parallel groups)
- Funnels every task failure through the TaskContext's ErrorReporter
- Drives the watch loop with the tasks that rebuild changed sources

Owns: Task ordering and the shared TaskContext
Never: Implements compilation, packaging or serving itself
"""

from vitae.pipeline.context import TaskContext
from vitae.pipeline.graph import DEFAULT_TASK, TASKS, build_task_graph
from vitae.pipeline.tasks import Parallel, Series, Task, TaskResult, parallel, series

__all__ = [
    "TaskContext",
    "Task",
    "TaskResult",
    "Series",
    "Parallel",
    "series",
    "parallel",
    "build_task_graph",
    "TASKS",
    "DEFAULT_TASK",
]
