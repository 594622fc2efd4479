"""Build lookup structures from tasks."""

from __future__ import annotations

from collections.abc import Sequence

from jobsort.config.schema import Task


def build_index(tasks: Sequence[Task]) -> dict[str, Task]:
    """Return tasks keyed by name; the first task with a given name wins."""
    index: dict[str, Task] = {}
    for task in tasks:
        index.setdefault(task.name, task)
    return index
