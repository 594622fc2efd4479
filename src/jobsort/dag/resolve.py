"""Dependency ordering of tasks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from jobsort.config.schema import Task, build_task
from jobsort.dag.build import build_index
from jobsort.dag.errors import (
    CircularDependencyError,
    MissingDependencyError,
    ResolutionError,
)

logger = logging.getLogger(__name__)


def order_tasks(tasks: Sequence[Task]) -> list[Task]:
    """
    Return tasks ordered so every task comes after the tasks it requires.

    Roots are expanded in input order and requirements in listed order; a task
    is appended as soon as all of its requirements are placed. Tasks already
    placed are skipped. Raises CircularDependencyError when a requirement points
    back into the active expansion path and MissingDependencyError when it names
    an unknown task.

    A cycle is reported as (task being expanded, dependency already in progress),
    so A -> B -> A with A listed first names "B" then "A". This is the edge that
    closed the cycle, not the root of the expansion.
    """
    index = build_index(tasks)
    edges = sum(len(task.requires) for task in tasks)
    logger.debug("ordering %d tasks with %d requirement edges", len(index), edges)

    ordered: list[Task] = []
    placed: set[str] = set()

    for root in tasks:
        if root.name in placed:
            continue
        in_progress = {root.name}
        stack: list[tuple[Task, Iterator[str]]] = [(root, iter(root.requires))]

        while stack:
            task, pending = stack[-1]
            for dep_name in pending:
                if dep_name in placed:
                    continue
                if dep_name in in_progress:
                    raise CircularDependencyError(task.name, dep_name)
                dep = index.get(dep_name)
                if dep is None:
                    raise MissingDependencyError(task.name, dep_name)
                in_progress.add(dep_name)
                stack.append((dep, iter(dep.requires)))
                break
            else:
                stack.pop()
                in_progress.discard(task.name)
                placed.add(task.name)
                ordered.append(task)

    return ordered


@dataclass(slots=True)
class Resolution:
    tasks: list[Task] = field(default_factory=list)
    error: ResolutionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_records(records: Iterable[Any]) -> Resolution:
    """Build tasks from raw records and order them, capturing resolver errors."""
    try:
        tasks = [build_task(record) for record in records]
        ordered = order_tasks(tasks)
    except ResolutionError as exc:
        logger.debug("resolution rejected: %s", exc)
        return Resolution(error=exc)
    return Resolution(tasks=ordered)
