"""Errors raised while building or ordering tasks."""

from __future__ import annotations

from typing import Any

from jobsort.util.errors import JobSortError


class ResolutionError(JobSortError):
    """Base for client-data errors of the resolver."""


class InvalidTaskError(ResolutionError):
    """A raw record lacks a usable name or command."""

    def __init__(self, record: Any) -> None:
        self.record = record
        super().__init__(
            f"Invalid task format: A task must have a name and a command. {record!r}."
        )


class MissingDependencyError(ResolutionError):
    """A task requires a name that is not part of the job."""

    def __init__(self, task: str, dependency: str) -> None:
        self.task = task
        self.dependency = dependency
        super().__init__(f'Missing dependency: "{task}" requires unknown task "{dependency}".')


class CircularDependencyError(ResolutionError):
    """A requirement edge points back into the active expansion path."""

    def __init__(self, task: str, dependency: str) -> None:
        self.task = task
        self.dependency = dependency
        super().__init__(f'Circular dependency detected: between "{task}" and "{dependency}".')
