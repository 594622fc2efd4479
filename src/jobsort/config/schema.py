from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from jobsort.dag.errors import InvalidTaskError


@dataclass(frozen=True, slots=True)
class Task:
    name: str
    command: str
    requires: tuple[str, ...] = field(default_factory=tuple)


def _is_non_blank_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def build_task(record: Any) -> Task:
    """Build a task from a raw record, rejecting records without name or command."""
    if not isinstance(record, Mapping):
        raise InvalidTaskError(record)
    name = record.get("name")
    command = record.get("command")
    if not _is_non_blank_str(name) or not _is_non_blank_str(command):
        raise InvalidTaskError(record)

    requires = record.get("requires")
    if requires is None:
        requires = []
    if not isinstance(requires, (list, tuple)) or not all(isinstance(r, str) for r in requires):
        raise InvalidTaskError(record)

    return Task(name=name, command=command, requires=tuple(requires))


OUTPUT_FORMATS = ("json", "bash")


@dataclass(slots=True)
class JobSpec:
    records: list[Any]
    format: str | None = None
