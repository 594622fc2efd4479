from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import Any

import yaml

from jobsort.config.schema import OUTPUT_FORMATS, JobSpec
from jobsort.util.errors import JobFileError

_ALLOWED_JOB_KEYS = {"tasks", "format"}
STDIN_PATH = Path("-")


def _duplicate_names(records: list[Any]) -> list[str]:
    names = Counter(
        record["name"]
        for record in records
        if isinstance(record, dict) and isinstance(record.get("name"), str)
    )
    return sorted(name for name, count in names.items() if count > 1)


def parse_job(content: str) -> JobSpec:
    """Decode a YAML or JSON job document into raw task records."""
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise JobFileError(f"failed to parse job document: {exc}") from exc

    if not isinstance(raw, dict) or "tasks" not in raw:
        raise JobFileError("Invalid job document. Expected 'tasks' key.")
    if any(not isinstance(key, str) for key in raw):
        raise JobFileError("job document keys must be strings")
    unknown = set(raw.keys()) - _ALLOWED_JOB_KEYS
    if unknown:
        raise JobFileError(f"job document contains unknown fields: {sorted(unknown)}")

    records = raw["tasks"]
    if not isinstance(records, list):
        raise JobFileError("job.tasks must be a list")

    fmt = raw.get("format")
    if fmt is not None and fmt not in OUTPUT_FORMATS:
        raise JobFileError(f"job.format must be one of {list(OUTPUT_FORMATS)}")

    duplicates = _duplicate_names(records)
    if duplicates:
        raise JobFileError(f"task names must be unique: {duplicates}")

    return JobSpec(records=records, format=fmt)


def load_job(path: Path) -> JobSpec:
    """Read a job document from path, or from stdin when path is '-'."""
    if path == STDIN_PATH:
        return parse_job(sys.stdin.read())
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise JobFileError(f"job file not found: {path}") from exc
    except UnicodeError as exc:
        raise JobFileError(f"failed to decode job file as utf-8: {path}") from exc
    except OSError as exc:
        raise JobFileError(f"failed to read job file: {path}") from exc
    return parse_job(content)
