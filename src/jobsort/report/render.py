from __future__ import annotations

import json
from collections.abc import Sequence

from jobsort.config.schema import Task
from jobsort.util.errors import JobSortError

SCRIPT_HEADER = "#!/usr/bin/env bash\n\n"


def to_payload(tasks: Sequence[Task]) -> dict[str, list[dict[str, str]]]:
    return {"data": [{"name": task.name, "command": task.command} for task in tasks]}


def render_json(tasks: Sequence[Task]) -> str:
    return json.dumps(to_payload(tasks), ensure_ascii=False, indent=2)


def render_script(tasks: Sequence[Task]) -> str:
    """Render commands in order, one per line, after the bash header."""
    return SCRIPT_HEADER + "\n".join(task.command for task in tasks)


def render_error(exc: JobSortError) -> str:
    return json.dumps({"error": str(exc)}, ensure_ascii=False, indent=2)
