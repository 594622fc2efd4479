from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from jobsort.cli import app

runner = CliRunner()
SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def _write_job(path: Path, content: str) -> None:
    path.write_text(content.strip() + "\n", encoding="utf-8")


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env.pop("JOBSORT_FORMAT", None)
    return subprocess.run(
        [sys.executable, "-m", "jobsort.cli", *args],
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )


@pytest.fixture
def job_path(tmp_path: Path) -> Path:
    path = tmp_path / "job.yaml"
    _write_job(
        path,
        """
        tasks:
          - name: task1
            command: command1
            requires: [task2]
          - name: task2
            command: command2
        """,
    )
    return path


def test_cli_sort_prints_json_payload(job_path: Path) -> None:
    proc = _run_cli("sort", str(job_path))

    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout) == {
        "data": [
            {"name": "task2", "command": "command2"},
            {"name": "task1", "command": "command1"},
        ]
    }


def test_cli_sort_prints_bash_script(job_path: Path) -> None:
    proc = _run_cli("sort", str(job_path), "--format", "bash")

    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == "#!/usr/bin/env bash\n\ncommand2\ncommand1\n"


def test_cli_sort_uses_format_from_job_document(tmp_path: Path) -> None:
    path = tmp_path / "job.json"
    _write_job(path, '{"format": "bash", "tasks": [{"name": "a", "command": "echo a"}]}')

    proc = _run_cli("sort", str(path))

    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.splitlines() == ["#!/usr/bin/env bash", "", "echo a"]


def test_cli_sort_circular_dependency_returns_two_with_error_payload(tmp_path: Path) -> None:
    path = tmp_path / "cycle.yaml"
    _write_job(
        path,
        """
        tasks:
          - name: task1
            command: command1
            requires: [task2]
          - name: task2
            command: command2
            requires: [task1]
        """,
    )

    proc = _run_cli("sort", str(path))

    assert proc.returncode == 2
    assert json.loads(proc.stdout) == {
        "error": 'Circular dependency detected: between "task2" and "task1".'
    }


def test_cli_sort_bash_invalid_task_writes_no_script(tmp_path: Path) -> None:
    path = tmp_path / "invalid.yaml"
    _write_job(
        path,
        """
        tasks:
          - name: task1
            command: command1
          - name: task2
        """,
    )

    proc = _run_cli("sort", str(path), "--format", "bash")

    assert proc.returncode == 2
    assert proc.stdout == ""
    assert "Invalid task format" in proc.stderr


def test_cli_sort_missing_dependency_returns_two(tmp_path: Path) -> None:
    path = tmp_path / "missing.yaml"
    _write_job(
        path,
        """
        tasks:
          - name: deploy
            command: ./deploy
            requires: [build]
        """,
    )

    proc = _run_cli("sort", str(path))

    assert proc.returncode == 2
    assert "unknown task" in json.loads(proc.stdout)["error"]


def test_cli_sort_rejects_unknown_format(job_path: Path) -> None:
    proc = _run_cli("sort", str(job_path), "--format", "xml")

    assert proc.returncode == 2
    assert proc.stdout == ""
    assert "Invalid format" in proc.stderr


def test_cli_sort_reports_missing_job_file(tmp_path: Path) -> None:
    proc = _run_cli("sort", str(tmp_path / "absent.yaml"))

    assert proc.returncode == 2
    assert "job file not found" in json.loads(proc.stdout)["error"]


def test_cli_sort_reports_job_file_error_as_json_payload(tmp_path: Path) -> None:
    path = tmp_path / "owner.yaml"
    _write_job(path, "tasks: []\nowner: me")

    proc = _run_cli("sort", str(path))

    assert proc.returncode == 2
    assert json.loads(proc.stdout) == {
        "error": "job document contains unknown fields: ['owner']"
    }


def test_cli_sort_bash_reports_job_file_error_on_stderr(tmp_path: Path) -> None:
    path = tmp_path / "no_tasks.yaml"
    _write_job(path, "owner: me")

    proc = _run_cli("sort", str(path), "--format", "bash")

    assert proc.returncode == 2
    assert proc.stdout == ""
    assert "Expected 'tasks' key" in proc.stderr


def test_cli_sort_writes_output_file(job_path: Path, tmp_path: Path) -> None:
    destination = tmp_path / "run.sh"

    proc = _run_cli("sort", str(job_path), "--format", "bash", "--output", str(destination))

    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == ""
    assert destination.read_text(encoding="utf-8") == "#!/usr/bin/env bash\n\ncommand2\ncommand1\n"


def test_cli_sort_reads_stdin() -> None:
    result = runner.invoke(
        app,
        ["sort", "-", "--format", "bash"],
        input='{"tasks": [{"name": "a", "command": "echo a"}]}',
    )

    assert result.exit_code == 0
    assert "echo a" in result.output


def test_cli_sort_reads_format_from_environment(job_path: Path) -> None:
    result = runner.invoke(app, ["sort", str(job_path)], env={"JOBSORT_FORMAT": "bash"})

    assert result.exit_code == 0
    assert "#!/usr/bin/env bash" in result.output


def test_cli_show_prints_resolved_order(job_path: Path) -> None:
    result = runner.invoke(app, ["show", str(job_path)])

    assert result.exit_code == 0
    assert "Resolved Order" in result.output
    assert result.output.index("task2") < result.output.index("task1")


def test_cli_check_reports_task_count(job_path: Path) -> None:
    result = runner.invoke(app, ["check", str(job_path)])

    assert result.exit_code == 0
    assert "ok: 2 tasks" in result.output


def test_cli_check_rejects_self_cycle(tmp_path: Path) -> None:
    path = tmp_path / "self.yaml"
    _write_job(path, '{"tasks": [{"name": "a", "command": "echo a", "requires": ["a"]}]}')

    result = runner.invoke(app, ["check", str(path)])

    assert result.exit_code == 2
