from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jobsort.config.loader import load_job
from jobsort.config.schema import OUTPUT_FORMATS, JobSpec, Task
from jobsort.dag.resolve import resolve_records
from jobsort.report.render import render_error, render_json, render_script
from jobsort.util.errors import JobFileError
from jobsort.util.logging_setup import setup_logging

app = typer.Typer(help="Order job tasks by their declared dependencies")
console = Console()
err_console = Console(stderr=True, soft_wrap=True)
logger = logging.getLogger(__name__)

_DEFAULT_FORMAT = "json"


def _load_job_or_exit(job_path: Path, fmt: str) -> JobSpec:
    try:
        return load_job(job_path)
    except JobFileError as exc:
        if fmt == "json":
            typer.echo(render_error(exc))
        else:
            err_console.print(f"[red]Job file error:[/red] {escape(str(exc))}")
        raise typer.Exit(2) from exc


def _check_format_or_exit(requested: str | None) -> None:
    if requested is not None and requested not in OUTPUT_FORMATS:
        err_console.print(f"[red]Invalid format:[/red] {escape(requested)}")
        raise typer.Exit(2)


def _resolve_or_exit(job: JobSpec, fmt: str = _DEFAULT_FORMAT) -> list[Task]:
    resolution = resolve_records(job.records)
    if resolution.error is not None:
        if fmt == "json":
            typer.echo(render_error(resolution.error))
        else:
            detail = escape(str(resolution.error))
            err_console.print(f"[red]Job validation error:[/red] {detail}")
        raise typer.Exit(2) from resolution.error
    return resolution.tasks


def _write_output(rendered: str, destination: Path) -> None:
    try:
        destination.write_text(rendered + "\n", encoding="utf-8")
    except OSError as exc:
        detail = escape(f"{destination}: {exc}")
        err_console.print(f"[red]Failed to write output:[/red] {detail}")
        raise typer.Exit(2) from exc


@app.command()
def sort(
    job_path: Annotated[Path, typer.Argument(help="Job document, or '-' for stdin")],
    output_format: Annotated[
        str | None, typer.Option("--format", envvar="JOBSORT_FORMAT", help="json or bash")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    setup_logging(verbose=verbose)
    _check_format_or_exit(output_format)
    job = _load_job_or_exit(job_path, output_format or _DEFAULT_FORMAT)
    fmt = output_format or job.format or _DEFAULT_FORMAT
    tasks = _resolve_or_exit(job, fmt)
    logger.info("resolved %d tasks", len(tasks))

    rendered = render_script(tasks) if fmt == "bash" else render_json(tasks)
    if output is None:
        typer.echo(rendered)
    else:
        _write_output(rendered, output)
        err_console.print(f"written: {output}")


@app.command()
def show(
    job_path: Annotated[Path, typer.Argument(help="Job document, or '-' for stdin")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    setup_logging(verbose=verbose)
    job = _load_job_or_exit(job_path, "table")
    tasks = _resolve_or_exit(job, "table")

    table = Table(title="Resolved Order")
    table.add_column("#", justify="right")
    table.add_column("name")
    table.add_column("command")
    table.add_column("requires")
    for idx, task in enumerate(tasks, start=1):
        requires = ", ".join(task.requires) or "-"
        table.add_row(str(idx), escape(task.name), escape(task.command), escape(requires))
    console.print(table)


@app.command()
def check(
    job_path: Annotated[Path, typer.Argument(help="Job document, or '-' for stdin")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    setup_logging(verbose=verbose)
    job = _load_job_or_exit(job_path, "text")
    tasks = _resolve_or_exit(job, "text")
    console.print(f"ok: [bold]{len(tasks)}[/bold] tasks")


if __name__ == "__main__":
    app()
