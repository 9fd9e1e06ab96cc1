"""
Root Typer application for the taskchain CLI.

Jobs are loaded from a zero-argument factory given as ``module:attr``::

    taskchain run examples.recipe:build_recipe_job --max-retries 2
    taskchain show examples.recipe:build_recipe_job
"""

from __future__ import annotations

import asyncio
import dataclasses
import json

import typer
from rich.markup import escape
from rich.table import Table

from taskchain.cli.reporter import ConsoleReporter
from taskchain.cli.utils import console, err_console, load_job_definition, output_result
from taskchain.core.errors import TaskchainError
from taskchain.core.events.memory import InMemoryEventBus
from taskchain.core.logging import configure_logging
from taskchain.core.settings import TaskchainSettings
from taskchain.execution.engine import JobEngine
from taskchain.execution.models import BehaviorPolicy, JobDefinition, JobResult

app = typer.Typer(
    name="taskchain",
    help="taskchain — run sequential jobs with retry, skip and termination.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from taskchain import __version__

        typer.echo(f"taskchain {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """taskchain CLI — run and inspect jobs."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("run")
def run_job(
    factory: str = typer.Argument(..., help="Job factory as module:attr"),
    app_dir: str = typer.Option(".", "--app-dir", help="Directory prepended to sys.path for the factory import."),
    max_retries: int | None = typer.Option(None, "--max-retries", min=0, help="Engine-wide retry budget."),
    skip_on_fail: bool | None = typer.Option(
        None, "--skip-on-fail/--no-skip-on-fail", help="Skip tasks whose retries are exhausted."
    ),
    no_break_on_error: bool | None = typer.Option(
        None,
        "--no-break-on-error/--break-on-error",
        help="Treat raised errors as recoverable failures.",
    ),
    terminate_after: float | None = typer.Option(
        None, "--terminate-after", min=0, help="Request termination after N seconds."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (default from settings)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print lifecycle events."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Register a job from a factory and run it once."""
    settings = TaskchainSettings()
    # loggers follow sys.stdout when it is swapped (e.g. under CliRunner)
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_json,
        cache_loggers=False,
    )

    overrides = {
        "max_retries": max_retries,
        "skip_item_on_fail": skip_on_fail,
        "do_not_break_on_error": no_break_on_error,
    }
    defaults = dataclasses.replace(
        settings.default_behavior(),
        **{k: v for k, v in overrides.items() if v is not None},
    )

    try:
        job = load_job_definition(factory, app_dir)
        result = asyncio.run(
            _run(job, defaults, terminate_after=terminate_after, quiet=quiet or json_out)
        )
    except TaskchainError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {escape(exc.message)}")
        raise typer.Exit(code=1) from exc

    output_result(result, as_json=json_out)
    if result.failed_count:
        raise typer.Exit(code=1)


@app.command("show")
def show_job(
    factory: str = typer.Argument(..., help="Job factory as module:attr"),
    app_dir: str = typer.Option(".", "--app-dir", help="Directory prepended to sys.path for the factory import."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show a job's tasks and their behavior overrides."""
    try:
        job = load_job_definition(factory, app_dir)
    except TaskchainError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {escape(exc.message)}")
        raise typer.Exit(code=1) from exc

    rows = [
        {
            "index": i,
            "task": task.label,
            "delay": task.delay,
            "has_data": task.data is not None,
            "behavior": task.behavior.to_dict() if task.behavior else None,
        }
        for i, task in enumerate(job.tasks, start=1)
    ]

    if json_out:
        console.print_json(json.dumps({"name": job.name, "tasks": rows}, default=str))
        return

    table = Table(title=f"Job: {escape(job.name)}", show_lines=False, pad_edge=False)
    for col in ("index", "task", "delay", "has_data", "behavior"):
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(escape(str(v)) for v in row.values()))
    console.print(table)


# ── Helpers ──────────────────────────────────────────────────────────────


async def _run(
    job: JobDefinition,
    defaults: BehaviorPolicy,
    *,
    terminate_after: float | None,
    quiet: bool,
) -> JobResult:
    bus = InMemoryEventBus()
    if not quiet:
        await ConsoleReporter().attach(bus)

    engine = JobEngine(defaults, event_bus=bus)
    engine.add_job(job)

    terminator: asyncio.Task | None = None
    if terminate_after is not None:
        terminator = asyncio.create_task(_terminate_later(engine, job.name, terminate_after))

    try:
        return await engine.execute_job(job.name)
    finally:
        if terminator is not None:
            terminator.cancel()
        await bus.close()


async def _terminate_later(engine: JobEngine, name: str, seconds: float) -> None:
    await asyncio.sleep(seconds)
    if engine.is_running(name):
        engine.terminate_job(name)
