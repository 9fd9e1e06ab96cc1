"""
CLI utility helpers — job factory loading and result output.
"""

from __future__ import annotations

import importlib
import json
import os
import sys
from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.markup import escape

from taskchain.core.errors import ConfigError
from taskchain.execution.models import JobDefinition, JobResult

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


# ── Factory loading ──────────────────────────────────────────────────────


def resolve_callable_ref(ref: str) -> Callable[..., Any]:
    """Import and return the callable identified by ``'module:qualname'``.

    Raises:
        ConfigError: If the reference is malformed, missing or not callable.
    """
    module_path, _, attr_path = ref.partition(":")
    if not module_path or not attr_path:
        raise ConfigError(f"Invalid callable ref (expected 'module:attr'): {ref!r}")
    try:
        obj: Any = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigError(f"Cannot import module {module_path!r}", cause=exc) from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise ConfigError(f"{ref!r}: no attribute {part!r}", cause=exc) from exc
    if not callable(obj):
        raise ConfigError(f"{ref!r} resolved to non-callable: {type(obj).__name__}")
    return obj


def load_job_definition(ref: str, app_dir: str | None = None) -> JobDefinition:
    """Call the zero-argument factory at ``ref`` and check it built a job.

    ``app_dir`` is put first on ``sys.path`` so that modules next to the
    caller (e.g. an ``examples/`` folder) are importable.
    """
    if app_dir is not None:
        path = os.path.abspath(app_dir)
        if path not in sys.path:
            sys.path.insert(0, path)
    job = resolve_callable_ref(ref)()
    if not isinstance(job, JobDefinition):
        raise ConfigError(
            f"{ref!r} returned {type(job).__name__}, expected JobDefinition"
        )
    return job


# ── Output helpers ───────────────────────────────────────────────────────


def output_result(result: JobResult, *, as_json: bool = False) -> None:
    """Render a ``JobResult`` to the terminal."""
    data = result.to_dict()

    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    if result.failed_count:
        status = "[bold red]failed[/bold red]"
    elif result.is_terminated:
        status = "[bold yellow]terminated[/bold yellow]"
    else:
        status = "[bold green]completed[/bold green]"

    console.print(f"[bold]Job: {escape(result.job_name)}[/bold] {status}")
    for k, v in data.items():
        if k == "job_name" or v is None:
            continue
        console.print(f"  [cyan]{k}[/cyan]: {escape(str(v))}")
