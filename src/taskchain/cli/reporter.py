"""
Console reporter — one line per lifecycle event.

Subscribes to every event on a bus and prints it. Failures, retries and
skips go to stderr, everything else to stdout.
"""

from __future__ import annotations

from rich.console import Console

from taskchain.core.events import Event, EventBus
from taskchain.execution.models import JobEvent


def _error_text(error: object) -> str:
    return str(error) if error is not None else "unknown error"


def format_event(event: Event) -> str:
    """Render an engine event as a human-readable line."""
    p = event.payload
    name = p.get("name")
    index = p.get("task_index")

    match event.event_type:
        case JobEvent.JOB_STARTED.value:
            return f'Job "{name}" has started.'
        case JobEvent.JOB_COMPLETED.value:
            return f'Job "{name}" has completed.'
        case JobEvent.JOB_FAILED.value:
            return f'Job "{name}" has failed with error {_error_text(p.get("error"))}.'
        case JobEvent.JOB_TERMINATED.value:
            return f'Job "{name}" on task # {index} was terminated.'
        case JobEvent.TASK_STARTED.value:
            return f'Job "{name}" on task # {index} has started.'
        case JobEvent.TASK_COMPLETED.value:
            return f'Job "{name}" on task # {index} has completed.'
        case JobEvent.TASK_SKIPPING.value:
            return f'Job "{name}" on task # {index} skipped.'
        case JobEvent.TASK_RETRYING.value:
            return f'Job "{name}" on task # {index} retry #{p.get("attempt")}.'
        case JobEvent.TASK_FAILED.value:
            return f'Job "{name}" on task # {index} has failed with error "{_error_text(p.get("error"))}".'
        case _:
            return f"{event.event_type}: {p}"


_STDERR_EVENTS = frozenset(
    {
        JobEvent.JOB_FAILED.value,
        JobEvent.TASK_FAILED.value,
        JobEvent.TASK_RETRYING.value,
        JobEvent.TASK_SKIPPING.value,
    }
)


class ConsoleReporter:
    """Prints engine events to a pair of rich consoles."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.err_console = err_console or Console(stderr=True, highlight=False, soft_wrap=True)
        self._subscription_id: str | None = None

    async def __call__(self, event: Event) -> None:
        line = format_event(event)
        if event.event_type in _STDERR_EVENTS:
            self.err_console.print(line, style="red", markup=False)
        else:
            self.console.print(line, markup=False)

    async def attach(self, bus: EventBus) -> str:
        self._subscription_id = await bus.subscribe("*", self)
        return self._subscription_id

    async def detach(self, bus: EventBus) -> None:
        if self._subscription_id is not None:
            await bus.unsubscribe(self._subscription_id)
            self._subscription_id = None
