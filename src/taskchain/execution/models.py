"""Job and task models — definitions, behavior policy, runtime state, results.

ARCHITECTURE
────────────
::

    JobDefinition(name, tasks)          ── immutable, owned by the registry
      └── TaskDefinition(function, data, delay, behavior)
            └── BehaviorPolicy(do_not_break_on_error, skip_item_on_fail, max_retries)

    JobRuntimeState(definition, is_busy, is_terminating)   ── one per registered job
    JobResult                                                ── one per execution
    JobEvent                                                 ── event names

Policy resolution
─────────────────
Each behavior field resolves independently: task override → engine default
→ built-in default. ``None`` means "not set"; an explicit ``False`` or ``0``
on a task is an override like any other value::

    >>> task = BehaviorPolicy(max_retries=0)
    >>> engine = BehaviorPolicy(max_retries=2, skip_item_on_fail=True)
    >>> resolve("max_retries", task, engine)
    0
    >>> resolve("skip_item_on_fail", task, engine)
    True
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any

from taskchain.core.errors import InvalidJobDefinitionError

TaskFunction = Callable[..., Any]


class JobEvent(str, Enum):
    """Names of the events published during a job run."""

    JOB_STARTED = "job_started"
    JOB_COMPLETED = "job_completed"
    JOB_FAILED = "job_failed"
    JOB_TERMINATED = "job_terminated"
    TASK_STARTED = "task_started"
    TASK_COMPLETED = "task_completed"
    TASK_RETRYING = "task_retrying"
    TASK_SKIPPING = "task_skipping"
    TASK_FAILED = "task_failed"


@dataclass(frozen=True)
class BehaviorPolicy:
    """Failure-handling policy. Unset fields are ``None``."""

    do_not_break_on_error: bool | None = None
    skip_item_on_fail: bool | None = None
    max_retries: int | None = None

    def __post_init__(self) -> None:
        for name in ("do_not_break_on_error", "skip_item_on_fail"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, bool):
                raise InvalidJobDefinitionError(
                    f"{name} must be a bool, got {type(value).__name__}",
                    field=name,
                )
        if self.max_retries is not None and (
            isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int)
        ):
            raise InvalidJobDefinitionError(
                f"max_retries must be an int, got {type(self.max_retries).__name__}",
                field="max_retries",
            )
        if self.max_retries is not None and self.max_retries < 0:
            raise InvalidJobDefinitionError(
                f"max_retries must be non-negative, got {self.max_retries}",
                field="max_retries",
            )

    @classmethod
    def builtin(cls) -> BehaviorPolicy:
        """The last-resort defaults: never downgrade, never skip, no retries."""
        return cls(do_not_break_on_error=False, skip_item_on_fail=False, max_retries=0)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


BUILTIN_BEHAVIOR = BehaviorPolicy.builtin()


def resolve(
    field_name: str,
    task_override: BehaviorPolicy | None,
    engine_default: BehaviorPolicy | None,
    builtin: BehaviorPolicy = BUILTIN_BEHAVIOR,
) -> Any:
    """Resolve one behavior field: first value that is not ``None`` wins."""
    for policy in (task_override, engine_default, builtin):
        if policy is None:
            continue
        value = getattr(policy, field_name)
        if value is not None:
            return value
    raise InvalidJobDefinitionError(f"No value for behavior field: {field_name}", field=field_name)


@dataclass(frozen=True)
class TaskDefinition:
    """One step of a job.

    ``function`` may be sync or async. It is called with ``data`` when a
    payload is set, without arguments otherwise. Returning ``False`` is a
    recoverable failure; any other return value is success. ``delay`` is in
    seconds and is waited before every attempt.
    """

    function: TaskFunction
    data: Any = None
    delay: float = 0.0
    behavior: BehaviorPolicy | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if not callable(self.function):
            raise InvalidJobDefinitionError(
                f"Task function must be callable, got {type(self.function).__name__}",
                field="function",
            )
        if isinstance(self.delay, bool) or not isinstance(self.delay, (int, float)):
            raise InvalidJobDefinitionError(
                f"Task delay must be a number of seconds, got {type(self.delay).__name__}",
                field="delay",
            )
        if self.delay < 0:
            raise InvalidJobDefinitionError(
                f"Task delay must be non-negative, got {self.delay}",
                field="delay",
            )

    @property
    def label(self) -> str:
        return self.name or getattr(self.function, "__name__", "task")


@dataclass(frozen=True)
class JobDefinition:
    """A named, ordered sequence of tasks."""

    name: str
    tasks: Sequence[TaskDefinition] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidJobDefinitionError("Job name must not be empty", field="name")
        # stored as a tuple; the caller keeps no handle on it
        object.__setattr__(self, "tasks", tuple(self.tasks))
        for task in self.tasks:
            if not isinstance(task, TaskDefinition):
                raise InvalidJobDefinitionError(
                    f"Job '{self.name}' contains a non-TaskDefinition entry: {task!r}",
                    field="tasks",
                )

    @property
    def task_count(self) -> int:
        return len(self.tasks)


@dataclass
class JobRuntimeState:
    """Mutable per-job state; written by the engine only."""

    definition: JobDefinition
    is_busy: bool = False
    is_terminating: bool = False

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass
class JobResult:
    """Outcome of one ``execute_job`` call."""

    job_name: str
    total_tasks: int
    processed_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    retry_count: int = 0
    is_terminated: bool = False
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        """True when the run finished without a terminal failure or termination."""
        return self.failed_count == 0 and not self.is_terminated

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging/output."""
        return {
            "job_name": self.job_name,
            "total_tasks": self.total_tasks,
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "failed_count": self.failed_count,
            "retry_count": self.retry_count,
            "is_terminated": self.is_terminated,
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
        }


__all__ = [
    "BUILTIN_BEHAVIOR",
    "BehaviorPolicy",
    "JobDefinition",
    "JobEvent",
    "JobResult",
    "JobRuntimeState",
    "TaskDefinition",
    "TaskFunction",
    "resolve",
]
