"""Job Engine — runs a registered job's tasks in order.

The engine claims a job's busy flag, walks its tasks one at a time and
applies each task's delay, retry and skip policy. Progress is published as
:class:`~taskchain.core.events.Event` objects; the engine never subscribes.

Per task, the loop is a small state machine::

    ┌───────────┐ terminating ┌────────────┐
    │ loop head │────────────▶│ terminated │
    └─────┬─────┘             └────────────┘
          │ wait delay, invoke
          ▼
      success ──────────────────────────▶ next task (attempt = 0)
      False / downgraded error
          ├─ attempt < max_retries ─────▶ same task (attempt += 1)
          ├─ skip_item_on_fail ─────────▶ next task (attempt = 0)
          └─ otherwise ─ MaxRetryReached ┐
      raised error ──────────────────────┴▶ task_failed → job_failed

Precondition errors (``JobNotFoundError``, ``JobBusyError``) are raised to
the caller. Failures inside the run are published as ``job_failed`` and
reflected in ``JobResult.failed_count``; ``execute_job`` still returns.

Example::

    engine = JobEngine(BehaviorPolicy(max_retries=2))
    engine.add_job(JobDefinition(name="nightly", tasks=[TaskDefinition(fetch)]))
    result = await engine.execute_job("nightly")
"""

from __future__ import annotations

import asyncio
import inspect
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from taskchain.core.errors import (
    JobBusyError,
    JobNotRunningError,
    MaxRetryReachedError,
    categorize_error,
)
from taskchain.core.events import Event, EventPublisher, get_event_bus
from taskchain.core.logging import LogContext, get_logger
from taskchain.core.settings import TaskchainSettings
from taskchain.execution.models import (
    BehaviorPolicy,
    JobDefinition,
    JobEvent,
    JobResult,
    JobRuntimeState,
    TaskDefinition,
    resolve,
)
from taskchain.execution.registry import JobRegistry

logger = get_logger(__name__)

EVENT_SOURCE = "taskchain.engine"

SleepFunction = Callable[[float], Awaitable[Any]]


class _Next(str, Enum):
    """Where the loop goes after a recoverable failure."""

    RETRY = "retry"  # same task again
    SKIP = "skip"  # next task
    FAIL = "fail"  # abort the job


class JobEngine:
    """Sequential job executor.

    Args:
        defaults: Engine-wide behavior policy, fixed for the engine's lifetime.
        registry: Job registry (a private one is created if omitted).
        event_bus: Anything with ``async publish(Event)``. Defaults to the
            process-wide bus, looked up at publish time.
        sleep: Awaitable wait primitive, ``asyncio.sleep`` by default.
    """

    def __init__(
        self,
        defaults: BehaviorPolicy | None = None,
        *,
        registry: JobRegistry | None = None,
        event_bus: EventPublisher | None = None,
        sleep: SleepFunction | None = None,
    ) -> None:
        self._defaults = defaults or BehaviorPolicy()
        self._registry = registry if registry is not None else JobRegistry()
        self._event_bus = event_bus
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(
        cls,
        settings: TaskchainSettings | None = None,
        **kwargs: Any,
    ) -> JobEngine:
        """Build an engine whose defaults come from ``TaskchainSettings``."""
        settings = settings or TaskchainSettings()
        return cls(settings.default_behavior(), **kwargs)

    @property
    def defaults(self) -> BehaviorPolicy:
        return self._defaults

    @property
    def jobs(self) -> JobRegistry:
        return self._registry

    @property
    def event_bus(self) -> EventPublisher:
        return self._event_bus if self._event_bus is not None else get_event_bus()

    # ── Registration / status ────────────────────────────────────────────

    def add_job(self, definition: JobDefinition) -> None:
        """Register a job. Raises ``JobNameInUseError`` on a duplicate name."""
        self._registry.register(definition)

    def is_running(self, name: str) -> bool:
        return self._registry.get(name).is_busy

    # ── Execution ────────────────────────────────────────────────────────

    async def execute_job(self, name: str) -> JobResult:
        """
        Run the named job to completion, termination or first terminal failure.

        Raises:
            JobNotFoundError: If the job is not registered
            JobBusyError: If the job is already running
        """
        state = self._registry.get(name)
        if state.is_busy:
            raise JobBusyError(name)

        # No await between the check and the claim.
        state.is_terminating = False
        state.is_busy = True

        run_id = uuid.uuid4().hex[:12]
        result = JobResult(
            job_name=name,
            total_tasks=state.definition.task_count,
            started_at=datetime.now(UTC),
        )

        try:
            async with LogContext(job=name, run_id=run_id):
                logger.info("job.start", task_count=result.total_tasks)
                await self._emit(JobEvent.JOB_STARTED, run_id, name=name)

                try:
                    await self._run_tasks(state, result, run_id)
                except Exception as exc:
                    result.error = str(exc)
                    result.completed_at = datetime.now(UTC)
                    logger.error(
                        "job.failed",
                        error=str(exc),
                        error_type=type(exc).__name__,
                        error_category=categorize_error(exc).value,
                        processed=result.processed_count,
                    )
                    await self._emit(JobEvent.JOB_FAILED, run_id, name=name, error=exc)
                else:
                    result.completed_at = datetime.now(UTC)
                    logger.info(
                        "job.complete",
                        processed=result.processed_count,
                        skipped=result.skipped_count,
                        retries=result.retry_count,
                        terminated=result.is_terminated,
                        duration_seconds=result.duration_seconds,
                    )
                    await self._emit(JobEvent.JOB_COMPLETED, run_id, name=name, result=result)
        finally:
            state.is_busy = False

        return result

    def terminate_job(self, name: str) -> None:
        """
        Ask a running job to stop at its next task boundary.

        Returns immediately; a task already in flight is never interrupted.

        Raises:
            JobNotFoundError: If the job is not registered
            JobNotRunningError: If the job is not running
        """
        state = self._registry.get(name)
        if not state.is_busy:
            raise JobNotRunningError(name)
        state.is_terminating = True
        logger.info("job.terminate_requested", job=name)

    # ── Internals ────────────────────────────────────────────────────────

    async def _run_tasks(self, state: JobRuntimeState, result: JobResult, run_id: str) -> None:
        name = state.name
        tasks = state.definition.tasks
        index = 0
        attempt = 0

        while index < len(tasks):
            position = index + 1

            if state.is_terminating:
                result.is_terminated = True
                logger.info("job.terminated", task_index=position)
                await self._emit(JobEvent.JOB_TERMINATED, run_id, name=name, task_index=position)
                return

            task = tasks[index]
            try:
                if await self._execute_delayed(name, position, task, run_id):
                    result.processed_count += 1
                    attempt = 0
                    index += 1
                    continue

                decision = self._next_after_failure(task, attempt)
                if decision is _Next.RETRY:
                    attempt += 1
                    result.retry_count += 1
                    logger.info("task.retry", task_index=position, attempt=attempt)
                    await self._emit(
                        JobEvent.TASK_RETRYING,
                        run_id,
                        name=name,
                        task_index=position,
                        attempt=attempt,
                    )
                elif decision is _Next.SKIP:
                    result.skipped_count += 1
                    logger.info("task.skip", task_index=position, attempts=attempt + 1)
                    await self._emit(JobEvent.TASK_SKIPPING, run_id, name=name, task_index=position)
                    attempt = 0
                    index += 1
                else:
                    raise MaxRetryReachedError(name, position, attempt)
            except Exception as exc:
                result.failed_count += 1
                await self._emit(
                    JobEvent.TASK_FAILED,
                    run_id,
                    name=name,
                    task_index=position,
                    error=exc,
                )
                raise

    async def _execute_delayed(
        self,
        name: str,
        position: int,
        task: TaskDefinition,
        run_id: str,
    ) -> bool:
        """Wait the task's delay and invoke it.

        Returns ``True`` on success and ``False`` on a recoverable failure.
        Raises the task's own error when it is not downgraded.
        """
        await self._sleep(task.delay)
        await self._emit(JobEvent.TASK_STARTED, run_id, name=name, task_index=position)

        try:
            outcome = task.function(task.data) if task.data is not None else task.function()
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as exc:
            if resolve("do_not_break_on_error", task.behavior, self._defaults):
                logger.warning(
                    "task.error_downgraded",
                    task_index=position,
                    task=task.label,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                return False
            raise

        if outcome is False:
            logger.debug("task.returned_false", task_index=position, task=task.label)
            return False

        await self._emit(JobEvent.TASK_COMPLETED, run_id, name=name, task_index=position)
        return True

    def _next_after_failure(self, task: TaskDefinition, attempt: int) -> _Next:
        max_retries = resolve("max_retries", task.behavior, self._defaults)
        if attempt < max_retries:
            return _Next.RETRY
        if resolve("skip_item_on_fail", task.behavior, self._defaults):
            return _Next.SKIP
        return _Next.FAIL

    async def _emit(self, event: JobEvent, run_id: str, **payload: Any) -> None:
        """Publish one event. Publisher errors are logged and never affect the run."""
        try:
            await self.event_bus.publish(
                Event(
                    event_type=event.value,
                    source=EVENT_SOURCE,
                    payload=payload,
                    correlation_id=run_id,
                )
            )
        except Exception as exc:
            logger.warning(
                "event_publish_error",
                event_type=event.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )


__all__ = ["EVENT_SOURCE", "JobEngine", "SleepFunction"]
