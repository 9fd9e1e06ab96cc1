"""Job Registry — name → runtime state lookup with uniqueness enforcement.

ARCHITECTURE
────────────
::

    registry.register(definition)   → JobRuntimeState (or JobNameInUseError)
    registry.get(name)               → JobRuntimeState (or JobNotFoundError)
    registry.names()                 → sorted names
    registry.unregister(name)        → remove an idle job
    registry.clear()                 → reset (for testing)

Unlike a process-global table, each ``JobEngine`` owns one registry, so
separate engines never see each other's jobs.
"""

from __future__ import annotations

from collections.abc import Iterator

from taskchain.core.errors import JobBusyError, JobNameInUseError, JobNotFoundError
from taskchain.core.logging import get_logger
from taskchain.execution.models import JobDefinition, JobRuntimeState

logger = get_logger(__name__)


class JobRegistry:
    """Mapping from job name to its ``JobRuntimeState``."""

    def __init__(self) -> None:
        self._jobs: dict[str, JobRuntimeState] = {}

    def register(self, definition: JobDefinition) -> JobRuntimeState:
        """
        Register a job definition.

        Raises:
            JobNameInUseError: If a job with the same name is already registered
        """
        if definition.name in self._jobs:
            raise JobNameInUseError(definition.name)

        state = JobRuntimeState(definition=definition)
        self._jobs[definition.name] = state

        logger.debug(
            "job.registered",
            job=definition.name,
            task_count=definition.task_count,
        )
        return state

    def get(self, name: str) -> JobRuntimeState:
        """
        Look up a job's runtime state.

        Raises:
            JobNotFoundError: If the job is not registered
        """
        try:
            return self._jobs[name]
        except KeyError:
            raise JobNotFoundError(name) from None

    def unregister(self, name: str) -> JobDefinition:
        """Remove an idle job and return its definition."""
        state = self.get(name)
        if state.is_busy:
            raise JobBusyError(name)
        del self._jobs[name]
        logger.debug("job.unregistered", job=name)
        return state.definition

    def names(self) -> list[str]:
        return sorted(self._jobs)

    def clear(self) -> None:
        """Drop every registration. Primarily for tests."""
        self._jobs.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[JobRuntimeState]:
        return iter(list(self._jobs.values()))
