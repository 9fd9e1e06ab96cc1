"""
taskchain - sequential job execution with retry, skip and cooperative termination.

    from taskchain import JobEngine, JobDefinition, TaskDefinition, BehaviorPolicy

    engine = JobEngine(BehaviorPolicy(max_retries=2))
    engine.add_job(JobDefinition(name="nightly", tasks=[TaskDefinition(fetch, delay=1.0)]))
    result = await engine.execute_job("nightly")
"""

__version__ = "0.1.0"

from taskchain.core.errors import (  # noqa: E402
    JobBusyError,
    JobNameInUseError,
    JobNotFoundError,
    JobNotRunningError,
    MaxRetryReachedError,
    TaskchainError,
)
from taskchain.core.events import Event, get_event_bus, set_event_bus  # noqa: E402
from taskchain.execution import (  # noqa: E402
    BehaviorPolicy,
    JobDefinition,
    JobEngine,
    JobEvent,
    JobRegistry,
    JobResult,
    TaskDefinition,
)

__all__ = [
    "__version__",
    "BehaviorPolicy",
    "Event",
    "JobBusyError",
    "JobDefinition",
    "JobEngine",
    "JobEvent",
    "JobNameInUseError",
    "JobNotFoundError",
    "JobNotRunningError",
    "JobRegistry",
    "JobResult",
    "MaxRetryReachedError",
    "TaskDefinition",
    "TaskchainError",
    "get_event_bus",
    "set_event_bus",
]
