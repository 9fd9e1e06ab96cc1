"""
Job execution: definitions, registry and the sequential engine.

- models: BehaviorPolicy, TaskDefinition, JobDefinition, JobResult, JobEvent
- registry: JobRegistry
- engine: JobEngine (execute_job / terminate_job)
"""

from taskchain.execution.engine import EVENT_SOURCE, JobEngine
from taskchain.execution.models import (
    BUILTIN_BEHAVIOR,
    BehaviorPolicy,
    JobDefinition,
    JobEvent,
    JobResult,
    JobRuntimeState,
    TaskDefinition,
    resolve,
)
from taskchain.execution.registry import JobRegistry

__all__ = [
    "BUILTIN_BEHAVIOR",
    "BehaviorPolicy",
    "EVENT_SOURCE",
    "JobDefinition",
    "JobEngine",
    "JobEvent",
    "JobRegistry",
    "JobResult",
    "JobRuntimeState",
    "TaskDefinition",
    "resolve",
]
