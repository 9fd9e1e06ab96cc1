"""
Structured error types for taskchain.

Every error raised by the engine carries a category, a stable string
code and an optional chained cause, so that callers and subscribers can
log, route and compare errors without parsing messages.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     TaskchainError                           │
        │            (code, category, cause, to_dict)                  │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  JobError              TaskError           ValidationError   │
        │  (JOB)                 (TASK)              (VALIDATION)      │
        │     │                     │                    │             │
        │  JobNameInUseError     MaxRetryReached     InvalidJob-       │
        │  JobNotFoundError                          DefinitionError   │
        │  JobBusyError                                                │
        │  JobNotRunningError    ConfigError (CONFIG)                  │
        └─────────────────────────────────────────────────────────────┘

Propagation:
    The four ``JobError`` subclasses are caller misuse and are raised
    synchronously from ``JobRegistry`` / ``JobEngine``. ``MaxRetryReachedError``
    and errors raised by task functions are captured inside
    ``JobEngine.execute_job`` and reported through the ``job_failed`` event.

Examples:
    >>> error = JobNotFoundError("nightly")
    >>> error.code
    'SDTASK_NAME_DOES_NOT_EXIST'
    >>> error.to_dict()["category"]
    'JOB'
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    JOB = "JOB"  # Registration / lifecycle misuse
    TASK = "TASK"  # Failure inside a running job
    VALIDATION = "VALIDATION"  # Malformed definitions
    CONFIG = "CONFIG"  # Missing or invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"  # Uncategorized errors


class TaskchainError(Exception):
    """
    Base exception for all taskchain errors.

    Subclasses set ``default_category`` and ``code`` class attributes.
    ``code`` values are stable identifiers suitable for matching in
    subscribers and log queries.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    code: str = "TASKCHAIN_ERROR"

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
        }
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


# =============================================================================
# JOB LIFECYCLE ERRORS (raised to the caller)
# =============================================================================


class JobError(TaskchainError):
    """Base for precondition failures on a named job."""

    default_category = ErrorCategory.JOB

    def __init__(self, job_name: str, message: str, **kwargs: Any):
        self.job_name = job_name
        super().__init__(message, **kwargs)


class JobNameInUseError(JobError):
    """A job with the same name is already registered."""

    code = "SDTASK_NAME_ALREADY_IN_USE"

    def __init__(self, job_name: str):
        super().__init__(job_name, f"Job name already in use: {job_name}")


class JobNotFoundError(JobError):
    """No job is registered under the given name."""

    code = "SDTASK_NAME_DOES_NOT_EXIST"

    def __init__(self, job_name: str):
        super().__init__(job_name, f"Job not found: {job_name}")


class JobBusyError(JobError):
    """The job is already running."""

    code = "SDTASK_IS_BUSY"

    def __init__(self, job_name: str):
        super().__init__(job_name, f"Job is busy: {job_name}")


class JobNotRunningError(JobError):
    """Termination was requested for a job that is not running."""

    code = "SDTASK_NOT_RUNNING"

    def __init__(self, job_name: str):
        super().__init__(job_name, f"Job is not running: {job_name}")


# =============================================================================
# IN-JOB ERRORS (reported via events, never raised past execute_job)
# =============================================================================


class TaskError(TaskchainError):
    """Failure of a task inside a running job."""

    default_category = ErrorCategory.TASK


class MaxRetryReachedError(TaskError):
    """A task kept failing after its retry budget was spent and may not be skipped."""

    code = "SDTASK_MAX_RETRY_REACHED"

    def __init__(self, job_name: str, task_index: int, attempts: int):
        self.job_name = job_name
        self.task_index = task_index
        self.attempts = attempts
        super().__init__(
            f"Task #{task_index} of job '{job_name}' failed after {attempts} retries"
        )


# =============================================================================
# DEFINITION / CONFIG ERRORS
# =============================================================================


class ValidationError(TaskchainError):
    """A definition failed validation."""

    default_category = ErrorCategory.VALIDATION
    code = "TASKCHAIN_VALIDATION"


class InvalidJobDefinitionError(ValidationError):
    """A job, task or behavior definition is malformed."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConfigError(TaskchainError):
    """Configuration error (e.g. unresolvable job factory)."""

    default_category = ErrorCategory.CONFIG
    code = "TASKCHAIN_CONFIG"


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, TaskchainError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "TaskchainError",
    "JobError",
    "JobNameInUseError",
    "JobNotFoundError",
    "JobBusyError",
    "JobNotRunningError",
    "TaskError",
    "MaxRetryReachedError",
    "ValidationError",
    "InvalidJobDefinitionError",
    "ConfigError",
    "categorize_error",
]
