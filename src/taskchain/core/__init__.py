"""
Core primitives shared by the registry, engine and CLI.

- errors: typed error hierarchy with stable codes
- logging: structlog configuration
- settings: pydantic-settings configuration
- events: Event model, EventBus protocol, in-memory bus
"""

from taskchain.core.errors import (
    ConfigError,
    ErrorCategory,
    InvalidJobDefinitionError,
    JobBusyError,
    JobError,
    JobNameInUseError,
    JobNotFoundError,
    JobNotRunningError,
    MaxRetryReachedError,
    TaskchainError,
    TaskError,
    ValidationError,
)
from taskchain.core.events import Event, EventBus, EventPublisher, get_event_bus, set_event_bus
from taskchain.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    # Errors
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
    # Events
    "Event",
    "EventBus",
    "EventPublisher",
    "get_event_bus",
    "set_event_bus",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
]
