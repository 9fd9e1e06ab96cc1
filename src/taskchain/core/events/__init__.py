"""Event system for job lifecycle notifications.

The engine only *publishes*; any number of subscribers receive events
through an ``EventBus``. Producers and consumers never import each other.

Usage::

    from taskchain.core.events import Event, get_event_bus

    bus = get_event_bus()

    async def handler(event: Event):
        print(event.event_type, event.payload)

    sub_id = await bus.subscribe("task_*", handler)

Modules
-------
memory      InMemoryEventBus -- asyncio, single process
"""

from __future__ import annotations

import fnmatch
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "EventPublisher",
    "get_event_bus",
    "set_event_bus",
]


# ── Event Model ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Event:
    """Immutable event payload.

    Attributes:
        event_type: Event name (e.g. ``job_started``, ``task_retrying``)
        source: Origin component
        payload: Event-specific data
        timestamp: When the event occurred (UTC)
        correlation_id: Optional ID linking related events (one per job run)
        event_id: Unique event identifier
    """

    event_type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    correlation_id: str | None = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def matches(self, pattern: str) -> bool:
        """Check if event type matches a pattern.

        Examples:
            - ``*`` matches everything
            - ``task_*`` matches ``task_started``, ``task_failed``
            - ``job_failed`` matches exactly ``job_failed``
        """
        if pattern == "*":
            return True
        return fnmatch.fnmatchcase(self.event_type, pattern)


# ── Type Aliases ─────────────────────────────────────────────────────────

EventHandler = Callable[[Event], Awaitable[None]]


# ── Protocols ────────────────────────────────────────────────────────────


@runtime_checkable
class EventPublisher(Protocol):
    """The single capability a producer needs."""

    async def publish(self, event: Event) -> None:
        ...


@runtime_checkable
class EventBus(Protocol):
    """Protocol for event bus implementations."""

    async def publish(self, event: Event) -> None:
        """Publish an event to all matching subscribers."""
        ...

    async def subscribe(
        self,
        event_type: str,
        handler: EventHandler,
    ) -> str:
        """Subscribe to events matching a pattern.

        Returns:
            Subscription ID for later unsubscription
        """
        ...

    async def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription."""
        ...

    async def close(self) -> None:
        """Clean up resources."""
        ...


# ── Default Event Bus Singleton ──────────────────────────────────────────

_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus, creating an in-memory one if none has been set."""
    global _event_bus
    if _event_bus is None:
        from taskchain.core.events.memory import InMemoryEventBus
        _event_bus = InMemoryEventBus()
    return _event_bus


def set_event_bus(bus: EventBus | None) -> None:
    """Set (or with ``None``, reset) the global event bus instance."""
    global _event_bus
    _event_bus = bus
