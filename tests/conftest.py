"""
Shared pytest fixtures for taskchain tests.

This module provides:
- Global state cleanup (event bus singleton, structlog configuration)
- An in-memory bus with a recording subscriber
- Engines wired to a recorded, non-waiting sleep
- Small task-function builders
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
import structlog

from taskchain.core.events import Event, set_event_bus
from taskchain.core.events.memory import InMemoryEventBus
from taskchain.execution import BehaviorPolicy, JobEngine


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Global State Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_global_state() -> Generator[None, None, None]:
    """Reset the process-wide event bus and structlog config around each test."""
    set_event_bus(None)
    structlog.reset_defaults()
    yield
    set_event_bus(None)
    structlog.reset_defaults()


# =============================================================================
# Events
# =============================================================================


class EventRecorder:
    """Collects every event published on a bus."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def __call__(self, event: Event) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.event_type for e in self.events]

    def of_type(self, event_type: str) -> list[Event]:
        return [e for e in self.events if e.event_type == event_type]

    def summary(self) -> list[tuple[Any, ...]]:
        """``(event_type, task_index)`` pairs, ``task_index`` omitted for job events."""
        out: list[tuple[Any, ...]] = []
        for e in self.events:
            if "task_index" in e.payload:
                out.append((e.event_type, e.payload["task_index"]))
            else:
                out.append((e.event_type,))
        return out


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest_asyncio.fixture
async def recorder(bus: InMemoryEventBus) -> EventRecorder:
    rec = EventRecorder()
    await bus.subscribe("*", rec)
    return rec


# =============================================================================
# Engines
# =============================================================================


class RecordedSleep:
    """Stand-in for ``asyncio.sleep`` that records delays and only yields."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def fake_sleep() -> RecordedSleep:
    return RecordedSleep()


@pytest.fixture
def make_engine(bus: InMemoryEventBus, fake_sleep: RecordedSleep) -> Callable[..., JobEngine]:
    """Factory for engines publishing on ``bus`` and sleeping via ``fake_sleep``."""

    def _make(defaults: BehaviorPolicy | None = None, **kwargs: Any) -> JobEngine:
        kwargs.setdefault("event_bus", bus)
        kwargs.setdefault("sleep", fake_sleep)
        return JobEngine(defaults, **kwargs)

    return _make


# =============================================================================
# Task Builders
# =============================================================================


def _scripted(*outcomes: Any, calls: list[int] | None = None) -> Callable[[], Any]:
    """Async task returning (or raising) each outcome in turn, then ``True``."""
    queue = list(outcomes)
    counter = calls if calls is not None else []

    async def task() -> Any:
        counter.append(1)
        outcome = queue.pop(0) if queue else True
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return task


@pytest.fixture
def scripted() -> Callable[..., Callable[[], Any]]:
    """Builder for tasks with a fixed script of outcomes."""
    return _scripted


@pytest.fixture
def tmp_workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory (no stray ``.env`` files)."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
