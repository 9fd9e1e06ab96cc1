#!/usr/bin/env python3
"""Recipe job — four timed steps, one flaky step, and a live event log.

Demonstrates:
    1. Per-task delays that accumulate sequentially (0s, 2s, 1s, 1s)
    2. Engine-wide defaults (retry twice, skip when retries run out)
    3. A task-level override (``max_retries=0`` on the garnish step)
    4. Subscribing to the event bus to print progress

Run directly::

    python examples/recipe.py

or through the CLI::

    taskchain run examples.recipe:build_recipe_job
"""

from __future__ import annotations

import asyncio
import random
from typing import Any

from taskchain import BehaviorPolicy, JobDefinition, JobEngine, TaskDefinition
from taskchain.cli.reporter import ConsoleReporter
from taskchain.core.events.memory import InMemoryEventBus

RECIPE = [("flour", 500, 0.0), ("eggs", 50, 2.0), ("oil", 20, 1.0), ("milk", 250, 1.0)]


def build_recipe_job(bowl: dict[str, Any] | None = None) -> JobDefinition:
    """Build the recipe job; ingredients land in ``bowl``."""
    bowl = bowl if bowl is not None else {"ingredients": [], "weight": 0}

    def add(ingredient: str, grams: int):
        async def step(data: dict[str, Any]) -> bool:
            data["ingredients"].append(ingredient)
            data["weight"] += grams
            return True

        step.__name__ = f"add_{ingredient}"
        return step

    tasks = [
        TaskDefinition(add(ingredient, grams), data=bowl, delay=delay)
        for ingredient, grams, delay in RECIPE
    ]

    def garnish() -> bool:
        return random.random() > 0.5

    tasks.append(
        TaskDefinition(garnish, behavior=BehaviorPolicy(max_retries=0), name="garnish")
    )
    return JobDefinition(name="recipe", tasks=tasks)


async def main() -> None:
    bus = InMemoryEventBus()
    await ConsoleReporter().attach(bus)

    engine = JobEngine(
        BehaviorPolicy(max_retries=2, skip_item_on_fail=True, do_not_break_on_error=True),
        event_bus=bus,
    )
    bowl: dict[str, Any] = {"ingredients": [], "weight": 0}
    engine.add_job(build_recipe_job(bowl))

    result = await engine.execute_job("recipe")
    print(f"Bowl: {bowl['ingredients']} ({bowl['weight']}g)")
    print(f"Result: {result.to_dict()}")


if __name__ == "__main__":
    asyncio.run(main())
