"""Sample work items for demos and manual testing.

Dependencies are invented at random, so this lives apart from the
scheduler; pass a seed to get the same snapshot twice.
"""

from __future__ import annotations

import random

from critpath.models import Priority, WorkItem

CATEGORIES = ["Personal Productivity", "Project Management", "Strategic Planning", "Operations"]

TITLES = [
    "Draft requirements",
    "Review budget",
    "Set up repository",
    "Interview stakeholders",
    "Write test plan",
    "Design schema",
    "Prepare slides",
    "Order hardware",
    "Migrate data",
    "Run pilot",
    "Collect feedback",
    "Publish release notes",
]


def generate_items(
    count: int,
    seed: int | None = None,
    link_probability: float = 0.4,
) -> list[WorkItem]:
    """Generate *count* work items.

    Each item after the first depends, with probability *link_probability*,
    on one of the two items just before it. Durations are left unset so the
    priority heuristic applies. Links only point backwards, so the result is
    always acyclic.
    """
    rng = random.Random(seed)
    priorities = list(Priority)
    items: list[WorkItem] = []
    for i in range(count):
        deps: list[str] = []
        if i > 0 and rng.random() < link_probability:
            prev = max(0, i - 1 - rng.randint(0, 1))
            deps.append(items[prev].id)
        items.append(
            WorkItem(
                id=f"T-{i + 1}",
                title=f"{rng.choice(TITLES)} #{i + 1}",
                dependency_ids=deps,
                priority=rng.choice(priorities),
                completed=rng.random() < 0.2,
                category=rng.choice(CATEGORIES),
            )
        )
    return items
