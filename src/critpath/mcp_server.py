"""MCP server for critpath: exposes critical path scheduling to AI assistants."""

from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from critpath.demo import generate_items
from critpath.errors import CycleDetectedError, ScheduleError
from critpath.models import ScheduleConfig, WorkItem
from critpath.scheduler import compute_schedule, critical_chains

mcp = FastMCP(
    "critpath",
    instructions="""\
critpath computes a critical path (CPM) schedule for a list of work items. \
Each item has an id, a title, a duration in days and the ids of the items it \
depends on. Items without a duration fall back to a priority heuristic \
(High=2, Medium=3, Low=5 days) or become zero-length milestones.

Key concepts:
- **Early/late times**: earliest and latest start/finish as day offsets from 0.
- **Slack**: how many days an item can slip without moving the project end.
- **Critical**: zero slack. Several disjoint critical chains can exist at once.
- **Layer/lane**: grid position; items with the same earliest start share a layer.

Dependencies on unknown ids are dropped and reported under "diagnostics". \
Circular dependencies are an error that names every item on the cycle.\
""",
)


def _parse_items(items: list[dict]) -> list[WorkItem]:
    return [WorkItem.from_dict(d) for d in items]


@mcp.tool(name="compute_schedule")
def schedule_items(items: list[dict], max_dangling: int | None = None) -> str:
    """Compute the full schedule: nodes, edges, project duration and critical path.

    Args:
        items: Work items, e.g. [{"id": "A", "title": "Design", "duration": 2, "dependency_ids": []}]
        max_dangling: Fail when more dependency ids than this point at unknown items
    """
    config = ScheduleConfig(max_dangling=max_dangling)
    try:
        result = compute_schedule(_parse_items(items), config)
    except CycleDetectedError as e:
        return json.dumps({"error": str(e), "cycle": e.cycle}, indent=2)
    except ScheduleError as e:
        return f"Error: {e}"
    return json.dumps(result.to_dict(), indent=2)


@mcp.tool()
def get_critical_path(items: list[dict]) -> str:
    """Get the critical path and every disjoint critical chain for a set of work items.

    Args:
        items: Work items in the same shape as compute_schedule
    """
    try:
        result = compute_schedule(_parse_items(items))
    except ScheduleError as e:
        return f"Error: {e}"

    out = {
        "project_duration": result.project_duration,
        "critical_path": result.critical_path,
        "chains": critical_chains(result),
        "critical_count": len(result.critical_ids),
    }
    return json.dumps(out, indent=2)


@mcp.tool()
def generate_demo_items(count: int = 12, seed: int | None = None) -> str:
    """Generate sample work items with random dependencies.

    Args:
        count: Number of items to generate
        seed: Random seed; the same seed always gives the same items
    """
    return json.dumps([item.to_dict() for item in generate_items(count, seed=seed)], indent=2)


def main():
    """Entry point for the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
