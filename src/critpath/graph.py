"""Build the scheduling DAG from a flat list of work items."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import networkx as nx

from critpath.errors import CycleDetectedError, ResourceLimitError, ValidationError
from critpath.models import Diagnostic, ScheduleConfig, WorkItem

WHITE, GRAY, BLACK = 0, 1, 2


@dataclass
class ScheduleGraph:
    """The dependency DAG. Edges point from a dependency to its dependent."""

    graph: nx.DiGraph
    ids: list[str]  # input order
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)

    def index(self, node_id: str) -> int:
        return self.graph.nodes[node_id]["index"]

    def duration(self, node_id: str) -> int:
        return self.graph.nodes[node_id]["duration"]

    def predecessors(self, node_id: str) -> list[str]:
        return list(self.graph.predecessors(node_id))

    def successors(self, node_id: str) -> list[str]:
        return list(self.graph.successors(node_id))


def resolve_duration(item: WorkItem, config: ScheduleConfig) -> int:
    """Explicit duration, else the item's date range, else the priority
    heuristic, else a zero-length milestone."""
    d = item.duration
    if d is None and item.start_date is not None and item.end_date is not None:
        try:
            span = item.end_date - item.start_date
        except TypeError:
            raise ValidationError(
                f"Task {item.id} mixes timezone-aware and naive dates", item.id
            ) from None
        return max(1, int(span.total_seconds() / 86400 + 0.5))
    if d is None:
        if item.priority is None:
            return 0
        d = config.priority_durations.get(item.priority.value)
        if d is None:
            raise ValidationError(
                f"Task {item.id} has no duration and no default for priority {item.priority}",
                item.id,
            )
    if isinstance(d, bool) or not isinstance(d, int):
        raise ValidationError(f"Task {item.id} has non-integer duration {d!r}", item.id)
    if d < 0:
        raise ValidationError(f"Task {item.id} has negative duration {d}", item.id)
    return d


def filter_by_category(items: Iterable[WorkItem], category: str | None) -> list[WorkItem]:
    """Keep only items in *category* ("All" or None keeps everything)."""
    if category is None or category == "All":
        return list(items)
    return [item for item in items if item.category == category]


def build_graph(
    items: Sequence[WorkItem],
    config: ScheduleConfig | None = None,
) -> ScheduleGraph:
    """Construct the DAG.

    Dangling dependency ids are dropped and recorded as diagnostics. Raises
    ValidationError on malformed items, ResourceLimitError when the graph is
    too large and CycleDetectedError when the dependencies loop.
    """
    config = config or ScheduleConfig()
    if len(items) > config.max_nodes:
        raise ResourceLimitError("nodes", config.max_nodes, len(items))

    G = nx.DiGraph()
    ids: list[str] = []
    for i, item in enumerate(items):
        if not isinstance(item.id, str) or not item.id.strip():
            raise ValidationError(f"Task at position {i} has no id")
        if item.id in G:
            raise ValidationError(f"Duplicate task id {item.id}", item.id)
        G.add_node(
            item.id,
            index=i,
            title=item.title,
            duration=resolve_duration(item, config),
            priority=item.priority,
            completed=item.completed,
            category=item.category,
        )
        ids.append(item.id)

    diagnostics: list[Diagnostic] = []
    edges: list[tuple[str, str]] = []
    dangling = 0
    for item in items:
        seen: set[str] = set()
        valid: list[str] = []
        for dep in item.dependency_ids:
            if dep in seen:
                diagnostics.append(
                    Diagnostic(
                        "duplicate_dependency",
                        f"Task {item.id} lists dependency {dep} more than once",
                        item.id,
                        dep,
                    )
                )
                continue
            seen.add(dep)
            if dep not in G:
                dangling += 1
                diagnostics.append(
                    Diagnostic(
                        "dangling_dependency",
                        f"Task {item.id} depends on non-existent task {dep}; dependency dropped",
                        item.id,
                        dep,
                    )
                )
                continue
            valid.append(dep)
            edges.append((dep, item.id))
        G.nodes[item.id]["dependency_ids"] = tuple(valid)

    if config.max_dangling is not None and dangling > config.max_dangling:
        raise ValidationError(
            f"{dangling} dangling dependency references exceed the limit of {config.max_dangling}"
        )
    if len(edges) > config.max_edges:
        raise ResourceLimitError("edges", config.max_edges, len(edges))

    G.add_edges_from(edges)
    cycle = find_cycle(G, ids)
    if cycle:
        raise CycleDetectedError(cycle)
    return ScheduleGraph(graph=G, ids=ids, diagnostics=diagnostics)


def find_cycle(G: nx.DiGraph, ids: list[str]) -> list[str] | None:
    """Three-colour DFS. Returns the nodes of the first cycle found, or None.

    The walk is iterative so long dependency chains don't hit the recursion
    limit. The returned ids follow the dependency direction.
    """
    color = dict.fromkeys(ids, WHITE)
    for root in ids:
        if color[root] != WHITE:
            continue
        color[root] = GRAY
        path = [root]
        stack = [iter(G.successors(root))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                color[path.pop()] = BLACK
                stack.pop()
                continue
            if color[child] == GRAY:
                return path[path.index(child):]
            if color[child] == WHITE:
                color[child] = GRAY
                path.append(child)
                stack.append(iter(G.successors(child)))
    return None
