"""Critical path scheduling: forward pass, backward pass, slack and critical edges."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

import networkx as nx

from critpath.graph import ScheduleGraph, build_graph
from critpath.layout import assign_layout
from critpath.models import (
    ScheduleConfig,
    ScheduleEdge,
    ScheduleNode,
    ScheduleResult,
    WorkItem,
)


def topological_order(sg: ScheduleGraph) -> list[str]:
    """Kahn's algorithm, ties broken by input position so the order is stable."""
    return list(nx.lexicographical_topological_sort(sg.graph, key=sg.index))


# ---------------------------------------------------------------------------
# Forward / backward pass
# ---------------------------------------------------------------------------


def forward_pass(
    sg: ScheduleGraph,
    order: list[str],
) -> tuple[dict[str, int], dict[str, int]]:
    """Earliest start / earliest finish for every node."""
    es: dict[str, int] = {}
    ef: dict[str, int] = {}
    for tid in order:
        preds = sg.predecessors(tid)
        es[tid] = max((ef[p] for p in preds), default=0)
        ef[tid] = es[tid] + sg.duration(tid)
    return es, ef


def backward_pass(
    sg: ScheduleGraph,
    order: list[str],
    ef: dict[str, int],
) -> tuple[dict[str, int], dict[str, int]]:
    """Latest start / latest finish, seeded from the project end."""
    project_end = max(ef.values(), default=0)
    ls: dict[str, int] = {}
    lf: dict[str, int] = {}
    for tid in reversed(order):
        succs = sg.successors(tid)
        lf[tid] = min((ls[s] for s in succs), default=project_end)
        ls[tid] = lf[tid] - sg.duration(tid)
    return ls, lf


# ---------------------------------------------------------------------------
# Critical path extraction
# ---------------------------------------------------------------------------


def critical_path(
    sg: ScheduleGraph,
    order: list[str],
    critical: set[str],
) -> list[str]:
    """One ordered critical chain for display.

    Walks from a critical source to a critical sink over critical-to-critical
    edges. The walk with the greatest total duration wins; ties go to the
    lowest input positions.
    """
    if not critical:
        return []

    # longest remaining duration from each critical node to a critical sink
    reach: dict[str, int] = {}
    for tid in reversed(order):
        if tid not in critical:
            continue
        nxt = [s for s in sg.successors(tid) if s in critical]
        reach[tid] = sg.duration(tid) + max((reach[s] for s in nxt), default=0)

    def pick(candidates: list[str]) -> str:
        return min(candidates, key=lambda n: (-reach[n], sg.index(n)))

    sources = [
        tid for tid in order
        if tid in critical and not any(p in critical for p in sg.predecessors(tid))
    ]
    path = [pick(sources)]
    while True:
        nxt = [s for s in sg.successors(path[-1]) if s in critical]
        if not nxt:
            break
        path.append(pick(nxt))
    return path


def classify_edges(
    sg: ScheduleGraph,
    es: dict[str, int],
    lf: dict[str, int],
    critical: set[str],
) -> list[ScheduleEdge]:
    """An edge is critical only when it carries the zero-slack chain: both
    ends critical and the dependency's latest finish meets the dependent's
    earliest start."""
    edges: list[ScheduleEdge] = []
    for tid in sg.ids:
        for dep in sg.graph.nodes[tid]["dependency_ids"]:
            edges.append(
                ScheduleEdge(
                    from_id=dep,
                    to_id=tid,
                    is_critical=(
                        dep in critical and tid in critical and lf[dep] == es[tid]
                    ),
                )
            )
    return edges


def critical_nodes(result: ScheduleResult) -> list[ScheduleNode]:
    """Return only the zero-slack nodes, in input order."""
    return [n for n in result.nodes if n.is_critical]


def critical_chains(result: ScheduleResult) -> list[list[str]]:
    """Group critical nodes into chains joined by critical edges.

    Disjoint zero-slack chains come back as separate lists, each in
    topological order; chains are ordered by their first node's input position.
    """
    index = {n.id: n.index for n in result.nodes}
    sub = nx.DiGraph()
    sub.add_nodes_from(n.id for n in result.nodes if n.is_critical)
    sub.add_edges_from((e.from_id, e.to_id) for e in result.edges if e.is_critical)

    chains: list[list[str]] = []
    for component in nx.weakly_connected_components(sub):
        chain_graph = sub.subgraph(component)
        chains.append(list(nx.lexicographical_topological_sort(chain_graph, key=index.get)))
    chains.sort(key=lambda chain: index[chain[0]])
    return chains


# ---------------------------------------------------------------------------
# Schedule calculation
# ---------------------------------------------------------------------------


def compute_schedule(
    items: Sequence[WorkItem],
    config: ScheduleConfig | None = None,
) -> ScheduleResult:
    """Full forward + backward pass schedule with critical path and layout."""
    sg = build_graph(items, config)
    order = topological_order(sg)

    es, ef = forward_pass(sg, order)
    ls, lf = backward_pass(sg, order, ef)

    slack = {tid: ls[tid] - es[tid] for tid in sg.ids}
    critical = {tid for tid in sg.ids if slack[tid] == 0}
    positions = assign_layout(sg.ids, es)

    nodes: list[ScheduleNode] = []
    for tid in sg.ids:
        attrs = sg.graph.nodes[tid]
        layer, lane = positions[tid]
        nodes.append(
            ScheduleNode(
                id=tid,
                title=attrs["title"],
                index=attrs["index"],
                duration=attrs["duration"],
                dependency_ids=attrs["dependency_ids"],
                early_start=es[tid],
                early_finish=ef[tid],
                late_start=ls[tid],
                late_finish=lf[tid],
                slack=slack[tid],
                is_critical=tid in critical,
                layer=layer,
                lane_index=lane,
                priority=attrs["priority"],
                completed=attrs["completed"],
                category=attrs["category"],
            )
        )

    return ScheduleResult(
        nodes=nodes,
        edges=classify_edges(sg, es, lf, critical),
        project_duration=max(ef.values(), default=0),
        critical_path=critical_path(sg, order, critical),
        critical_ids=[tid for tid in sg.ids if tid in critical],
        diagnostics=list(sg.diagnostics),
    )


def project_dates(result: ScheduleResult, start: date) -> dict[str, tuple[date, date]]:
    """Map day offsets onto calendar dates counted from an explicit *start*.

    Plain day arithmetic: every calendar day counts.
    """
    return {
        n.id: (start + timedelta(days=n.early_start), start + timedelta(days=n.early_finish))
        for n in result.nodes
    }
