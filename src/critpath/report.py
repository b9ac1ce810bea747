"""Markdown and Mermaid output for a computed schedule."""

from __future__ import annotations

from datetime import date

from critpath.models import ScheduleResult
from critpath.scheduler import critical_chains, project_dates


_LABEL_ESCAPES = [
    ("#", "#35;"),
    ('"', "#quot;"),
    ("<", "#lt;"),
    (">", "#gt;"),
    ("[", "#91;"),
    ("]", "#93;"),
]


def _escape(text: str) -> str:
    # "#" goes first so the entity codes below are not escaped again
    for char, code in _LABEL_ESCAPES:
        text = text.replace(char, code)
    return text


def _key(index: int) -> str:
    # Mermaid ids must be plain words; work-item ids can be anything.
    return f"n{index}"


def mermaid_flowchart(result: ScheduleResult, hide_completed: bool = False) -> str:
    """Mermaid flowchart of the network, critical nodes and edges highlighted."""
    lines = ["flowchart LR"]
    lines.append("    classDef done fill:#2d6a4f,stroke:#1b4332,color:#d8f3dc")
    lines.append("    classDef crit fill:#d4a373,stroke:#e76f51,color:#000,stroke-width:3px")
    lines.append("    classDef default fill:#457b9d,stroke:#1d3557,color:#f1faee")

    keys: dict[str, str] = {}
    for n in result.nodes:
        if hide_completed and n.completed:
            continue
        keys[n.id] = _key(n.index)
        label = _escape(f"{n.id}: {n.title}")
        lines.append(f'    {keys[n.id]}["{label}<br/>{n.duration}d, ES {n.early_start}"]')

    critical_links: list[str] = []
    link = 0
    for e in result.edges:
        if e.from_id not in keys or e.to_id not in keys:
            continue
        if e.is_critical:
            lines.append(f"    {keys[e.from_id]} ==> {keys[e.to_id]}")
            critical_links.append(str(link))
        else:
            lines.append(f"    {keys[e.from_id]} --> {keys[e.to_id]}")
        link += 1

    done = [keys[n.id] for n in result.nodes if n.completed and n.id in keys]
    crit = [keys[n.id] for n in result.nodes if n.is_critical and not n.completed and n.id in keys]
    if done:
        lines.append(f"    class {','.join(done)} done")
    if crit:
        lines.append(f"    class {','.join(crit)} crit")
    if critical_links:
        lines.append(f"    linkStyle {','.join(critical_links)} stroke:#e76f51,stroke-width:3px")
    return "\n".join(lines)


def markdown_report(result: ScheduleResult, start: date | None = None) -> str:
    """Critical chain, totals and diagnostics as a markdown document."""
    dates = project_dates(result, start) if start else {}
    crit_count = len(result.critical_ids)

    out = ["# Schedule report", ""]
    out.append(f"- Project duration: **{result.project_duration} days**")
    if start:
        end = max((f for _, f in dates.values()), default=start)
        out.append(f"- Start: {start.isoformat()}, projected finish: {end.isoformat()}")
    out.append(f"- Work items: {len(result.nodes)} ({crit_count} critical)")
    out.append("")

    out += ["## Critical path", ""]
    if not result.critical_path:
        out += ["No critical path found.", ""]
    else:
        header = "| # | ID | Task | Days | Early | Late |"
        sep = "|---|----|------|------|-------|------|"
        if start:
            header += " Dates |"
            sep += "-------|"
        out += [header, sep]
        for i, tid in enumerate(result.critical_path, 1):
            n = result.node(tid)
            row = (
                f"| {i} | {n.id} | {n.title} | {n.duration} "
                f"| {n.early_start}-{n.early_finish} | {n.late_start}-{n.late_finish} |"
            )
            if start:
                s, f = dates[tid]
                row += f" {s.isoformat()} - {f.isoformat()} |"
            out.append(row)
        out.append("")

    chains = critical_chains(result)
    if len(chains) > 1:
        out += ["## Critical chains", ""]
        for i, chain in enumerate(chains, 1):
            days = sum(result.node(tid).duration for tid in chain)
            out.append(f"{i}. {' -> '.join(chain)} ({days} days)")
        out.append("")

    if result.diagnostics:
        out += ["## Diagnostics", ""]
        out += [f"- `{d.code}`: {d.message}" for d in result.diagnostics]
        out.append("")

    out += ["## Network", "", "```mermaid", mermaid_flowchart(result), "```", ""]
    return "\n".join(out)
