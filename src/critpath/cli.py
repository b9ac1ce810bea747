"""Typer CLI for critpath."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from critpath.demo import generate_items
from critpath.errors import CycleDetectedError, ScheduleError
from critpath.graph import filter_by_category
from critpath.models import ScheduleConfig, ScheduleNode, ScheduleResult
from critpath.persistence import DEFAULT_DB_FILE, Store
from critpath.report import markdown_report, mermaid_flowchart
from critpath.scheduler import (
    compute_schedule,
    critical_chains,
    critical_nodes,
    project_dates,
)

app = typer.Typer(
    name="critpath",
    help="Critical path scheduling for a list of dependent work items.",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)

_state = {"file": DEFAULT_DB_FILE}


def _get_store() -> Store:
    return Store(_state["file"])


def _parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid date '{value}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)


def _compute(
    category: str | None = None,
    max_dangling: int | None = None,
) -> tuple[ScheduleConfig, ScheduleResult] | None:
    """Load the snapshot and schedule it. Returns None when there is nothing to do."""
    store = _get_store()
    try:
        config, items = store.load()
        config = config or ScheduleConfig()
        if max_dangling is not None:
            config.max_dangling = max_dangling

        items = filter_by_category(items, category)
        if not items:
            console.print("No work items to schedule.")
            return None

        result = compute_schedule(items, config)
    except CycleDetectedError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print(f"[red]Items on the cycle: {', '.join(e.cycle)}[/red]")
        raise typer.Exit(1)
    except ScheduleError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    for d in result.diagnostics:
        logger.warning(d.message)
    logger.debug(
        "Scheduled %d items, %d edges, project duration %d days",
        len(result.nodes),
        len(result.edges),
        result.project_duration,
    )
    return config, result


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main(
    file: Annotated[str, typer.Option("--file", "-f", help="Work-item snapshot (JSON)")] = DEFAULT_DB_FILE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """Critical path scheduling for a list of dependent work items."""
    _state["file"] = file
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
        force=True,
    )


@app.command()
def schedule(
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Only schedule this category")] = None,
    remaining: Annotated[bool, typer.Option("--remaining", "-r", help="Hide completed items")] = False,
    start: Annotated[Optional[str], typer.Option(help="Project start date (YYYY-MM-DD) for calendar dates")] = None,
    max_dangling: Annotated[Optional[int], typer.Option(help="Abort when more dangling dependencies than this")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON")] = False,
    csv: Annotated[Optional[str], typer.Option("--csv", help="Export schedule to CSV file")] = None,
) -> None:
    """Calculate and display the full schedule with slack and critical flags."""
    computed = _compute(category, max_dangling)
    if computed is None:
        return
    config, result = computed

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    start_date = _parse_date(start) or config.start_date
    dates = project_dates(result, start_date) if start_date else {}
    nodes = [n for n in result.nodes if not (remaining and n.completed)]

    if csv:
        import csv as csv_mod

        with Path(csv).open("w", newline="") as f:
            writer = csv_mod.writer(f)
            writer.writerow(["ID", "Task", "Days", "ES", "EF", "LS", "LF", "Slack", "Critical", "Layer", "Lane"])
            for n in nodes:
                writer.writerow([
                    n.id,
                    n.title,
                    n.duration,
                    n.early_start,
                    n.early_finish,
                    n.late_start,
                    n.late_finish,
                    n.slack,
                    "yes" if n.is_critical else "",
                    n.layer,
                    n.lane_index,
                ])
        console.print(f"[green]Exported {len(nodes)} items to {csv}[/green]")
        return

    table = Table(title="Schedule")
    table.add_column("ID")
    table.add_column("Task")
    table.add_column("Days")
    table.add_column("Early")
    table.add_column("Late")
    table.add_column("Slack")
    if dates:
        table.add_column("Dates")
    table.add_column("Flags")

    for n in nodes:
        flags = []
        if n.is_critical:
            flags.append("CRITICAL")
        if n.completed:
            flags.append("DONE")
        row = [
            n.id,
            n.title,
            str(n.duration),
            f"{n.early_start}-{n.early_finish}",
            f"{n.late_start}-{n.late_finish}",
            str(n.slack),
        ]
        if dates:
            s, e = dates[n.id]
            row.append(f"{s:%b %d} - {e:%b %d}")
        row.append(" | ".join(flags) or "-")
        table.add_row(*row, style="bold yellow" if n.is_critical else None)

    console.print(table)
    console.print(f"\nProject duration: [bold]{result.project_duration}[/bold] days")


@app.command("critical-path")
def critical_path(
    sort: Annotated[str, typer.Option(help="Sort order: topo (default), chrono, chain")] = "topo",
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Only schedule this category")] = None,
) -> None:
    """Display only the critical items."""
    computed = _compute(category)
    if computed is None:
        return
    _, result = computed

    crit = critical_nodes(result)
    if not crit:
        console.print("No critical path found.")
        return

    if sort == "chrono":
        crit.sort(key=lambda n: (n.early_start, n.index))
        _print_critical_table(crit, title="Critical Path (chronological)")
    elif sort == "chain":
        chains = critical_chains(result)
        for i, chain in enumerate(chains, 1):
            chain_nodes = [result.node(tid) for tid in chain]
            days = sum(n.duration for n in chain_nodes)
            console.print(f"\n[bold]Chain {i}[/bold]  ({days} days)")
            _print_critical_table(chain_nodes, title=None)
        console.print(f"\n[dim]{len(chains)} chain(s), {len(crit)} critical items total[/dim]")
    else:
        _print_critical_table([result.node(tid) for tid in result.critical_path], title="Critical Path")

    console.print(f"\nProject duration: [bold]{result.project_duration}[/bold] days")


def _print_critical_table(nodes: list[ScheduleNode], title: str | None) -> None:
    """Print a critical path table."""
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Task")
    table.add_column("Days")
    table.add_column("Start")
    table.add_column("Finish")

    for n in nodes:
        table.add_row(n.id, n.title, str(n.duration), str(n.early_start), str(n.early_finish))

    console.print(table)


@app.command()
def layout(
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Only schedule this category")] = None,
) -> None:
    """Show the (layer, lane) grid position of every item."""
    computed = _compute(category)
    if computed is None:
        return
    _, result = computed

    table = Table(title="Layout")
    table.add_column("Layer")
    table.add_column("Lane")
    table.add_column("ID")
    table.add_column("Task")
    table.add_column("ES")

    for n in sorted(result.nodes, key=lambda n: (n.layer, n.lane_index)):
        table.add_row(
            str(n.layer),
            str(n.lane_index),
            n.id,
            n.title,
            str(n.early_start),
            style="bold yellow" if n.is_critical else None,
        )
    console.print(table)


@app.command()
def viz(
    output: Annotated[str, typer.Option("-o", "--output", help="Output file path")] = "dag.md",
    hide_done: bool = False,
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Only schedule this category")] = None,
) -> None:
    """Generate a Mermaid flowchart of the dependency network."""
    computed = _compute(category)
    if computed is None:
        return
    _, result = computed

    text = "```mermaid\n" + mermaid_flowchart(result, hide_completed=hide_done) + "\n```\n"
    Path(output).write_text(text)
    console.print(f"[green]Wrote Mermaid diagram to {output}[/green]")


@app.command()
def report(
    output: Annotated[str, typer.Option("-o", "--output", help="Output file path")] = "schedule.md",
    start: Annotated[Optional[str], typer.Option(help="Project start date (YYYY-MM-DD)")] = None,
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Only schedule this category")] = None,
) -> None:
    """Write a markdown report of the critical chain and total duration."""
    computed = _compute(category)
    if computed is None:
        return
    config, result = computed

    start_date = _parse_date(start) or config.start_date
    Path(output).write_text(markdown_report(result, start_date))
    console.print(f"[green]Wrote report to {output}[/green]")


@app.command()
def demo(
    count: Annotated[int, typer.Option("--count", "-n", help="Number of work items")] = 12,
    seed: Annotated[Optional[int], typer.Option(help="Random seed for a reproducible snapshot")] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing snapshot")] = False,
) -> None:
    """Write a generated sample snapshot to the work-item file."""
    store = _get_store()
    if store.db_path.exists() and not force:
        console.print(f"[red]{store.db_path} already exists. Use --force to overwrite.[/red]")
        raise typer.Exit(1)

    items = generate_items(count, seed=seed)
    store.save(ScheduleConfig(), items)
    console.print(f"[green]Wrote {len(items)} sample items to {store.db_path}[/green]")


if __name__ == "__main__":
    app()
