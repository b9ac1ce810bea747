from pathlib import Path

from typer.testing import CliRunner

from critpath.cli import app
from critpath.models import WorkItem
from critpath.persistence import Store

runner = CliRunner()


def _write(items, path="workitems.json"):
    Store(path).save(None, items)


def _diamond():
    return [
        WorkItem("A", "Plan", 2),
        WorkItem("B", "Build", 5, ["A"]),
        WorkItem("C", "Docs", 1, ["A"]),
        WorkItem("D", "Ship", 1, ["B", "C"]),
    ]


def test_schedule_json(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(_diamond())

    result = runner.invoke(app, ["schedule", "--json"])
    assert result.exit_code == 0, result.stdout
    assert '"project_duration": 8' in result.stdout
    assert '"critical_path": [' in result.stdout


def test_schedule_table_and_csv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(_diamond())

    result = runner.invoke(app, ["schedule", "--start", "2026-03-02"])
    assert result.exit_code == 0, result.stdout
    assert "Project duration: 8 days" in result.stdout

    result = runner.invoke(app, ["schedule", "--csv", "out.csv"])
    assert result.exit_code == 0
    rows = Path("out.csv").read_text().splitlines()
    assert rows[0].startswith("ID,Task,Days")
    assert rows[3] == "C,Docs,1,2,3,6,7,4,,1,1"


def test_schedule_bad_start_date(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(_diamond())
    result = runner.invoke(app, ["schedule", "--start", "someday"])
    assert result.exit_code == 1
    assert "Invalid date" in result.stdout


def test_cycle_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write([WorkItem("A", "a", 1, ["B"]), WorkItem("B", "b", 1, ["A"])])

    result = runner.invoke(app, ["schedule"])
    assert result.exit_code == 1
    assert "Circular dependency" in result.stdout
    assert "Items on the cycle: A, B" in result.stdout


def test_max_dangling_option(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write([WorkItem("A", "a", 1), WorkItem("C", "c", 1, ["A", "Z"])])

    result = runner.invoke(app, ["schedule", "--json"])
    assert result.exit_code == 0
    assert "dangling_dependency" in result.stdout

    result = runner.invoke(app, ["schedule", "--max-dangling", "0"])
    assert result.exit_code == 1
    assert "dangling dependency references" in result.stdout


def test_critical_path_chain_view(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write([
        WorkItem("A", "Left 1", 3),
        WorkItem("B", "Left 2", 2, ["A"]),
        WorkItem("C", "Right 1", 1),
        WorkItem("D", "Right 2", 4, ["C"]),
    ])

    result = runner.invoke(app, ["critical-path", "--sort", "chain"])
    assert result.exit_code == 0, result.stdout
    assert "Chain 1" in result.stdout
    assert "Chain 2" in result.stdout
    assert "2 chain(s), 4 critical items total" in result.stdout


def test_layout_viz_and_report(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(_diamond())

    result = runner.invoke(app, ["layout"])
    assert result.exit_code == 0
    assert "Layout" in result.stdout

    result = runner.invoke(app, ["viz", "-o", "net.md"])
    assert result.exit_code == 0
    assert Path("net.md").read_text().startswith("```mermaid\nflowchart LR")

    result = runner.invoke(app, ["report", "--start", "2026-03-02"])
    assert result.exit_code == 0
    text = Path("schedule.md").read_text()
    assert "Project duration: **8 days**" in text


def test_demo_then_schedule_other_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["--file", "sample.json", "demo", "-n", "8", "--seed", "1"])
    assert result.exit_code == 0, result.stdout
    _, items = Store("sample.json").load()
    assert len(items) == 8

    result = runner.invoke(app, ["--file", "sample.json", "demo"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["--file", "sample.json", "schedule", "--json"])
    assert result.exit_code == 0
    assert '"project_duration"' in result.stdout


def test_no_items(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["schedule"])
    assert result.exit_code == 0
    assert "No work items to schedule." in result.stdout


def test_unknown_priority_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("workitems.json").write_text('[{"id": "A", "title": "a", "priority": "high"}]')

    result = runner.invoke(app, ["schedule"])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "unknown priority 'high'" in result.stdout
