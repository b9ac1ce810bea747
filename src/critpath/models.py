"""Work item, schedule config and schedule result definitions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime

from critpath.errors import ValidationError


class Priority(enum.StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


DEFAULT_PRIORITY_DURATIONS: dict[str, int] = {
    Priority.HIGH.value: 2,
    Priority.MEDIUM.value: 3,
    Priority.LOW.value: 5,
}


@dataclass
class ScheduleConfig:
    """Engine limits and heuristics stored alongside the work items."""

    max_nodes: int = 10_000
    max_edges: int = 100_000
    max_dangling: int | None = None  # None: dangling refs never abort the run
    priority_durations: dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_DURATIONS)
    )
    start_date: date | None = None  # only used to project offsets onto dates

    def to_dict(self) -> dict:
        return {
            "max_nodes": self.max_nodes,
            "max_edges": self.max_edges,
            "max_dangling": self.max_dangling,
            "priority_durations": self.priority_durations,
            "start_date": self.start_date.isoformat() if self.start_date else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ScheduleConfig:
        start = d.get("start_date")
        return cls(
            max_nodes=d.get("max_nodes", 10_000),
            max_edges=d.get("max_edges", 100_000),
            max_dangling=d.get("max_dangling"),
            priority_durations=d.get(
                "priority_durations", dict(DEFAULT_PRIORITY_DURATIONS)
            ),
            start_date=date.fromisoformat(start) if start else None,
        )


def _parse_datetime(item_id: str | None, value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Task {item_id} has invalid date {value!r}", item_id) from None


@dataclass
class WorkItem:
    """A unit of work as supplied by the task store."""

    id: str
    title: str
    duration: int | None = None  # days; None falls back to the priority heuristic
    dependency_ids: list[str] = field(default_factory=list)
    priority: Priority | None = None
    completed: bool = False  # informational only
    category: str | None = None
    start_date: datetime | None = None  # with end_date, sets the duration when none is given
    end_date: datetime | None = None

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "title": self.title,
            "duration": self.duration,
            "dependency_ids": self.dependency_ids,
            "priority": self.priority.value if self.priority else None,
            "completed": self.completed,
        }
        if self.category is not None:
            d["category"] = self.category
        if self.start_date is not None:
            d["start_date"] = self.start_date.isoformat()
        if self.end_date is not None:
            d["end_date"] = self.end_date.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> WorkItem:
        deps = d.get("dependency_ids", d.get("dependencyIds", d.get("depends_on", [])))
        item_id = d.get("id")
        priority = d.get("priority")
        try:
            priority = Priority(priority) if priority else None
        except ValueError:
            raise ValidationError(f"Task {item_id} has unknown priority {priority!r}", item_id) from None
        return cls(
            id=item_id,
            title=d.get("title", ""),
            duration=d.get("duration"),
            dependency_ids=list(deps or []),
            priority=priority,
            completed=d.get("completed", False),
            category=d.get("category"),
            start_date=_parse_datetime(item_id, d.get("start_date", d.get("startDate"))),
            end_date=_parse_datetime(
                item_id, d.get("end_date", d.get("projectEndDate", d.get("endDate")))
            ),
        )


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem found while building the graph."""

    code: str
    message: str
    item_id: str
    dependency_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "item_id": self.item_id,
            "dependency_id": self.dependency_id,
        }


@dataclass(frozen=True)
class ScheduleNode:
    """A work item with its computed CPM times and grid position."""

    id: str
    title: str
    index: int
    duration: int
    dependency_ids: tuple[str, ...]
    early_start: int
    early_finish: int
    late_start: int
    late_finish: int
    slack: int
    is_critical: bool
    layer: int
    lane_index: int
    priority: Priority | None = None
    completed: bool = False
    category: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "duration": self.duration,
            "dependency_ids": list(self.dependency_ids),
            "early_start": self.early_start,
            "early_finish": self.early_finish,
            "late_start": self.late_start,
            "late_finish": self.late_finish,
            "slack": self.slack,
            "is_critical": self.is_critical,
            "layer": self.layer,
            "lane_index": self.lane_index,
            "priority": self.priority.value if self.priority else None,
            "completed": self.completed,
            "category": self.category,
        }


@dataclass(frozen=True)
class ScheduleEdge:
    from_id: str
    to_id: str
    is_critical: bool

    def to_dict(self) -> dict:
        return {"from_id": self.from_id, "to_id": self.to_id, "is_critical": self.is_critical}


@dataclass
class ScheduleResult:
    """Everything computed for one work-item snapshot."""

    nodes: list[ScheduleNode]
    edges: list[ScheduleEdge]
    project_duration: int
    critical_path: list[str]
    critical_ids: list[str]
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def node(self, node_id: str) -> ScheduleNode:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "project_duration": self.project_duration,
            "critical_path": self.critical_path,
            "critical_ids": self.critical_ids,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
