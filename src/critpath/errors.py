"""Errors raised by the scheduling engine."""

from __future__ import annotations


class ScheduleError(ValueError):
    """Base class for every fatal scheduling error."""


class ValidationError(ScheduleError):
    """A malformed work item, or too many dangling dependency references."""

    def __init__(self, message: str, item_id: str | None = None):
        super().__init__(message)
        self.item_id = item_id


class CycleDetectedError(ScheduleError):
    """The dependency relation contains a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        if len(self.cycle) == 1:
            msg = f"Task {self.cycle[0]} depends on itself"
        else:
            path = " -> ".join(self.cycle + [self.cycle[0]])
            msg = f"Circular dependency detected: {path}"
        super().__init__(msg)


class ResourceLimitError(ScheduleError):
    """The graph is larger than the configured ceiling."""

    def __init__(self, kind: str, limit: int, actual: int):
        self.kind = kind
        self.limit = limit
        self.actual = actual
        super().__init__(f"Too many {kind}: {actual} exceeds the limit of {limit}")
