"""JSON file persistence for the work-item snapshot and config."""

from __future__ import annotations

import json
from pathlib import Path

from critpath.models import ScheduleConfig, WorkItem

DEFAULT_DB_FILE = "workitems.json"


class Store:
    """Reads and writes the work-item snapshot (JSON file).

    Only the input items and config live here; computed schedules are
    rebuilt on every request and never written.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_FILE):
        self.db_path = Path(db_path)

    def load(self) -> tuple[ScheduleConfig | None, list[WorkItem]]:
        """Return (config_or_None, [WorkItem, ...]) in file order."""
        if not self.db_path.exists():
            return None, []

        raw = json.loads(self.db_path.read_text())

        # Full format: {"config": {...}, "items": [...]}
        # Bare format: [{...}, {...}]
        config = None
        if isinstance(raw, dict):
            if "config" in raw:
                config = ScheduleConfig.from_dict(raw["config"])
            item_source = raw.get("items", [])
        else:
            item_source = raw

        return config, [WorkItem.from_dict(d) for d in item_source]

    def save(self, config: ScheduleConfig | None, items: list[WorkItem]) -> None:
        """Persist config + items to disk."""
        raw: dict = {}
        if config is not None:
            raw["config"] = config.to_dict()
        raw["items"] = [item.to_dict() for item in items]
        self.db_path.write_text(json.dumps(raw, indent=4))
