from datetime import date, datetime

import pytest

from critpath.errors import ValidationError
from critpath.models import Priority, ScheduleConfig, WorkItem
from critpath.persistence import Store


def test_work_item_serialization():
    item = WorkItem(
        id="T-1",
        title="Design",
        duration=3,
        dependency_ids=["T-0"],
        priority=Priority.HIGH,
        category="Project Management",
    )
    d = item.to_dict()
    assert d["priority"] == "High"
    assert d["dependency_ids"] == ["T-0"]

    item2 = WorkItem.from_dict(d)
    assert item2 == item


def test_work_item_accepts_camel_case_dependencies():
    item = WorkItem.from_dict({"id": "C", "title": "Ship", "dependencyIds": ["A", "B"]})
    assert item.dependency_ids == ["A", "B"]
    assert item.duration is None
    assert item.priority is None
    assert item.completed is False


def test_schedule_config_serialization():
    config = ScheduleConfig(max_dangling=2, start_date=date(2026, 3, 2))
    d = config.to_dict()
    assert d["start_date"] == "2026-03-02"
    assert d["priority_durations"] == {"High": 2, "Medium": 3, "Low": 5}

    c2 = ScheduleConfig.from_dict(d)
    assert c2.max_dangling == 2
    assert c2.start_date == date(2026, 3, 2)
    assert c2.max_nodes == 10_000


def test_store_round_trip(tmp_path):
    store = Store(tmp_path / "items.json")
    items = [
        WorkItem("A", "Design", 2),
        WorkItem("B", "Build", None, ["A"], Priority.LOW, completed=True),
    ]
    store.save(ScheduleConfig(max_dangling=0), items)

    config, loaded = store.load()
    assert config.max_dangling == 0
    assert loaded == items


def test_store_loads_bare_list(tmp_path):
    path = tmp_path / "items.json"
    path.write_text('[{"id": "A", "title": "Only", "duration": 1}]')
    config, items = Store(path).load()
    assert config is None
    assert [i.id for i in items] == ["A"]


def test_store_missing_file(tmp_path):
    assert Store(tmp_path / "nope.json").load() == (None, [])


def test_unknown_priority_is_a_validation_error():
    with pytest.raises(ValidationError) as exc:
        WorkItem.from_dict({"id": "A", "title": "a", "priority": "Urgent"})
    assert exc.value.item_id == "A"
    assert "unknown priority 'Urgent'" in str(exc.value)


def test_work_item_dates_from_camel_case():
    item = WorkItem.from_dict({
        "id": "A",
        "title": "Survey",
        "startDate": "2026-03-02",
        "projectEndDate": "2026-03-06T00:00:00",
    })
    assert item.start_date == datetime(2026, 3, 2)
    assert item.end_date == datetime(2026, 3, 6)
    assert WorkItem.from_dict(item.to_dict()) == item


def test_invalid_date_is_a_validation_error():
    with pytest.raises(ValidationError):
        WorkItem.from_dict({"id": "A", "title": "a", "startDate": "next week"})
