from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from daybook.domain.enums import EntityKind, TaskType
from daybook.domain.errors import ValidationError
from daybook.infra.store import MemoryEntityStore
from daybook.services.calendar_service import CalendarService
from daybook.services.container import Container


def _task(container: Container, name: str, **extra):
    return container.tasks.create_task({"name": name, "task_type": "yes-no", **extra})


def _note(container: Container, title: str, **extra):
    return container.notes.create_note({"title": title, "content": "...", **extra})


def test_range_scenario(container: Container) -> None:
    task = _task(container, "A", scheduled_date="2024-03-10")
    note = _note(container, "B", associated_date="2024-03-10")

    buckets = container.calendar.aggregate_range("2024-03-09", "2024-03-11")

    assert list(buckets) == ["2024-03-09", "2024-03-10", "2024-03-11"]
    assert buckets["2024-03-10"].tasks == [task]
    assert buckets["2024-03-10"].notes == [note]
    assert buckets["2024-03-09"].tasks == [] and buckets["2024-03-09"].notes == []
    assert buckets["2024-03-11"].tasks == [] and buckets["2024-03-11"].notes == []


def test_single_day_range_matches_day_queries(container: Container) -> None:
    _task(container, "on", scheduled_date="2024-03-10")
    _task(container, "other", scheduled_date="2024-03-11")
    _task(container, "undated", is_daily=True)
    _note(container, "n1", associated_date="2024-03-10")
    _note(container, "n2")

    bucket = container.calendar.aggregate_range("2024-03-10", "2024-03-10")["2024-03-10"]

    assert bucket.tasks == container.calendar.tasks_on_day("2024-03-10")
    assert bucket.notes == container.calendar.notes_on_day(date(2024, 3, 10))
    assert [task.name for task in bucket.tasks] == ["on"]


def test_range_counts_match_per_day_queries(container: Container) -> None:
    for day in ("2024-02-28", "2024-02-29", "2024-02-29", "2024-03-01", "2024-03-05"):
        _task(container, f"t-{day}", scheduled_date=day)

    buckets = container.calendar.aggregate_range("2024-02-27", "2024-03-02")

    assert len(buckets) == 5
    total = sum(len(bucket.tasks) for bucket in buckets.values())
    per_day = sum(len(container.calendar.tasks_on_day(day)) for day in buckets)
    assert total == per_day == 4


def test_bucket_order_follows_insertion(container: Container) -> None:
    names = ["first", "second", "third"]
    for name in names:
        _task(container, name, scheduled_date="2024-03-10")

    bucket = container.calendar.aggregate_range("2024-03-10", "2024-03-10")["2024-03-10"]

    assert [task.name for task in bucket.tasks] == names


def test_reversed_range_is_rejected(container: Container) -> None:
    with pytest.raises(ValidationError):
        container.calendar.aggregate_range("2024-03-11", "2024-03-10")


def test_range_limit_is_enforced() -> None:
    calendar = CalendarService(MemoryEntityStore(), max_range_days=7)
    assert len(calendar.aggregate_range("2024-03-01", "2024-03-07")) == 7
    with pytest.raises(ValidationError):
        calendar.aggregate_range("2024-03-01", "2024-03-08")


def test_invalid_range_bounds_are_rejected(container: Container) -> None:
    with pytest.raises(ValidationError):
        container.calendar.aggregate_range("March", "2024-03-10")


def test_daily_tasks_ignore_scheduled_date(container: Container) -> None:
    _task(container, "dated-daily", is_daily=True, scheduled_date="2024-03-10")
    _task(container, "dated-only", scheduled_date="2024-03-10")
    _task(container, "daily", is_daily=True, daily_position=1)

    daily = container.calendar.daily_tasks()

    assert all(task.is_daily for task in daily)
    assert [task.name for task in daily] == ["dated-daily", "daily"]
    assert "dated-only" not in {task.name for task in daily}


def test_daily_tasks_sorted_by_slot(any_store) -> None:
    any_store.create(EntityKind.TASK, {"name": "loose", "task_type": TaskType.YES_NO, "is_daily": True})
    any_store.create(EntityKind.TASK, {"name": "two", "task_type": TaskType.YES_NO, "is_daily": True, "daily_position": 2})
    any_store.create(EntityKind.TASK, {"name": "one", "task_type": TaskType.YES_NO, "is_daily": True, "daily_position": 1})

    daily = CalendarService(any_store).daily_tasks()

    assert [task.name for task in daily] == ["one", "two", "loose"]


def test_day_boundary_zone_applies_to_datetime_values() -> None:
    store = MemoryEntityStore()
    store.create(EntityKind.NOTE, {
        "title": "late",
        "content": "",
        "associated_date": datetime(2024, 3, 10, 23, 30, tzinfo=timezone.utc),
    })

    utc_calendar = CalendarService(store)
    berlin_calendar = CalendarService(store, tz=ZoneInfo("Europe/Berlin"))

    assert [n.title for n in utc_calendar.notes_on_day("2024-03-10")] == ["late"]
    assert [n.title for n in berlin_calendar.notes_on_day("2024-03-11")] == ["late"]
    assert berlin_calendar.aggregate_range("2024-03-10", "2024-03-11")["2024-03-11"].notes
