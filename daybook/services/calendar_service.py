"""
Calendar aggregation over materialized task and note dates.

Recurrence rules are stored on tasks but never expanded here: a task shows
up on the calendar only on its own ``scheduled_date``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import tzinfo

from daybook.domain.dates import DayLike, iter_days, parse_day, to_day_key
from daybook.domain.entities import NoteEntity, TaskEntity
from daybook.domain.enums import EntityKind
from daybook.domain.errors import ValidationError
from daybook.infra.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class DayBucket:
    tasks: list[TaskEntity] = field(default_factory=list)
    notes: list[NoteEntity] = field(default_factory=list)


class CalendarService:
    def __init__(
        self,
        store: EntityStore,
        tz: tzinfo | None = None,
        max_range_days: int = 366,
    ) -> None:
        self._store = store
        self._tz = tz
        self._max_range_days = max_range_days

    def tasks_on_day(self, day: DayLike) -> list[TaskEntity]:
        key = to_day_key(day, self._tz)
        return self._store.scan(
            EntityKind.TASK,
            lambda task: self._day_key(task.scheduled_date) == key,
        )

    def notes_on_day(self, day: DayLike) -> list[NoteEntity]:
        key = to_day_key(day, self._tz)
        return self._store.scan(
            EntityKind.NOTE,
            lambda note: self._day_key(note.associated_date) == key,
        )

    def daily_tasks(self) -> list[TaskEntity]:
        """Daily checklist ordered by slot; tasks without a slot keep store order at the end."""
        daily = self._store.scan(EntityKind.TASK, lambda task: task.is_daily)
        return sorted(daily, key=lambda task: (task.daily_position is None, task.daily_position or 0))

    def aggregate_range(self, start: DayLike, end: DayLike) -> dict[str, DayBucket]:
        start_day = parse_day(start, self._tz)
        end_day = parse_day(end, self._tz)
        if start_day > end_day:
            raise ValidationError(f"Range start {start_day} is after end {end_day}")
        span = (end_day - start_day).days + 1
        if span > self._max_range_days:
            raise ValidationError(f"Range of {span} days exceeds the limit of {self._max_range_days}")

        buckets = {day.isoformat(): DayBucket() for day in iter_days(start_day, end_day)}
        snapshot = self._store.snapshot(EntityKind.TASK, EntityKind.NOTE)

        for task in snapshot[EntityKind.TASK]:
            bucket = buckets.get(self._day_key(task.scheduled_date))
            if bucket is not None:
                bucket.tasks.append(task)
        for note in snapshot[EntityKind.NOTE]:
            bucket = buckets.get(self._day_key(note.associated_date))
            if bucket is not None:
                bucket.notes.append(note)

        logger.debug("Aggregated %s days from %s", span, start_day)
        return buckets

    def _day_key(self, value) -> str | None:
        if value is None:
            return None
        return to_day_key(value, self._tz)
