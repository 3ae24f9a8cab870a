from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any

from daybook.domain.dates import canonical_clock, parse_day
from daybook.domain.entities import DEFAULT_DURATION_MIN, DEFAULT_NOTIFICATION_MIN, TaskEntity
from daybook.domain.enums import EntityKind, RecurringType, TaskType
from daybook.domain.errors import NotFound, ValidationError
from daybook.infra.store import DAILY_TASKS_COUNT_KEY, EntityStore

logger = logging.getLogger(__name__)

_BOOL_FIELDS = ("is_completed", "is_daily", "has_time_required", "is_recurring")
_DATE_FIELDS = ("scheduled_date", "recurring_end_date")
_CLOCK_FIELDS = ("scheduled_time", "end_time")


@dataclass(frozen=True)
class DailyProgress:
    completed: int
    total: int
    target: int


def _optional_int(key: str, value: Any, minimum: int) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{key} must be an integer")
    if value < minimum:
        raise ValidationError(f"{key} must be >= {minimum}")
    return value


def _recurring_days(value: Any) -> tuple[int, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",") if part.strip()]
        try:
            value = [int(part) for part in parts]
        except ValueError as exc:
            raise ValidationError(f"Invalid recurring days {value!r}") from exc
    days = set()
    for day in value:
        if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 7:
            raise ValidationError(f"Recurring day must be 1-7, got {day!r}")
        days.add(day)
    return tuple(sorted(days))


def _letter(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("letter_value must be a string")
    value = value.strip()
    return value[0].upper() if value else None


class TaskService:
    def __init__(
        self,
        store: EntityStore,
        tz: tzinfo | None = None,
        daily_tasks_default: int = 8,
    ) -> None:
        self._store = store
        self._tz = tz
        self._daily_tasks_default = daily_tasks_default
        # Held across the daily slot lookup and the insert.
        self._create_lock = threading.Lock()

    def list_tasks(self) -> list[TaskEntity]:
        return self._store.list(EntityKind.TASK)

    def get_task(self, task_id: int) -> TaskEntity:
        task = self._store.get(EntityKind.TASK, task_id)
        if task is None:
            raise NotFound(EntityKind.TASK.value, task_id)
        return task

    def create_task(self, data: Mapping[str, Any]) -> TaskEntity:
        normalized = self._normalize_data(data)
        if not normalized.get("name"):
            raise ValidationError("Task name is required")
        if "task_type" not in normalized:
            raise ValidationError("Task type is required")

        normalized.setdefault("is_completed", False)
        normalized.setdefault("is_daily", False)
        normalized.setdefault("has_time_required", True)
        if normalized["has_time_required"]:
            if normalized.get("duration") is None:
                normalized["duration"] = DEFAULT_DURATION_MIN
            if normalized.get("notification_time") is None:
                normalized["notification_time"] = DEFAULT_NOTIFICATION_MIN
        normalized.update(self._inactive_fields(normalized["task_type"]))

        with self._create_lock:
            if normalized["is_daily"] and normalized.get("daily_position") is None:
                normalized["daily_position"] = self._next_daily_position()
            task = self._store.create(EntityKind.TASK, normalized)
        logger.info("Created task id=%s type=%s daily=%s", task.id, task.task_type, task.is_daily)
        return task

    def update_task(self, task_id: int, data: Mapping[str, Any]) -> TaskEntity:
        current = self.get_task(task_id)
        normalized = self._normalize_data(data)
        if "name" in normalized and not normalized["name"]:
            raise ValidationError("Task name is required")
        task_type = normalized.get("task_type", current.task_type)
        normalized.update(self._inactive_fields(task_type))

        task = self._store.update(EntityKind.TASK, task_id, normalized)
        if task is None:
            raise NotFound(EntityKind.TASK.value, task_id)
        logger.info("Updated task id=%s fields=%s", task_id, sorted(data))
        return task

    def complete_task(self, task_id: int, outcome: bool | str) -> TaskEntity:
        """
        Record the outcome of a task according to its type.

        yes-no tasks take a boolean and only toggle ``is_completed``. Letter
        tasks keep the first character of the outcome, upper-cased. Subjective
        tasks store the text as given. Both of the latter mark the task done.
        """
        task = self.get_task(task_id)

        if task.task_type == TaskType.YES_NO:
            if not isinstance(outcome, bool):
                raise ValidationError("yes-no tasks are completed with a boolean")
            changes: dict[str, Any] = {"is_completed": outcome}
        elif task.task_type == TaskType.LETTER:
            if not isinstance(outcome, str) or not outcome.strip():
                logger.warning("Rejected empty letter for task id=%s", task_id)
                raise ValidationError("A letter is required to complete this task")
            changes = {"letter_value": outcome.strip()[0].upper(), "is_completed": True}
        else:
            if not isinstance(outcome, str) or not outcome.strip():
                logger.warning("Rejected empty content for task id=%s", task_id)
                raise ValidationError("Content is required to complete this task")
            changes = {"subjective_content": outcome, "is_completed": True}

        updated = self._store.update(EntityKind.TASK, task_id, changes)
        if updated is None:
            raise NotFound(EntityKind.TASK.value, task_id)
        logger.info("Completed task id=%s completed=%s", task_id, updated.is_completed)
        return updated

    def delete_task(self, task_id: int) -> bool:
        deleted = self._store.delete(EntityKind.TASK, task_id)
        if deleted:
            logger.info("Deleted task id=%s", task_id)
        return deleted

    def daily_target(self) -> int:
        raw = self._store.get_setting(DAILY_TASKS_COUNT_KEY)
        try:
            return int(raw) if raw is not None else self._daily_tasks_default
        except ValueError:
            logger.warning("Ignoring non-numeric %s=%r", DAILY_TASKS_COUNT_KEY, raw)
            return self._daily_tasks_default

    def daily_progress(self) -> DailyProgress:
        daily = self._store.scan(EntityKind.TASK, lambda task: task.is_daily)
        completed = sum(1 for task in daily if task.is_completed)
        return DailyProgress(completed=completed, total=len(daily), target=self.daily_target())

    def _next_daily_position(self) -> int:
        positions = [
            task.daily_position
            for task in self._store.scan(EntityKind.TASK, lambda task: task.is_daily)
            if task.daily_position is not None
        ]
        return max(positions, default=0) + 1

    @staticmethod
    def _inactive_fields(task_type: TaskType) -> dict[str, None]:
        if task_type == TaskType.LETTER:
            return {"subjective_content": None}
        if task_type == TaskType.SUBJECTIVE:
            return {"letter_value": None}
        return {"letter_value": None, "subjective_content": None}

    def _normalize_data(self, data: Mapping[str, Any]) -> dict[str, Any]:
        normalized = dict(data)

        if "name" in normalized:
            name = normalized["name"]
            if not isinstance(name, str):
                raise ValidationError("Task name must be a string")
            normalized["name"] = name.strip()

        if "task_type" in normalized:
            try:
                normalized["task_type"] = TaskType(normalized["task_type"])
            except ValueError as exc:
                raise ValidationError(f"Unknown task type {normalized['task_type']!r}") from exc

        for key in _BOOL_FIELDS:
            if key in normalized and normalized[key] is None:
                del normalized[key]
            elif key in normalized and not isinstance(normalized[key], bool):
                raise ValidationError(f"{key} must be a boolean")

        for key in _DATE_FIELDS:
            if key in normalized:
                value = normalized[key]
                normalized[key] = parse_day(value, self._tz) if value not in (None, "") else None

        for key in _CLOCK_FIELDS:
            if key in normalized:
                value = normalized[key]
                normalized[key] = canonical_clock(value) if value not in (None, "") else None

        if "letter_value" in normalized:
            normalized["letter_value"] = _letter(normalized["letter_value"])
        if "subjective_content" in normalized:
            content = normalized["subjective_content"]
            if content is not None and not isinstance(content, str):
                raise ValidationError("subjective_content must be a string")
        if "daily_position" in normalized:
            normalized["daily_position"] = _optional_int("daily_position", normalized["daily_position"], 1)
        if "duration" in normalized:
            normalized["duration"] = _optional_int("duration", normalized["duration"], 1)
        if "notification_time" in normalized:
            normalized["notification_time"] = _optional_int(
                "notification_time", normalized["notification_time"], 0
            )
        if "recurring_type" in normalized:
            value = normalized["recurring_type"]
            try:
                normalized["recurring_type"] = RecurringType(value) if value else None
            except ValueError as exc:
                raise ValidationError(f"Unknown recurring type {value!r}") from exc
        if "recurring_days" in normalized:
            normalized["recurring_days"] = _recurring_days(normalized["recurring_days"])

        return normalized
