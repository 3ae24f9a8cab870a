from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .dates import to_clock_minutes
from .enums import RecurringType, TaskType

DEFAULT_DURATION_MIN = 30
DEFAULT_NOTIFICATION_MIN = 15

TASK_MUTABLE_FIELDS = frozenset({
    "name",
    "task_type",
    "is_completed",
    "letter_value",
    "subjective_content",
    "is_daily",
    "daily_position",
    "scheduled_date",
    "scheduled_time",
    "end_time",
    "has_time_required",
    "duration",
    "notification_time",
    "is_recurring",
    "recurring_type",
    "recurring_days",
    "recurring_end_date",
})

NOTE_MUTABLE_FIELDS = frozenset({"title", "content", "associated_date"})

NOTIFICATION_MUTABLE_FIELDS = frozenset({"task_id", "notification_time", "is_read"})

SERVER_FIELDS = frozenset({"id", "created_at"})


@dataclass(frozen=True)
class TaskEntity:
    id: int
    name: str
    task_type: TaskType
    created_at: datetime
    is_completed: bool = False
    letter_value: str | None = None
    subjective_content: str | None = None
    is_daily: bool = False
    daily_position: int | None = None
    scheduled_date: Optional[date] = None
    scheduled_time: str | None = None
    end_time: str | None = None
    has_time_required: bool = True
    duration: int | None = None
    notification_time: int | None = None
    is_recurring: bool = False
    recurring_type: RecurringType | None = None
    recurring_days: tuple[int, ...] = ()
    recurring_end_date: Optional[date] = None

    @property
    def effective_scheduled_time(self) -> str | None:
        return self.scheduled_time if self.has_time_required else None

    @property
    def effective_end_time(self) -> str | None:
        return self.end_time if self.has_time_required else None

    @property
    def effective_duration(self) -> int | None:
        return self.duration if self.has_time_required else None

    @property
    def effective_notification_time(self) -> int | None:
        return self.notification_time if self.has_time_required else None

    def time_window(self) -> tuple[int, int] | None:
        """Start and end of the task in minutes since midnight, if it is timed."""
        start_raw = self.effective_scheduled_time
        if not start_raw:
            return None
        start = to_clock_minutes(start_raw)
        end_raw = self.effective_end_time
        if end_raw:
            return start, to_clock_minutes(end_raw)
        return start, start + (self.effective_duration or DEFAULT_DURATION_MIN)


@dataclass(frozen=True)
class NoteEntity:
    id: int
    title: str
    content: str
    created_at: datetime
    associated_date: Optional[date] = None


@dataclass(frozen=True)
class NotificationEntity:
    id: int
    task_id: int
    notification_time: datetime
    created_at: datetime
    is_read: bool = False


@dataclass(frozen=True)
class SettingEntity:
    key: str
    value: str
