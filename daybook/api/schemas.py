from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from daybook.services.calendar_service import DayBucket
from daybook.services.task_service import DailyProgress


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TaskUpdate(WireModel):
    name: Optional[str] = None
    task_type: Optional[str] = None
    is_completed: Optional[bool] = None
    letter_value: Optional[str] = None
    subjective_content: Optional[str] = None
    is_daily: Optional[bool] = None
    daily_position: Optional[int] = None
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    end_time: Optional[str] = None
    has_time_required: Optional[bool] = None
    duration: Optional[int] = None
    notification_time: Optional[int] = None
    is_recurring: Optional[bool] = None
    recurring_type: Optional[str] = None
    recurring_days: Union[list[int], str, None] = None
    recurring_end_date: Optional[str] = None


class TaskCreate(TaskUpdate):
    name: str
    task_type: str


class TaskCompletion(WireModel):
    outcome: Union[bool, str]


class NoteUpdate(WireModel):
    title: Optional[str] = None
    content: Optional[str] = None
    associated_date: Optional[str] = None


class NoteCreate(NoteUpdate):
    title: str
    content: str


class NotificationCreate(WireModel):
    task_id: int
    notification_time: str


class SettingValue(WireModel):
    value: Any = None


def to_wire(entity) -> dict[str, Any]:
    return {to_camel(key): value for key, value in asdict(entity).items()}


def bucket_to_wire(bucket: DayBucket) -> dict[str, list[dict[str, Any]]]:
    return {
        "tasks": [to_wire(task) for task in bucket.tasks],
        "notes": [to_wire(note) for note in bucket.notes],
    }


def progress_to_wire(progress: DailyProgress) -> dict[str, int]:
    return to_wire(progress)
