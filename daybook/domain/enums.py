from __future__ import annotations

from enum import StrEnum


class TaskType(StrEnum):
    YES_NO = "yes-no"
    LETTER = "letter"
    SUBJECTIVE = "subjective"


class RecurringType(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class EntityKind(StrEnum):
    TASK = "task"
    NOTE = "note"
    NOTIFICATION = "notification"
