from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Any, Protocol, Union

from daybook.domain.dates import UTC, now
from daybook.domain.entities import (
    NOTE_MUTABLE_FIELDS,
    NOTIFICATION_MUTABLE_FIELDS,
    SERVER_FIELDS,
    TASK_MUTABLE_FIELDS,
    NoteEntity,
    NotificationEntity,
    SettingEntity,
    TaskEntity,
)
from daybook.domain.enums import EntityKind, RecurringType, TaskType
from daybook.domain.errors import ValidationError

logger = logging.getLogger(__name__)

Entity = Union[TaskEntity, NoteEntity, NotificationEntity]
KindLike = Union[EntityKind, str]

DAILY_TASKS_COUNT_KEY = "dailyTasksCount"
DEFAULT_SETTINGS = {DAILY_TASKS_COUNT_KEY: "8"}

ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.TASK: TaskEntity,
    EntityKind.NOTE: NoteEntity,
    EntityKind.NOTIFICATION: NotificationEntity,
}

MUTABLE_FIELDS: dict[EntityKind, frozenset[str]] = {
    EntityKind.TASK: TASK_MUTABLE_FIELDS,
    EntityKind.NOTE: NOTE_MUTABLE_FIELDS,
    EntityKind.NOTIFICATION: NOTIFICATION_MUTABLE_FIELDS,
}

REQUIRED_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.TASK: ("name", "task_type"),
    EntityKind.NOTE: ("title", "content"),
    EntityKind.NOTIFICATION: ("task_id", "notification_time"),
}

CREATE_DEFAULTS: dict[EntityKind, dict[str, Any]] = {
    EntityKind.TASK: {
        "is_completed": False,
        "is_daily": False,
        "has_time_required": True,
        "is_recurring": False,
    },
    EntityKind.NOTE: {},
    EntityKind.NOTIFICATION: {"is_read": False},
}


class EntityStore(Protocol):
    def create(self, kind: KindLike, fields: Mapping[str, Any]) -> Entity: ...

    def get(self, kind: KindLike, entity_id: int) -> Entity | None: ...

    def list(self, kind: KindLike) -> list[Entity]: ...

    def scan(self, kind: KindLike, predicate: Callable[[Entity], bool]) -> list[Entity]: ...

    def update(self, kind: KindLike, entity_id: int, fields: Mapping[str, Any]) -> Entity | None: ...

    def delete(self, kind: KindLike, entity_id: int) -> bool: ...

    def snapshot(self, *kinds: KindLike) -> dict[EntityKind, tuple[Entity, ...]]: ...

    def get_setting(self, key: str) -> str | None: ...

    def set_setting(self, key: str, value: str) -> SettingEntity: ...

    def list_settings(self) -> list[SettingEntity]: ...


def resolve_kind(kind: KindLike) -> EntityKind:
    try:
        return EntityKind(kind)
    except ValueError as exc:
        raise ValidationError(f"Unknown entity kind {kind!r}") from exc


def check_fields(kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Reject keys outside the kind's allow-list; values are not inspected."""
    allowed = MUTABLE_FIELDS[kind]
    for key in fields:
        if key in SERVER_FIELDS:
            raise ValidationError(f"Field {key!r} is assigned by the store")
        if key not in allowed:
            raise ValidationError(f"Unknown {kind.value} field {key!r}")
    return dict(fields)


def _coerce_days(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",") if part.strip()]
    return tuple(int(day) if isinstance(day, str) and day.isdigit() else day for day in value)


def coerce_values(kind: EntityKind, data: dict[str, Any], tz: tzinfo | None = None) -> dict[str, Any]:
    """
    Bring stored values into the shapes entities expose.

    Enum fields become enum members, recurring days become a fresh tuple and
    naive notification times get the store zone. Values that cannot be
    converted are kept as given.
    """
    if kind is EntityKind.TASK:
        for key, enum_cls in (("task_type", TaskType), ("recurring_type", RecurringType)):
            value = data.get(key)
            if isinstance(value, str) and not isinstance(value, enum_cls):
                try:
                    data[key] = enum_cls(value)
                except ValueError:
                    pass
        if "recurring_days" in data:
            data["recurring_days"] = _coerce_days(data["recurring_days"])
    elif kind is EntityKind.NOTIFICATION:
        value = data.get("notification_time")
        if isinstance(value, datetime) and value.tzinfo is None:
            data["notification_time"] = value.replace(tzinfo=tz or UTC)
    return data


def prepare_create(kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]:
    data = check_fields(kind, fields)
    missing = [name for name in REQUIRED_FIELDS[kind] if data.get(name) is None]
    if missing:
        raise ValidationError(f"Missing required {kind.value} field(s): {', '.join(missing)}")
    for key, value in CREATE_DEFAULTS[kind].items():
        if data.get(key) is None:
            data[key] = value
    return data


class MemoryEntityStore:
    """
    In-memory entity store.

    Ids come from one monotonic counter per kind and are never handed out
    twice, even after deletion. Dicts keep insertion order, which is the
    iteration order of ``list`` and ``scan``. One re-entrant lock guards
    every operation so each call is atomic with respect to the others.
    """

    def __init__(
        self,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
        default_settings: Mapping[str, str] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._tz = tz
        self._clock = clock or (lambda: now(tz))
        self._records: dict[EntityKind, dict[int, Entity]] = {kind: {} for kind in EntityKind}
        self._counters: dict[EntityKind, int] = {kind: 0 for kind in EntityKind}
        self._settings: dict[str, str] = {}
        for key, value in (default_settings or DEFAULT_SETTINGS).items():
            self._settings.setdefault(key, value)

    def create(self, kind: KindLike, fields: Mapping[str, Any]) -> Entity:
        kind = resolve_kind(kind)
        data = prepare_create(kind, fields)
        coerce_values(kind, data, self._tz)
        with self._lock:
            self._counters[kind] += 1
            entity_id = self._counters[kind]
            entity = ENTITY_TYPES[kind](id=entity_id, created_at=self._clock(), **data)
            self._records[kind][entity_id] = entity
        logger.debug("Created %s id=%s", kind.value, entity_id)
        return entity

    def get(self, kind: KindLike, entity_id: int) -> Entity | None:
        kind = resolve_kind(kind)
        with self._lock:
            return self._records[kind].get(entity_id)

    def list(self, kind: KindLike) -> list[Entity]:
        kind = resolve_kind(kind)
        with self._lock:
            return list(self._records[kind].values())

    def scan(self, kind: KindLike, predicate: Callable[[Entity], bool]) -> list[Entity]:
        return [entity for entity in self.list(kind) if predicate(entity)]

    def update(self, kind: KindLike, entity_id: int, fields: Mapping[str, Any]) -> Entity | None:
        kind = resolve_kind(kind)
        data = check_fields(kind, fields)
        coerce_values(kind, data, self._tz)
        with self._lock:
            existing = self._records[kind].get(entity_id)
            if existing is None:
                return None
            updated = replace(existing, **data)
            self._records[kind][entity_id] = updated
        return updated

    def delete(self, kind: KindLike, entity_id: int) -> bool:
        kind = resolve_kind(kind)
        with self._lock:
            return self._records[kind].pop(entity_id, None) is not None

    def snapshot(self, *kinds: KindLike) -> dict[EntityKind, tuple[Entity, ...]]:
        resolved = [resolve_kind(kind) for kind in kinds] or list(EntityKind)
        with self._lock:
            return {kind: tuple(self._records[kind].values()) for kind in resolved}

    def get_setting(self, key: str) -> str | None:
        with self._lock:
            return self._settings.get(key)

    def set_setting(self, key: str, value: str) -> SettingEntity:
        with self._lock:
            self._settings[key] = value
        return SettingEntity(key=key, value=value)

    def list_settings(self) -> list[SettingEntity]:
        with self._lock:
            return [SettingEntity(key=k, value=v) for k, v in self._settings.items()]


def seed_settings(store: EntityStore, defaults: Iterable[tuple[str, str]]) -> None:
    for key, value in defaults:
        if store.get_setting(key) is None:
            store.set_setting(key, value)
