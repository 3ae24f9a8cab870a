from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, tzinfo
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from daybook.domain.dates import UTC, now
from daybook.domain.entities import NoteEntity, NotificationEntity, SettingEntity, TaskEntity
from daybook.domain.enums import EntityKind, RecurringType, TaskType

from .models import NoteModel, NotificationModel, SettingModel, TaskModel
from .store import (
    DEFAULT_SETTINGS,
    Entity,
    KindLike,
    check_fields,
    coerce_values,
    prepare_create,
    resolve_kind,
    seed_settings,
)

logger = logging.getLogger(__name__)

MODELS = {
    EntityKind.TASK: TaskModel,
    EntityKind.NOTE: NoteModel,
    EntityKind.NOTIFICATION: NotificationModel,
}


def _encode_days(days) -> str | None:
    if not days:
        return None
    return ",".join(str(day) for day in days)


def _decode_days(raw: str | None) -> tuple[int, ...]:
    if not raw:
        return ()
    return tuple(int(part) for part in raw.split(",") if part.strip())


def _to_db_timestamp(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC)


class SqlEntityStore:
    """Entity store persisted through SQLAlchemy; one session per operation."""

    def __init__(
        self,
        session_factory: sessionmaker,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
        default_settings: Mapping[str, str] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._tz = tz or UTC
        self._clock = clock or (lambda: now(self._tz))
        seed_settings(self, (default_settings or DEFAULT_SETTINGS).items())

    def create(self, kind: KindLike, fields: Mapping[str, Any]) -> Entity:
        kind = resolve_kind(kind)
        data = prepare_create(kind, fields)
        coerce_values(kind, data, self._tz)
        data["created_at"] = self._clock()
        with self._session_factory() as session:
            model = MODELS[kind]()
            self._assign(model, data)
            session.add(model)
            session.commit()
            session.refresh(model)
            logger.debug("Created %s id=%s", kind.value, model.id)
            return self._to_entity(kind, model)

    def get(self, kind: KindLike, entity_id: int) -> Entity | None:
        kind = resolve_kind(kind)
        with self._session_factory() as session:
            model = session.get(MODELS[kind], entity_id)
            return self._to_entity(kind, model) if model else None

    def list(self, kind: KindLike) -> list[Entity]:
        kind = resolve_kind(kind)
        with self._session_factory() as session:
            return self._list_in(session, kind)

    def scan(self, kind: KindLike, predicate: Callable[[Entity], bool]) -> list[Entity]:
        return [entity for entity in self.list(kind) if predicate(entity)]

    def update(self, kind: KindLike, entity_id: int, fields: Mapping[str, Any]) -> Entity | None:
        kind = resolve_kind(kind)
        data = check_fields(kind, fields)
        coerce_values(kind, data, self._tz)
        with self._session_factory() as session:
            model = session.get(MODELS[kind], entity_id)
            if not model:
                return None
            self._assign(model, data)
            session.commit()
            session.refresh(model)
            return self._to_entity(kind, model)

    def delete(self, kind: KindLike, entity_id: int) -> bool:
        kind = resolve_kind(kind)
        with self._session_factory() as session:
            model = session.get(MODELS[kind], entity_id)
            if not model:
                return False
            session.delete(model)
            session.commit()
            return True

    def snapshot(self, *kinds: KindLike) -> dict[EntityKind, tuple[Entity, ...]]:
        resolved = [resolve_kind(kind) for kind in kinds] or list(EntityKind)
        with self._session_factory() as session, session.begin():
            return {kind: tuple(self._list_in(session, kind)) for kind in resolved}

    def get_setting(self, key: str) -> str | None:
        with self._session_factory() as session:
            return session.scalar(select(SettingModel.value).where(SettingModel.key == key))

    def set_setting(self, key: str, value: str) -> SettingEntity:
        with self._session_factory() as session:
            setting = session.scalar(select(SettingModel).where(SettingModel.key == key))
            if setting:
                setting.value = value
            else:
                session.add(SettingModel(key=key, value=value))
            session.commit()
        return SettingEntity(key=key, value=value)

    def list_settings(self) -> list[SettingEntity]:
        with self._session_factory() as session:
            rows = session.scalars(select(SettingModel).order_by(SettingModel.id.asc()))
            return [SettingEntity(key=row.key, value=row.value) for row in rows]

    def _list_in(self, session: Session, kind: EntityKind) -> list[Entity]:
        model_cls = MODELS[kind]
        stmt = select(model_cls).order_by(model_cls.id.asc())
        return [self._to_entity(kind, model) for model in session.scalars(stmt)]

    @staticmethod
    def _assign(model, data: dict[str, Any]) -> None:
        for key, value in data.items():
            if key == "recurring_days":
                value = _encode_days(value)
            elif isinstance(value, datetime):
                value = _to_db_timestamp(value)
            elif key in ("task_type", "recurring_type") and value is not None:
                value = str(value)
            setattr(model, key, value)

    def _from_db_timestamp(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(self._tz)

    def _to_entity(self, kind: EntityKind, model) -> Entity:
        if kind is EntityKind.TASK:
            return TaskEntity(
                id=model.id,
                name=model.name,
                task_type=TaskType(model.task_type),
                created_at=self._from_db_timestamp(model.created_at),
                is_completed=model.is_completed,
                letter_value=model.letter_value,
                subjective_content=model.subjective_content,
                is_daily=model.is_daily,
                daily_position=model.daily_position,
                scheduled_date=model.scheduled_date,
                scheduled_time=model.scheduled_time,
                end_time=model.end_time,
                has_time_required=model.has_time_required,
                duration=model.duration,
                notification_time=model.notification_time,
                is_recurring=model.is_recurring,
                recurring_type=RecurringType(model.recurring_type) if model.recurring_type else None,
                recurring_days=_decode_days(model.recurring_days),
                recurring_end_date=model.recurring_end_date,
            )
        if kind is EntityKind.NOTE:
            return NoteEntity(
                id=model.id,
                title=model.title,
                content=model.content,
                created_at=self._from_db_timestamp(model.created_at),
                associated_date=model.associated_date,
            )
        return NotificationEntity(
            id=model.id,
            task_id=model.task_id,
            notification_time=self._from_db_timestamp(model.notification_time),
            created_at=self._from_db_timestamp(model.created_at),
            is_read=model.is_read,
        )
