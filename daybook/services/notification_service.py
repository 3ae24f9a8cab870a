from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo

from daybook.domain.dates import combine, now, parse_timestamp, to_clock_minutes
from daybook.domain.entities import NotificationEntity
from daybook.domain.enums import EntityKind
from daybook.domain.errors import NotFound, ValidationError
from daybook.infra.store import EntityStore

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, store: EntityStore, tz: tzinfo | None = None) -> None:
        self._store = store
        self._tz = tz

    def list_notifications(self) -> list[NotificationEntity]:
        return self._store.list(EntityKind.NOTIFICATION)

    def list_unread(self) -> list[NotificationEntity]:
        return self._store.scan(EntityKind.NOTIFICATION, lambda item: not item.is_read)

    def list_due(self, at: datetime | None = None) -> list[NotificationEntity]:
        moment = parse_timestamp(at, self._tz) if at is not None else now(self._tz)
        return self._store.scan(
            EntityKind.NOTIFICATION,
            lambda item: not item.is_read and item.notification_time <= moment,
        )

    def create_notification(self, task_id: int, notification_time: datetime | str) -> NotificationEntity:
        # task_id is not checked against the store.
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            raise ValidationError("task_id must be an integer")
        notification = self._store.create(
            EntityKind.NOTIFICATION,
            {
                "task_id": task_id,
                "notification_time": parse_timestamp(notification_time, self._tz),
            },
        )
        logger.info("Created notification id=%s task=%s", notification.id, task_id)
        return notification

    def schedule_for_task(self, task_id: int) -> NotificationEntity:
        task = self._store.get(EntityKind.TASK, task_id)
        if task is None:
            raise NotFound(EntityKind.TASK.value, task_id)
        start = task.effective_scheduled_time
        if task.scheduled_date is None or start is None:
            raise ValidationError(f"Task {task_id} has no scheduled date and time")
        lead = task.effective_notification_time or 0
        moment = combine(task.scheduled_date, to_clock_minutes(start), self._tz) - timedelta(minutes=lead)
        return self.create_notification(task_id, moment)

    def mark_read(self, notification_id: int) -> NotificationEntity:
        notification = self._store.update(EntityKind.NOTIFICATION, notification_id, {"is_read": True})
        if notification is None:
            raise NotFound(EntityKind.NOTIFICATION.value, notification_id)
        return notification

    def delete_notification(self, notification_id: int) -> bool:
        deleted = self._store.delete(EntityKind.NOTIFICATION, notification_id)
        if deleted:
            logger.info("Deleted notification id=%s", notification_id)
        return deleted
