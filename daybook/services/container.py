from __future__ import annotations

import logging
from dataclasses import dataclass

from daybook.config import SETTINGS, Settings
from daybook.infra.db import create_session_factory, init_db
from daybook.infra.repository import SqlEntityStore
from daybook.infra.store import DAILY_TASKS_COUNT_KEY, EntityStore, MemoryEntityStore

from .calendar_service import CalendarService
from .note_service import NoteService
from .notification_service import NotificationService
from .setting_service import SettingService
from .task_service import TaskService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    settings: Settings
    store: EntityStore
    tasks: TaskService
    notes: NoteService
    notifications: NotificationService
    settings_service: SettingService
    calendar: CalendarService


def build_store(settings: Settings) -> EntityStore:
    defaults = {DAILY_TASKS_COUNT_KEY: str(settings.daily_tasks_default)}
    if not settings.database_url:
        logger.info("Using in-memory store")
        return MemoryEntityStore(tz=settings.tzinfo, default_settings=defaults)
    engine, session_factory = create_session_factory(settings.database_url)
    init_db(engine)
    logger.info("Using SQL store url=%s", engine.url.render_as_string(hide_password=True))
    return SqlEntityStore(session_factory, tz=settings.tzinfo, default_settings=defaults)


def build_container(settings: Settings = SETTINGS, store: EntityStore | None = None) -> Container:
    store = store if store is not None else build_store(settings)
    tz = settings.tzinfo
    return Container(
        settings=settings,
        store=store,
        tasks=TaskService(store, tz=tz, daily_tasks_default=settings.daily_tasks_default),
        notes=NoteService(store, tz=tz),
        notifications=NotificationService(store, tz=tz),
        settings_service=SettingService(store),
        calendar=CalendarService(store, tz=tz, max_range_days=settings.calendar_max_range_days),
    )
