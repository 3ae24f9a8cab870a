from __future__ import annotations

import logging

from daybook.domain.entities import SettingEntity
from daybook.domain.errors import NotFound, ValidationError
from daybook.infra.store import EntityStore

logger = logging.getLogger(__name__)


class SettingService:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def get(self, key: str) -> SettingEntity:
        value = self._store.get_setting(key)
        if value is None:
            raise NotFound("setting", key)
        return SettingEntity(key=key, value=value)

    def get_or_default(self, key: str, default: str) -> str:
        value = self._store.get_setting(key)
        return default if value is None else value

    def set(self, key: str, value: str) -> SettingEntity:
        if not key:
            raise ValidationError("Setting key is required")
        if not isinstance(value, str):
            raise ValidationError("Value must be a string")
        logger.info("Setting %s=%r", key, value)
        return self._store.set_setting(key, value)

    def all(self) -> list[SettingEntity]:
        return self._store.list_settings()
