from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import tzinfo
from typing import Any

from daybook.domain.dates import parse_day
from daybook.domain.entities import NoteEntity
from daybook.domain.enums import EntityKind
from daybook.domain.errors import NotFound, ValidationError
from daybook.infra.store import EntityStore

logger = logging.getLogger(__name__)


class NoteService:
    def __init__(self, store: EntityStore, tz: tzinfo | None = None) -> None:
        self._store = store
        self._tz = tz

    def list_notes(self) -> list[NoteEntity]:
        return self._store.list(EntityKind.NOTE)

    def get_note(self, note_id: int) -> NoteEntity:
        note = self._store.get(EntityKind.NOTE, note_id)
        if note is None:
            raise NotFound(EntityKind.NOTE.value, note_id)
        return note

    def create_note(self, data: Mapping[str, Any]) -> NoteEntity:
        normalized = self._normalize_data(data)
        if not normalized.get("title"):
            raise ValidationError("Note title is required")
        if normalized.get("content") is None:
            raise ValidationError("Note content is required")
        note = self._store.create(EntityKind.NOTE, normalized)
        logger.info("Created note id=%s date=%s", note.id, note.associated_date)
        return note

    def update_note(self, note_id: int, data: Mapping[str, Any]) -> NoteEntity:
        normalized = self._normalize_data(data)
        if "title" in normalized and not normalized["title"]:
            raise ValidationError("Note title is required")
        if "content" in normalized and normalized["content"] is None:
            raise ValidationError("Note content is required")
        note = self._store.update(EntityKind.NOTE, note_id, normalized)
        if note is None:
            raise NotFound(EntityKind.NOTE.value, note_id)
        logger.info("Updated note id=%s fields=%s", note_id, sorted(data))
        return note

    def delete_note(self, note_id: int) -> bool:
        deleted = self._store.delete(EntityKind.NOTE, note_id)
        if deleted:
            logger.info("Deleted note id=%s", note_id)
        return deleted

    def _normalize_data(self, data: Mapping[str, Any]) -> dict[str, Any]:
        normalized = dict(data)
        for key in ("title", "content"):
            value = normalized.get(key)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"Note {key} must be a string")
        if isinstance(normalized.get("title"), str):
            normalized["title"] = normalized["title"].strip()
        if "associated_date" in normalized:
            value = normalized["associated_date"]
            normalized["associated_date"] = parse_day(value, self._tz) if value not in (None, "") else None
        return normalized
