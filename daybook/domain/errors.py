from __future__ import annotations


class DaybookError(Exception):
    """Base class for failures reported by the scheduling core."""


class ValidationError(DaybookError):
    pass


class InvalidTimeFormat(ValidationError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid time format {value!r}, expected HH:MM")
        self.value = value


class NotFound(DaybookError):
    def __init__(self, kind: str, entity_id: int | str) -> None:
        super().__init__(f"{kind.capitalize()} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id
