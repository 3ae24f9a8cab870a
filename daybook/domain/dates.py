"""
Date and clock normalization shared by every date comparison in the core.

All day-keys are computed in one zone (``DAY_BOUNDARY_TZ``, UTC by default).
Aware datetimes are converted into that zone before truncation; naive values
and bare dates are taken to already be expressed in it.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterator
from zoneinfo import ZoneInfo

from .errors import InvalidTimeFormat, ValidationError

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

UTC = ZoneInfo("UTC")

DayLike = date | datetime | str


def _zone(tz: tzinfo | None) -> tzinfo:
    return tz if tz is not None else UTC


def now(tz: tzinfo | None = None) -> datetime:
    return datetime.now(_zone(tz))


def parse_timestamp(value: datetime | str, tz: tzinfo | None = None) -> datetime:
    """Return an aware datetime; naive input is read as wall time in ``tz``."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise ValidationError(f"Invalid timestamp {value!r}, expected ISO-8601") from exc
    else:
        raise ValidationError(f"Unsupported timestamp value {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=_zone(tz))
    return parsed.astimezone(_zone(tz))


def parse_day(value: DayLike, tz: tzinfo | None = None) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(_zone(tz))
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if _ISO_DATE_RE.match(raw):
            try:
                return date.fromisoformat(raw)
            except ValueError as exc:
                raise ValidationError(f"Invalid date {value!r}, use YYYY-MM-DD") from exc
        return parse_timestamp(raw, tz).date()
    raise ValidationError(f"Unsupported date value {value!r}")


def to_day_key(value: DayLike, tz: tzinfo | None = None) -> str:
    return parse_day(value, tz).isoformat()


def to_clock_minutes(hhmm: str) -> int:
    if not isinstance(hhmm, str):
        raise InvalidTimeFormat(hhmm)
    match = _HHMM_RE.match(hhmm.strip())
    if not match:
        raise InvalidTimeFormat(hhmm)
    hours = int(match.group(1))
    minutes = int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidTimeFormat(hhmm)
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def canonical_clock(hhmm: str) -> str:
    return format_clock(to_clock_minutes(hhmm))


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def combine(day: date, clock_minutes: int, tz: tzinfo | None = None) -> datetime:
    midnight = datetime(day.year, day.month, day.day, tzinfo=_zone(tz))
    return midnight + timedelta(minutes=clock_minutes)
