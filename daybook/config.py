from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    log_level: str = "INFO"
    log_dir: str = "logs"
    day_boundary_tz: str = "UTC"
    daily_tasks_default: int = 8
    calendar_max_range_days: int = 366
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.day_boundary_tz)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def load_settings() -> Settings:
    load_env()

    tz_name = os.getenv("DAY_BOUNDARY_TZ", "UTC").strip() or "UTC"
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"DAY_BOUNDARY_TZ is not a known timezone: {tz_name!r}") from exc

    return Settings(
        database_url=os.getenv("DATABASE_URL", "").strip(),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        day_boundary_tz=tz_name,
        daily_tasks_default=_env_int("DAILY_TASKS_DEFAULT", 8),
        calendar_max_range_days=_env_int("CALENDAR_MAX_RANGE_DAYS", 366),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_env_int("PORT", 8000),
    )


SETTINGS = load_settings()
