from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from daybook.config import SETTINGS, Settings


def resolve_log_dir(settings: Settings) -> Path:
    """Relative log dirs are taken from the working directory, not the install location."""
    log_dir = Path(settings.log_dir).expanduser()
    if not log_dir.is_absolute():
        log_dir = Path.cwd() / log_dir
    return log_dir


def setup_logging(settings: Settings = SETTINGS) -> Path:
    log_dir = resolve_log_dir(settings)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "daybook.log"

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=settings.log_level.upper(),
        handlers=[file_handler, console_handler],
        force=True,
    )
    return log_file
