"""Project logger: stderr plus an optional size-rotated file under ``settings.log_dir``."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from prefstore.config.settings import settings


_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _normalize_level(raw: str | int) -> int:
    if isinstance(raw, int):
        return raw
    candidate = str(raw or "INFO").strip().upper()
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def log_file_path() -> Path:
    name = "".join(ch for ch in settings.app_name.lower() if ch.isalnum() or ch in "-_") or "prefstore"
    return Path(settings.log_dir) / f"{name}.log"


def _file_handler(formatter: logging.Formatter) -> logging.Handler | None:
    path = log_file_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
    except (OSError, PermissionError):
        # read-only log dir: stderr only
        return None
    handler.setFormatter(formatter)
    return handler


def _build_logger() -> logging.Logger:
    configured_logger = logging.getLogger("prefstore")
    if configured_logger.handlers:
        return configured_logger

    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    configured_logger.addHandler(stream_handler)

    if settings.log_to_file:
        file_handler = _file_handler(formatter)
        if file_handler is not None:
            configured_logger.addHandler(file_handler)

    configured_logger.propagate = False
    set_level(settings.log_level, configured_logger)
    return configured_logger


def set_level(level: str | int, target: logging.Logger | None = None) -> int:
    """Apply one level to the project logger and all of its handlers."""
    resolved = _normalize_level(level)
    target = target or logger
    target.setLevel(resolved)
    for handler in target.handlers:
        handler.setLevel(resolved)
    return resolved


logger = _build_logger()


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the prefstore namespace."""

    return logger.getChild(name)
