"""Loguru helpers for file logging in CLI commands."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from carryall.config.loader import get_data_dir

_SINK_IDS: dict[str, int] = {}


def get_log_dir() -> Path:
    return get_data_dir() / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Add a rotating sink for ``name`` once per process and return its path."""
    log_path = get_log_dir() / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _SINK_IDS[name] = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    return log_path
