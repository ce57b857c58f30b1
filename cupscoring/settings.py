import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cupscoring.points import PointTable, load_point_table


@dataclass(frozen=True)
class Settings:
    database_url: str
    point_table_path: str
    log_level: int


def _normalize_database_url(value: Optional[str]) -> str:
    if not value:
        return "postgresql://localhost/cupscoring"
    normalized = value.strip()
    if normalized.startswith("postgres://"):
        return "postgresql://" + normalized[len("postgres://"):]
    return normalized


def _normalize_log_level(value: Optional[str]) -> int:
    if not value:
        return logging.INFO
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def load_settings() -> Settings:
    database_url = _normalize_database_url(os.getenv("DATABASE_URL"))
    point_table_path = os.getenv("POINT_TABLE_PATH", "")
    log_level = _normalize_log_level(os.getenv("LOG_LEVEL"))
    return Settings(
        database_url=database_url,
        point_table_path=point_table_path,
        log_level=log_level,
    )


def point_table_for(settings: Settings) -> PointTable:
    path = settings.point_table_path
    if path and not Path(path).exists():
        raise FileNotFoundError(f"POINT_TABLE_PATH does not exist: {path}")
    return load_point_table(path or None)
