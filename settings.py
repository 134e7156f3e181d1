from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STORE_PATH_ENV = "AHDB_STORE_PATH"
_WORKER_COUNT_ENV = "MARKET_WORKER_COUNT"
_SERIES_TIMEOUT_ENV = "SERIES_TIMEOUT_SECONDS"
_HISTOGRAM_TIMEOUT_ENV = "HISTOGRAM_TIMEOUT_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    store_path: Optional[str]
    market_workers: int
    series_timeout: float
    histogram_timeout: float
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_worker_count(default: int) -> int:
    value = os.getenv(_WORKER_COUNT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_seconds(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/ahdb.json"),
        market_workers=_read_worker_count(4),
        series_timeout=_read_seconds(_SERIES_TIMEOUT_ENV, 30.0),
        histogram_timeout=_read_seconds(_HISTOGRAM_TIMEOUT_ENV, 15.0),
        log_level=_read_log_level("INFO"),
    )
