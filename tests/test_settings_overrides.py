from __future__ import annotations

from typing import Iterable

from datastore.auction_store import build_default_store
from services.market import build_default_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    store_path = tmp_path / "ahdb.json"

    monkeypatch.setenv("AHDB_STORE_PATH", str(store_path))
    monkeypatch.setenv("MARKET_WORKER_COUNT", "2")
    monkeypatch.setenv("SERIES_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("HISTOGRAM_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    caches = (get_settings, build_default_store, build_default_service)
    _clear_caches(caches)

    settings = get_settings()
    store = build_default_store()
    service = build_default_service()

    try:
        assert settings.log_level == "DEBUG"
        assert store.persistence_path == store_path
        assert service.store is store
        assert service.executor._max_workers == 2
        assert service.series_timeout == 12.5
        assert service.histogram_timeout == 15.0
    finally:
        service.shutdown()
        _clear_caches(caches)


def test_blank_store_path_disables_persistence(monkeypatch) -> None:
    monkeypatch.setenv("AHDB_STORE_PATH", "   ")
    monkeypatch.setenv("MARKET_WORKER_COUNT", "0")
    _clear_caches((get_settings, build_default_store))

    try:
        settings = get_settings()
        assert settings.store_path is None
        assert settings.market_workers == 4
        assert build_default_store().persistence_path is None
    finally:
        _clear_caches((get_settings, build_default_store))
