"""Request orchestration: row source, worker pool and the statistics engine."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from functools import lru_cache
from threading import Event
from typing import Callable, Iterable, Iterator, List, Optional, TypeVar

from app.schemas import (
    HistogramResponse,
    Item,
    PriceUnit,
    RealmFaction,
    SeriesPointOut,
    SeriesResponse,
)
from datastore.auction_store import AuctionStore, build_default_store
from models.records import Histogram, SeriesPoint
from services.aggregator import build_series
from services.histogram import build_histogram
from settings import get_settings

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 64
MAX_SEARCH_RESULTS = 50

T = TypeVar("T")
R = TypeVar("R")


class ScanStreamCancelled(RuntimeError):
    """Raised inside a worker when its run was abandoned by the caller."""


@dataclass(frozen=True)
class SeriesQuery:
    item_id: str
    start: int
    end: int
    unit: PriceUnit = PriceUnit.per_item
    realm: str = ""
    faction: str = ""
    trim_pct: int = 0
    max_points: int = 400


@dataclass(frozen=True)
class HistogramQuery:
    item_id: str
    scan_id: int
    unit: PriceUnit = PriceUnit.per_item
    trim_pct: int = 0
    bins: int = 24


def _cancellable(rows: Iterable[T], cancelled: Event) -> Iterator[T]:
    for row in rows:
        if cancelled.is_set():
            raise ScanStreamCancelled("row stream cancelled")
        yield row


class MarketService:
    """Runs series and histogram builds on a bounded pool with per-run timeouts."""

    def __init__(
        self,
        store: AuctionStore,
        workers: int = 4,
        series_timeout: float = 30.0,
        histogram_timeout: float = 15.0,
    ) -> None:
        self.store = store
        self.series_timeout = series_timeout
        self.histogram_timeout = histogram_timeout
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="market")

    def list_realms(self) -> list[RealmFaction]:
        return self.store.list_realms()

    def search_items(self, query: str) -> list[Item]:
        needle = query.strip()
        if len(needle) < MIN_QUERY_LENGTH:
            return []
        return self.store.search_items(needle[:MAX_QUERY_LENGTH], limit=MAX_SEARCH_RESULTS)

    def series(self, query: SeriesQuery) -> SeriesResponse:
        """Build the downsampled per-scan series for an item."""
        realm, faction = query.realm, query.faction
        if not realm or not faction:
            default = self.store.latest_realm_faction()
            if default is None:
                raise LookupError("missing realm/faction and no default available")
            realm = realm or default.realm
            faction = faction or default.faction

        item = self.store.get_item(query.item_id)
        if item is None:
            raise KeyError("item not found")

        rows = self.store.series_rows(
            query.item_id, realm, faction, query.unit, query.start, query.end
        )
        start_time = time.perf_counter()
        points: List[SeriesPoint] = self._run(
            lambda stream: build_series(stream, query.trim_pct, query.max_points),
            rows,
            self.series_timeout,
            item_id=query.item_id,
            realm=realm,
            faction=faction,
        )
        logger.info(
            "Built price series",
            extra={
                "item_id": query.item_id,
                "realm": realm,
                "faction": faction,
                "unit": query.unit.value,
                "trim_pct": query.trim_pct,
                "point_count": len(points),
                "processing_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return SeriesResponse(
            item=item,
            realm=realm,
            faction=faction,
            unit=query.unit,
            from_=query.start,
            to=query.end,
            trim_pct=query.trim_pct,
            points=[SeriesPointOut.model_validate(point) for point in points],
        )

    def histogram(self, query: HistogramQuery) -> HistogramResponse:
        """Build the price histogram of an item within one scan."""
        rows = self.store.histogram_rows(query.item_id, query.scan_id, query.unit)

        def run(stream: Iterable[tuple[int, int]]) -> Histogram:
            ts = 0
            prices: List[int] = []
            for row_ts, price in stream:
                ts = row_ts
                prices.append(price)
            return build_histogram(
                prices,
                query.trim_pct,
                query.bins,
                item_id=query.item_id,
                scan_id=query.scan_id,
                ts=ts,
                unit=query.unit.value,
            )

        start_time = time.perf_counter()
        histogram = self._run(
            run,
            rows,
            self.histogram_timeout,
            item_id=query.item_id,
            scan_id=query.scan_id,
        )
        logger.info(
            "Built price histogram",
            extra={
                "item_id": query.item_id,
                "scan_id": query.scan_id,
                "unit": query.unit.value,
                "trim_pct": query.trim_pct,
                "bins": len(histogram.bins),
                "row_count": histogram.n,
                "processing_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return HistogramResponse.model_validate(histogram)

    def shutdown(self) -> None:
        """Stop accepting runs and drop the queued ones."""
        self.executor.shutdown(wait=False, cancel_futures=True)

    def _run(
        self,
        builder: Callable[[Iterable[T]], R],
        rows: Iterable[T],
        timeout: Optional[float],
        **context: object,
    ) -> R:
        cancelled = Event()
        future = self.executor.submit(builder, _cancellable(rows, cancelled))
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            cancelled.set()
            future.cancel()
            logger.warning(
                "Aggregation run timed out",
                extra={**context, "timeout_s": timeout, "reason": "timeout"},
            )
            raise TimeoutError(f"aggregation did not finish within {timeout:g}s") from exc


@lru_cache
def build_default_service(workers: Optional[int] = None) -> MarketService:
    """Factory that wires the service with the default store and settings."""
    settings = get_settings()
    return MarketService(
        store=build_default_store(),
        workers=workers or settings.market_workers,
        series_timeout=settings.series_timeout,
        histogram_timeout=settings.histogram_timeout,
    )
