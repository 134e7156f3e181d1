"""Grouping of scan price rows into a downsampled time series."""

from __future__ import annotations

from operator import attrgetter
from typing import Iterable, List, Optional

from models.records import PriceObservation, SeriesPoint
from services.statistics import describe, trim_sorted


class ScanAccumulator:
    """Reusable price buffer for the scan currently being consumed.

    Prices must be added in non-decreasing order; the row source orders them
    that way within each scan.
    """

    def __init__(self) -> None:
        self.scan_id = 0
        self.ts = 0
        self.prices: List[int] = []

    def reset(self, scan_id: int, ts: int) -> None:
        self.scan_id = scan_id
        self.ts = ts
        self.prices.clear()

    def add(self, price: int) -> None:
        self.prices.append(price)

    def reduce(self, trim_pct: int) -> SeriesPoint:
        """Trim and summarize the buffered prices.

        An empty buffer reduces to an all-zero point. The returned point holds
        no reference to the buffer, so the accumulator can be reset right away.
        """
        if not self.prices:
            return SeriesPoint()
        prices = trim_sorted(tuple(self.prices), trim_pct)
        stats = describe(prices)
        if stats.n == 0:
            return SeriesPoint()
        return SeriesPoint(
            scan_id=self.scan_id,
            ts=self.ts,
            n=stats.n,
            min=stats.min,
            q1=stats.q1,
            median=stats.median,
            q3=stats.q3,
            max=stats.max,
            mean=stats.mean,
            stddev=stats.stddev,
        )


def downsample(points: List[SeriesPoint], max_points: int) -> List[SeriesPoint]:
    """Keep only the most recent ``max_points`` points.

    This is tail truncation, not resampling: a long range with a small budget
    loses its oldest history.
    """
    if len(points) > max_points:
        return points[len(points) - max_points :]
    return points


def build_series(
    rows: Iterable[PriceObservation],
    trim_pct: int,
    max_points: int,
) -> List[SeriesPoint]:
    """Fold an ordered row stream into per-scan summary points.

    Rows must arrive grouped by scan id (all rows of a scan contiguous) and
    price-ascending within a scan. Interleaved scan ids are not detected and
    yield duplicate points. When a scan reports several timestamps the last
    one seen wins. Errors raised while iterating ``rows`` propagate, so an
    aborted stream never produces a truncated series.
    """
    points: List[SeriesPoint] = []
    acc = ScanAccumulator()
    current: Optional[int] = None

    for row in rows:
        if current is None:
            current = row.scan_id
            acc.reset(row.scan_id, row.ts)
        if row.scan_id != current:
            points.append(acc.reduce(trim_pct))
            current = row.scan_id
            acc.reset(row.scan_id, row.ts)
        if row.ts != acc.ts:
            acc.ts = row.ts
        acc.add(row.price)

    if acc.prices:
        points.append(acc.reduce(trim_pct))

    points.sort(key=attrgetter("ts"))
    return downsample(points, max_points)
