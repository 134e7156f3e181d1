"""Fixed-width price histograms for a single scan."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from models.records import Histogram, HistogramBin
from services.statistics import trim_sorted

DEFAULT_BINS = 24


def make_bins(
    sorted_prices: Sequence[int], bins: int
) -> Tuple[int, int, List[HistogramBin]]:
    """Bucket sorted prices into ``bins`` equal integer-width bins.

    The width is rounded up, so the last bin may reach past ``max``. When all
    prices are equal a single ``[min, max]`` bin holds them all.
    """
    n = len(sorted_prices)
    if n == 0:
        return 0, 0, []
    low = sorted_prices[0]
    high = sorted_prices[-1]
    if low == high:
        return low, high, [HistogramBin(lo=low, hi=high, count=n)]
    if bins <= 0:
        bins = DEFAULT_BINS

    span = high - low
    width = max(-(-span // bins), 1)

    counts = [0] * bins
    for price in sorted_prices:
        index = (price - low) // width
        if index < 0:
            index = 0
        elif index >= bins:
            index = bins - 1
        counts[index] += 1

    result = [
        HistogramBin(lo=low + i * width, hi=low + (i + 1) * width, count=counts[i])
        for i in range(bins)
    ]
    return low, high, result


def build_histogram(
    prices: Iterable[int],
    trim_pct: int,
    bins: int,
    *,
    item_id: str = "",
    scan_id: int = 0,
    ts: int = 0,
    unit: str = "per_item",
    presorted: bool = True,
) -> Histogram:
    """Trim one scan's prices and bin them.

    ``prices`` are expected price-ascending; pass ``presorted=False`` to have
    them sorted first. ``trim_pct`` and ``bins`` are assumed already validated.
    """
    ordered: Sequence[int] = tuple(prices) if presorted else sorted(prices)
    trimmed = trim_sorted(ordered, trim_pct)
    low, high, result = make_bins(trimmed, bins)
    return Histogram(
        item_id=item_id,
        scan_id=scan_id,
        ts=ts,
        unit=unit,
        trim_pct=trim_pct,
        n=len(trimmed),
        min=low,
        max=high,
        bins=result,
    )
