"""Order statistics and moments over pre-sorted price lists.

Every function here expects its input sorted ascending. That ordering is
guaranteed by the row source and is never re-checked.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True, slots=True)
class PriceStats:
    n: int = 0
    min: float = 0.0
    q1: float = 0.0
    median: float = 0.0
    q3: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    stddev: float = 0.0


def trim_sorted(values: Sequence[int], trim_pct: int) -> Sequence[int]:
    """Naive two-sided percentage trim.

    Drops ``floor(n * trim_pct / 100)`` values from each end, never more than
    ``(n - 1) // 2`` so that at least one value survives. ``trim_pct`` is
    assumed to be validated by the caller.
    """
    if trim_pct <= 0:
        return values
    n = len(values)
    if n == 0:
        return values
    trim = math.floor(n * (trim_pct / 100.0))
    trim = min(trim, (n - 1) // 2)
    if trim == 0:
        return values
    return values[trim : n - trim]


def median_sorted(values: Sequence[int]) -> float:
    n = len(values)
    if n == 0:
        return 0.0
    if n % 2 == 1:
        return float(values[n // 2])
    return (values[n // 2 - 1] + values[n // 2]) / 2


def _quartiles(values: Sequence[int], median: float) -> tuple[float, float]:
    # Exclusive median-of-halves: odd counts leave the middle value out of
    # both halves.
    n = len(values)
    if n <= 1:
        return median, median
    half = n // 2
    lower = values[:half]
    upper = values[half:] if n % 2 == 0 else values[half + 1 :]
    q1 = median_sorted(lower) if lower else median
    q3 = median_sorted(upper) if upper else median
    return q1, q3


def describe(values: Sequence[int]) -> PriceStats:
    """Reduce a sorted, already trimmed price list to summary statistics.

    Mean and variance are accumulated in a single pass (Welford's update),
    the variance being the population one. An empty list yields all zeros.
    """
    n = len(values)
    if n == 0:
        return PriceStats()

    mean = 0.0
    m2 = 0.0
    for count, value in enumerate(values, start=1):
        x = float(value)
        delta = x - mean
        mean += delta / count
        m2 += delta * (x - mean)

    median = median_sorted(values)
    q1, q3 = _quartiles(values, median)
    variance = max(m2 / n, 0.0)
    return PriceStats(
        n=n,
        min=float(values[0]),
        q1=q1,
        median=median,
        q3=q3,
        max=float(values[-1]),
        mean=mean,
        stddev=math.sqrt(variance),
    )
