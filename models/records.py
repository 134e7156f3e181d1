"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(slots=True)
class PriceObservation:
    """A single price row for one scan, as handed over by the row source."""

    scan_id: int
    ts: int
    price: int


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """Summary statistics of one scan's (trimmed) prices.

    ``n`` counts the prices left after trimming.
    """

    scan_id: int = 0
    ts: int = 0
    n: int = 0
    min: float = 0.0
    q1: float = 0.0
    median: float = 0.0
    q3: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    stddev: float = 0.0


@dataclass(frozen=True, slots=True)
class HistogramBin:
    lo: int
    hi: int
    count: int = 0


@dataclass(frozen=True, slots=True)
class Histogram:
    """Fixed-width price distribution for a single scan.

    Bins are half-open ``[lo, hi)`` except the last one, which is closed at
    ``max``.
    """

    item_id: str
    scan_id: int
    ts: int
    unit: str
    trim_pct: int
    n: int
    min: int
    max: int
    bins: List[HistogramBin] = field(default_factory=list)
