"""Query-parameter parsing and range checks for the price endpoints.

Every parser takes the raw query string value (``None`` when absent) and
raises ``ValueError`` with a client-facing message on bad input.
"""

from __future__ import annotations

from typing import Optional, Tuple

from app.schemas import PriceUnit

DEFAULT_MAX_POINTS = 400
MIN_MAX_POINTS = 10
MAX_MAX_POINTS = 5000
DEFAULT_BINS = 24
MIN_BINS = 5
MAX_BINS = 120
DEFAULT_DAYS = 7
SECONDS_PER_DAY = 86400


def _clean(raw: Optional[str]) -> str:
    return (raw or "").strip()


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def parse_int(raw: Optional[str], name: str, default: int) -> int:
    candidate = _clean(raw)
    if not candidate:
        return default
    try:
        return int(candidate)
    except ValueError as exc:
        raise ValueError(f"invalid {name}") from exc


def parse_item_id(raw: Optional[str]) -> str:
    item_id = _clean(raw)
    if not item_id:
        raise ValueError("missing itemId")
    return item_id


def parse_unit(raw: Optional[str]) -> PriceUnit:
    candidate = _clean(raw) or PriceUnit.per_item.value
    try:
        return PriceUnit(candidate)
    except ValueError as exc:
        raise ValueError("invalid unit (expected per_item or per_stack)") from exc


def parse_max_points(raw: Optional[str]) -> int:
    value = parse_int(raw, "maxPoints", DEFAULT_MAX_POINTS)
    return _clamp(value, MIN_MAX_POINTS, MAX_MAX_POINTS)


def parse_bins(raw: Optional[str]) -> int:
    value = parse_int(raw, "bins", DEFAULT_BINS)
    return _clamp(value, MIN_BINS, MAX_BINS)


def parse_trim_pct(raw: Optional[str], fallback: Optional[str] = None) -> int:
    """Trim percentage from ``trimPct`` (or its ``trim`` alias)."""
    candidate = _clean(raw) or _clean(fallback)
    value = parse_int(candidate, "trimPct", 0)
    if value < 0 or value > 50:
        raise ValueError("trimPct must be between 0 and 50")
    if value % 5 != 0:
        raise ValueError("trimPct must be a multiple of 5")
    return value


def parse_scan_id(raw: Optional[str]) -> int:
    candidate = _clean(raw)
    if not candidate:
        raise ValueError("missing scanId")
    try:
        value = int(candidate)
    except ValueError as exc:
        raise ValueError("invalid scanId") from exc
    if value <= 0:
        raise ValueError("invalid scanId")
    return value


def parse_window(
    from_raw: Optional[str],
    to_raw: Optional[str],
    days_raw: Optional[str],
    now: int,
) -> Tuple[int, int]:
    """Resolve the ``[from, to]`` time window in epoch seconds.

    ``to`` defaults to ``now``. Without ``from`` the window spans ``days``
    days back from ``to``; ``days <= 0`` means from the epoch.
    """
    end = parse_int(to_raw, "to", now)
    start = parse_int(from_raw, "from", -1)
    if start < 0:
        days = parse_int(days_raw, "days", DEFAULT_DAYS)
        start = 0 if days <= 0 else end - days * SECONDS_PER_DAY
    if start > end:
        raise ValueError("from must be <= to")
    return start, end
