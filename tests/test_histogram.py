from __future__ import annotations

import pytest

from models.records import HistogramBin
from services.histogram import DEFAULT_BINS, build_histogram, make_bins


def test_empty_prices_give_empty_histogram() -> None:
    histogram = build_histogram([], trim_pct=0, bins=10, item_id="x", scan_id=3)

    assert histogram.n == 0
    assert (histogram.min, histogram.max) == (0, 0)
    assert histogram.bins == []


def test_equal_prices_collapse_into_single_bin() -> None:
    histogram = build_histogram([1, 1, 1, 1], trim_pct=0, bins=4)

    assert histogram.bins == [HistogramBin(lo=1, hi=1, count=4)]
    assert histogram.n == 4


def test_hundred_values_fill_ten_equal_bins() -> None:
    histogram = build_histogram(range(100), trim_pct=0, bins=10)

    assert len(histogram.bins) == 10
    assert [entry.count for entry in histogram.bins] == [10] * 10
    assert [(entry.lo, entry.hi) for entry in histogram.bins][:2] == [(0, 10), (10, 20)]
    assert histogram.bins[-1].hi == 100


def test_width_is_rounded_up_and_last_bin_overshoots() -> None:
    low, high, bins = make_bins([0, 3, 7, 10], 3)

    assert (low, high) == (0, 10)
    assert [(entry.lo, entry.hi) for entry in bins] == [(0, 4), (4, 8), (8, 12)]
    assert [entry.count for entry in bins] == [2, 1, 1]


def test_narrow_range_uses_minimum_width_and_clamps_top() -> None:
    low, high, bins = make_bins([10, 11, 12], 5)

    assert (low, high) == (10, 12)
    assert len(bins) == 5
    assert [entry.count for entry in bins] == [1, 1, 1, 0, 0]


def test_non_positive_bin_count_falls_back_to_default() -> None:
    _, _, bins = make_bins([0, 1000], 0)

    assert len(bins) == DEFAULT_BINS


@pytest.mark.parametrize("trim_pct", [0, 10, 25, 50])
@pytest.mark.parametrize("bins", [5, 24, 120])
def test_bin_counts_sum_to_trimmed_n(trim_pct: int, bins: int) -> None:
    prices = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89, 144, 233, 377, 610, 987]

    histogram = build_histogram(prices, trim_pct=trim_pct, bins=bins)

    assert sum(entry.count for entry in histogram.bins) == histogram.n
    assert histogram.bins[0].lo == histogram.min
    assert histogram.bins[-1].hi >= histogram.max


def test_trim_is_applied_before_binning() -> None:
    prices = list(range(1, 21))

    histogram = build_histogram(prices, trim_pct=10, bins=5)

    assert histogram.n == 16
    assert (histogram.min, histogram.max) == (3, 18)


def test_unsorted_input_sorted_when_requested() -> None:
    histogram = build_histogram([30, 10, 20], trim_pct=0, bins=5, presorted=False)

    assert (histogram.min, histogram.max) == (10, 30)
    assert sum(entry.count for entry in histogram.bins) == 3


def test_metadata_is_echoed() -> None:
    histogram = build_histogram(
        [5, 6],
        trim_pct=5,
        bins=5,
        item_id="item-9",
        scan_id=12,
        ts=1700000000,
        unit="per_stack",
    )

    assert histogram.item_id == "item-9"
    assert histogram.scan_id == 12
    assert histogram.ts == 1700000000
    assert histogram.unit == "per_stack"
    assert histogram.trim_pct == 5
