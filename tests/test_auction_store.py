"""Unit tests for the JSON-backed auction store."""

from __future__ import annotations

import json

import pytest

from app.schemas import Auction, Item, PriceUnit, RealmFaction, ScanMeta
from datastore.auction_store import AuctionStore, unit_price
from models.records import PriceObservation


def _seed(store: AuctionStore) -> None:
    store.put_item(Item(id="2589", name="Linen Cloth", short_id=2589))
    store.put_item(Item(id="2592", name="Wool Cloth", short_id=2592))
    store.put_scan(ScanMeta(id=1, realm="Stormrage", faction="Alliance", ts=1000))
    store.put_scan(ScanMeta(id=2, realm="Stormrage", faction="Alliance", ts=2000))
    store.put_scan(ScanMeta(id=3, realm="Stormrage", faction="Horde", ts=1500))
    store.add_auctions(
        [
            Auction(scan_id=2, item_id="2589", buyout=500, item_count=20),
            Auction(scan_id=1, item_id="2589", buyout=300, item_count=1),
            Auction(scan_id=1, item_id="2589", buyout=100, item_count=1),
            Auction(scan_id=1, item_id="2589", buyout=0, item_count=1),
            Auction(scan_id=2, item_id="2589", buyout=90, item_count=4),
            Auction(scan_id=3, item_id="2589", buyout=50, item_count=1),
            Auction(scan_id=1, item_id="2592", buyout=70, item_count=1),
        ]
    )


@pytest.fixture()
def store() -> AuctionStore:
    store = AuctionStore(name="test")
    _seed(store)
    return store


def test_unit_price_rounds_half_up_per_item() -> None:
    assert unit_price(Auction(scan_id=1, item_id="a", buyout=90, item_count=4), PriceUnit.per_item) == 23
    assert unit_price(Auction(scan_id=1, item_id="a", buyout=89, item_count=4), PriceUnit.per_item) == 22
    assert unit_price(Auction(scan_id=1, item_id="a", buyout=90, item_count=4), PriceUnit.per_stack) == 90


def test_series_rows_are_filtered_and_ordered(store: AuctionStore) -> None:
    rows = list(
        store.series_rows("2589", "Stormrage", "Alliance", PriceUnit.per_item, 0, 5000)
    )

    assert rows == [
        PriceObservation(scan_id=1, ts=1000, price=100),
        PriceObservation(scan_id=1, ts=1000, price=300),
        PriceObservation(scan_id=2, ts=2000, price=23),
        PriceObservation(scan_id=2, ts=2000, price=25),
    ]


def test_series_rows_respect_time_window(store: AuctionStore) -> None:
    rows = list(
        store.series_rows("2589", "Stormrage", "Alliance", PriceUnit.per_stack, 1500, 2000)
    )

    assert [(row.scan_id, row.price) for row in rows] == [(2, 90), (2, 500)]


def test_histogram_rows_sorted_by_price(store: AuctionStore) -> None:
    rows = list(store.histogram_rows("2589", 2, PriceUnit.per_stack))

    assert rows == [(2000, 90), (2000, 500)]


def test_histogram_rows_for_unknown_scan_are_empty(store: AuctionStore) -> None:
    assert list(store.histogram_rows("2589", 99, PriceUnit.per_item)) == []


def test_realms_and_latest_default(store: AuctionStore) -> None:
    assert store.list_realms() == [
        RealmFaction(realm="Stormrage", faction="Alliance"),
        RealmFaction(realm="Stormrage", faction="Horde"),
    ]
    assert store.latest_realm_faction() == RealmFaction(realm="Stormrage", faction="Alliance")


def test_latest_realm_faction_none_when_empty() -> None:
    assert AuctionStore(name="empty").latest_realm_faction() is None


def test_search_items_is_case_insensitive_and_sorted(store: AuctionStore) -> None:
    results = store.search_items("CLOTH")

    assert [item.name for item in results] == ["Linen Cloth", "Wool Cloth"]
    assert store.search_items("cloth", limit=1)[0].name == "Linen Cloth"


def test_get_item_returns_deep_copy(store: AuctionStore) -> None:
    fetched = store.get_item("2589")

    assert fetched is not None
    fetched.name = "Changed"
    assert store.get_item("2589").name == "Linen Cloth"  # type: ignore[union-attr]
    assert store.get_item("missing") is None


def test_store_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "ahdb.json"
    store = AuctionStore(name="test", persistence_path=path)
    _seed(store)

    payload = json.loads(path.read_text())
    assert len(payload["auctions"]) == 7
    assert {scan["id"] for scan in payload["scans"]} == {1, 2, 3}

    reloaded = AuctionStore(name="test", persistence_path=path)
    assert reloaded.get_item("2592") == Item(id="2592", name="Wool Cloth", short_id=2592)
    assert list(
        reloaded.series_rows("2589", "Stormrage", "Horde", PriceUnit.per_item, 0, 5000)
    ) == [PriceObservation(scan_id=3, ts=1500, price=50)]


def test_corrupt_store_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "ahdb.json"
    path.write_text("{not json")

    store = AuctionStore(name="test", persistence_path=path)

    assert store.list_realms() == []
