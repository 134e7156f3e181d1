from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from app.schemas import Auction, Item, PriceUnit, RealmFaction, ScanMeta
from models.records import PriceObservation
from settings import get_settings


def unit_price(auction: Auction, unit: PriceUnit) -> int:
    """Price of an auction in the requested unit.

    Per-item prices round half away from zero, like SQL ``ROUND``.
    """
    if unit is PriceUnit.per_stack:
        return auction.buyout
    quotient, remainder = divmod(auction.buyout, auction.item_count)
    if remainder * 2 >= auction.item_count:
        quotient += 1
    return quotient


def _is_priced(auction: Auction) -> bool:
    return auction.buyout > 0 and auction.item_count > 0


class AuctionStore:
    """Thread-safe auction store that hands out filtered, ordered price rows.

    The whole store is mirrored to a JSON file after every write when a
    persistence path is given.
    """

    def __init__(self, name: str = "ahdb", persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[str, Item] = {}
        self._scans: Dict[int, ScanMeta] = {}
        self._auctions: List[Auction] = []
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, item: Item) -> None:
        with self._lock:
            self._items[item.id] = item.model_copy(deep=True)
            self._persist()

    def get_item(self, item_id: str) -> Optional[Item]:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def put_scan(self, scan: ScanMeta) -> None:
        with self._lock:
            self._scans[scan.id] = scan.model_copy(deep=True)
            self._persist()

    def add_auctions(self, auctions: Iterable[Auction]) -> int:
        """Append auction listings; returns how many were added."""
        batch = [auction.model_copy(deep=True) for auction in auctions]
        with self._lock:
            self._auctions.extend(batch)
            self._persist()
        return len(batch)

    def list_realms(self) -> list[RealmFaction]:
        with self._lock:
            pairs = {(scan.realm, scan.faction) for scan in self._scans.values()}
        return [RealmFaction(realm=realm, faction=faction) for realm, faction in sorted(pairs)]

    def latest_realm_faction(self) -> Optional[RealmFaction]:
        """Realm and faction of the most recent scan, if any."""
        with self._lock:
            if not self._scans:
                return None
            latest = max(self._scans.values(), key=lambda scan: scan.ts)
        return RealmFaction(realm=latest.realm, faction=latest.faction)

    def search_items(self, query: str, limit: int = 50) -> list[Item]:
        needle = query.casefold()
        with self._lock:
            matches = [
                item.model_copy(deep=True)
                for item in self._items.values()
                if needle in item.name.casefold()
            ]
        matches.sort(key=lambda item: item.name)
        return matches[:limit]

    def series_rows(
        self,
        item_id: str,
        realm: str,
        faction: str,
        unit: PriceUnit,
        start: int,
        end: int,
    ) -> Iterator[PriceObservation]:
        """Yield an item's prices for one realm/faction and time window.

        Rows come ordered by scan id, then by price ascending.
        """
        with self._lock:
            scans = {
                scan.id: scan
                for scan in self._scans.values()
                if scan.realm == realm and scan.faction == faction and start <= scan.ts <= end
            }
            rows = [
                PriceObservation(
                    scan_id=auction.scan_id,
                    ts=scans[auction.scan_id].ts,
                    price=unit_price(auction, unit),
                )
                for auction in self._auctions
                if auction.item_id == item_id
                and auction.scan_id in scans
                and _is_priced(auction)
            ]
        rows.sort(key=lambda row: (row.scan_id, row.price))
        yield from rows

    def histogram_rows(
        self, item_id: str, scan_id: int, unit: PriceUnit
    ) -> Iterator[Tuple[int, int]]:
        """Yield ``(ts, price)`` pairs of an item within one scan, price ascending."""
        with self._lock:
            scan = self._scans.get(scan_id)
            if scan is None:
                return
            prices = [
                unit_price(auction, unit)
                for auction in self._auctions
                if auction.scan_id == scan_id
                and auction.item_id == item_id
                and _is_priced(auction)
            ]
        prices.sort()
        for price in prices:
            yield scan.ts, price

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            "items": [item.model_dump(mode="json") for item in self._items.values()],
            "scans": [scan.model_dump(mode="json") for scan in self._scans.values()],
            "auctions": [auction.model_dump(mode="json") for auction in self._auctions],
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for payload in data.get("items", []):
            item = Item.model_validate(payload)
            self._items[item.id] = item
        for payload in data.get("scans", []):
            scan = ScanMeta.model_validate(payload)
            self._scans[scan.id] = scan
        self._auctions = [Auction.model_validate(payload) for payload in data.get("auctions", [])]


@lru_cache
def build_default_store(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> AuctionStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return AuctionStore(name=name or "ahdb", persistence_path=persistence)
