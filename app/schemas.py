"""Pydantic schemas for the HTTP API layer and the auction store."""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PriceUnit(str, Enum):
    """How an auction's buyout is expressed as a price."""

    per_item = "per_item"
    per_stack = "per_stack"


class ApiModel(BaseModel):
    """Base for payloads serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Item(ApiModel):
    """An item that can appear in auctions."""

    id: str
    name: str
    short_id: int = 0


class ScanMeta(ApiModel):
    """One market scan of a realm/faction at a point in time."""

    id: int = Field(..., gt=0)
    realm: str
    faction: str
    ts: int = Field(..., description="Scan time in seconds since epoch.")


class Auction(ApiModel):
    """A single auction listing observed during a scan."""

    scan_id: int
    item_id: str
    buyout: int = Field(..., description="Buyout in copper for the whole stack.")
    item_count: int


class RealmFaction(ApiModel):
    realm: str
    faction: str


class SeriesPointOut(ApiModel):
    """Per-scan price summary."""

    scan_id: int
    ts: int
    n: int = Field(..., ge=0, description="Number of prices left after trimming.")
    min: float
    q1: float
    median: float
    q3: float
    max: float
    mean: float
    stddev: float


class SeriesResponse(ApiModel):
    """Time series of per-scan summaries for an item."""

    item: Item
    realm: str
    faction: str
    unit: PriceUnit
    from_: int = Field(..., alias="from")
    to: int
    trim_pct: int
    points: List[SeriesPointOut] = Field(default_factory=list)


class HistogramBinOut(ApiModel):
    lo: int
    hi: int
    count: int = Field(..., ge=0)


class HistogramResponse(ApiModel):
    """Price distribution of one item within one scan."""

    item_id: str
    scan_id: int
    ts: int
    unit: PriceUnit
    trim_pct: int
    n: int = Field(..., ge=0)
    min: int
    max: int
    bins: List[HistogramBinOut] = Field(default_factory=list)
