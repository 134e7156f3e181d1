"""HTTP route definitions for the service."""

from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app import params
from app.schemas import HistogramResponse, Item, RealmFaction, SeriesResponse
from services.market import (
    HistogramQuery,
    MarketService,
    SeriesQuery,
    build_default_service,
)

router = APIRouter()


def get_service() -> MarketService:
    return build_default_service()


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _timed_out(exc: TimeoutError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc))


@router.get(
    "/api/realms",
    response_model=List[RealmFaction],
    summary="List the realm/faction pairs that have scans.",
)
def list_realms(service: MarketService = Depends(get_service)) -> List[RealmFaction]:
    return service.list_realms()


@router.get(
    "/api/items",
    response_model=List[Item],
    summary="Search items by name.",
)
def search_items(
    q: Optional[str] = Query(None, description="Substring of the item name."),
    query: Optional[str] = Query(None, include_in_schema=False),
    service: MarketService = Depends(get_service),
) -> List[Item]:
    needle = (q or "").strip() or (query or "")
    return service.search_items(needle)


@router.get(
    "/api/series",
    response_model=SeriesResponse,
    summary="Per-scan price statistics of an item over time.",
)
def get_series(
    item_id: Optional[str] = Query(None, alias="itemId"),
    realm: Optional[str] = Query(None),
    faction: Optional[str] = Query(None),
    unit: Optional[str] = Query(None, description="per_item or per_stack."),
    from_: Optional[str] = Query(None, alias="from", description="Window start, epoch seconds."),
    to: Optional[str] = Query(None, description="Window end, epoch seconds."),
    days: Optional[str] = Query(None, description="Window length when from is omitted."),
    max_points: Optional[str] = Query(None, alias="maxPoints"),
    trim_pct: Optional[str] = Query(None, alias="trimPct"),
    trim: Optional[str] = Query(None, include_in_schema=False),
    service: MarketService = Depends(get_service),
) -> SeriesResponse:
    try:
        start, end = params.parse_window(from_, to, days, now=int(time.time()))
        query = SeriesQuery(
            item_id=params.parse_item_id(item_id),
            realm=(realm or "").strip(),
            faction=(faction or "").strip(),
            unit=params.parse_unit(unit),
            start=start,
            end=end,
            trim_pct=params.parse_trim_pct(trim_pct, trim),
            max_points=params.parse_max_points(max_points),
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc

    try:
        return service.series(query)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0] if exc.args else "item not found",
        ) from exc
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except TimeoutError as exc:
        raise _timed_out(exc) from exc


@router.get(
    "/api/histogram",
    response_model=HistogramResponse,
    summary="Price distribution of an item within one scan.",
)
def get_histogram(
    item_id: Optional[str] = Query(None, alias="itemId"),
    scan_id: Optional[str] = Query(None, alias="scanId"),
    unit: Optional[str] = Query(None, description="per_item or per_stack."),
    trim_pct: Optional[str] = Query(None, alias="trimPct"),
    trim: Optional[str] = Query(None, include_in_schema=False),
    bins: Optional[str] = Query(None, description="Bin count, clamped to [5, 120]."),
    service: MarketService = Depends(get_service),
) -> HistogramResponse:
    try:
        query = HistogramQuery(
            item_id=params.parse_item_id(item_id),
            scan_id=params.parse_scan_id(scan_id),
            unit=params.parse_unit(unit),
            trim_pct=params.parse_trim_pct(trim_pct, trim),
            bins=params.parse_bins(bins),
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc

    try:
        return service.histogram(query)
    except TimeoutError as exc:
        raise _timed_out(exc) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
