from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

import typer

BAR_WIDTH = 40


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_copper(value: Any) -> str:
    """Render a copper amount as gold/silver/copper, e.g. ``1g 23s 45c``."""
    try:
        copper = max(0, round(float(value)))
    except (TypeError, ValueError):
        copper = 0
    gold, rest = divmod(copper, 10000)
    silver, coins = divmod(rest, 100)
    return f"{gold}g {silver}s {coins}c"


def format_ts(ts: Any) -> str:
    if not ts:
        return ""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")


def render_realms(realms: List[Dict[str, Any]]) -> None:
    echo_heading("Realms")
    if not realms:
        typer.echo("No scans recorded.")
        return
    for entry in realms:
        typer.echo(f"  - {entry.get('realm')} ({entry.get('faction')})")


def render_items(items: List[Dict[str, Any]]) -> None:
    echo_heading("Items")
    if not items:
        typer.echo("No matching items.")
        return
    for entry in items:
        typer.echo(f"  - {entry.get('id')}: {entry.get('name')}")


def render_series(payload: Dict[str, Any]) -> None:
    item = payload.get("item") or {}
    echo_heading("Price Series")
    echo_key_values(
        [
            ("item", f"{item.get('name')} ({item.get('id')})"),
            ("realm", payload.get("realm")),
            ("faction", payload.get("faction")),
            ("unit", payload.get("unit")),
            ("from", format_ts(payload.get("from"))),
            ("to", format_ts(payload.get("to"))),
            ("trimPct", payload.get("trimPct")),
        ]
    )

    points = payload.get("points") or []
    typer.echo()
    echo_heading(f"Points ({len(points)})")
    if not points:
        typer.echo("No scans in range.")
        return
    for point in points:
        typer.echo(
            f"  {format_ts(point.get('ts'))}  scan={point.get('scanId')}  n={point.get('n')}"
            f"  median={format_copper(point.get('median'))}"
            f"  q1={format_copper(point.get('q1'))}  q3={format_copper(point.get('q3'))}"
            f"  mean={format_copper(point.get('mean'))}"
        )


def render_histogram(payload: Dict[str, Any]) -> None:
    echo_heading("Price Histogram")
    echo_key_values(
        [
            ("itemId", payload.get("itemId")),
            ("scanId", payload.get("scanId")),
            ("scanned", format_ts(payload.get("ts"))),
            ("unit", payload.get("unit")),
            ("trimPct", payload.get("trimPct")),
            ("n", payload.get("n")),
            ("min", format_copper(payload.get("min"))),
            ("max", format_copper(payload.get("max"))),
        ]
    )

    bins = payload.get("bins") or []
    typer.echo()
    if not bins:
        typer.echo("No prices recorded for this scan.")
        return
    peak = max(entry.get("count", 0) for entry in bins) or 1
    for entry in bins:
        count = entry.get("count", 0)
        bar = "#" * round(BAR_WIDTH * count / peak)
        typer.echo(
            f"  {format_copper(entry.get('lo')):>14} - {format_copper(entry.get('hi')):<14}"
            f" {count:>6} {bar}"
        )
