from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_histogram, render_items, render_realms, render_series


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Query per-scan auction price statistics from the ahdb service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://127.0.0.1:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("realms")
def realms_command(ctx: typer.Context) -> None:
    """List realm/faction pairs with recorded scans."""
    state = _get_state(ctx)
    render_realms(state.client.list_realms())


@app.command("items")
def items_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Part of the item name (at least 2 characters)."),
) -> None:
    """Search items by name."""
    state = _get_state(ctx)
    render_items(state.client.search_items(query))


@app.command("series")
def series_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Item identifier."),
    realm: Optional[str] = typer.Option(None, "--realm", help="Defaults to the latest scanned realm."),
    faction: Optional[str] = typer.Option(None, "--faction", help="Defaults to the latest scanned faction."),
    unit: str = typer.Option("per_item", "--unit", help="per_item or per_stack."),
    days: Optional[int] = typer.Option(None, "--days", help="Window length in days (default 7)."),
    start: Optional[int] = typer.Option(None, "--from", help="Window start, epoch seconds."),
    end: Optional[int] = typer.Option(None, "--to", help="Window end, epoch seconds."),
    max_points: Optional[int] = typer.Option(None, "--max-points", help="Keep at most this many recent scans."),
    trim_pct: int = typer.Option(0, "--trim", help="Percent trimmed from each end (multiple of 5)."),
) -> None:
    """Show per-scan price statistics of an item."""
    state = _get_state(ctx)
    payload = state.client.get_series(
        item_id,
        realm=realm,
        faction=faction,
        unit=unit,
        days=days,
        **{"from": start, "to": end, "maxPoints": max_points, "trimPct": trim_pct},
    )
    render_series(payload)


@app.command("histogram")
def histogram_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Item identifier."),
    scan_id: int = typer.Argument(..., help="Scan identifier."),
    unit: str = typer.Option("per_item", "--unit", help="per_item or per_stack."),
    trim_pct: int = typer.Option(0, "--trim", help="Percent trimmed from each end (multiple of 5)."),
    bins: Optional[int] = typer.Option(None, "--bins", help="Number of bins (5-120, default 24)."),
) -> None:
    """Show the price distribution of an item within one scan."""
    state = _get_state(ctx)
    payload = state.client.get_histogram(
        item_id, scan_id, unit=unit, bins=bins, trimPct=trim_pct
    )
    render_histogram(payload)
