from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the price statistics service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_realms(self) -> List[Dict[str, Any]]:
        return self._get("/api/realms")

    def search_items(self, query: str) -> List[Dict[str, Any]]:
        return self._get("/api/items", {"q": query})

    def get_series(self, item_id: str, **options: Any) -> Dict[str, Any]:
        return self._get("/api/series", {"itemId": item_id, **options})

    def get_histogram(self, item_id: str, scan_id: int, **options: Any) -> Dict[str, Any]:
        return self._get("/api/histogram", {"itemId": item_id, "scanId": scan_id, **options})

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = self._client.get(path, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
