from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the floor locator service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_levels(self) -> List[Dict[str, Any]]:
        return self._get_json("/levels")

    def list_readings(self, level_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._get_json("/device-readings", params=_level_params(level_id))

    def list_devices(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"search": search} if search else None
        return self._get_json("/devices", params=params)

    def list_positions(
        self, level_id: str, search: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {"levelId": level_id}
        if search:
            params["search"] = search
        return self._get_json("/device-positions", params=params)

    def submit_reading(self, payload: Dict[str, Any], upsert: bool = False) -> Tuple[int, str]:
        """Send a reading and return the status code with the server's message."""
        method = "PUT" if upsert else "POST"
        try:
            response = self._client.request(method, "/device-readings", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        body = response.json()
        return response.status_code, str(body.get("message", ""))

    def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
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


def _level_params(level_id: Optional[str]) -> Optional[Dict[str, str]]:
    return {"levelId": level_id} if level_id else None
