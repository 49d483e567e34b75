from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_levels, render_positions, render_readings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the floor locator service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8383).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("levels")
def levels_command(ctx: typer.Context) -> None:
    """List the building levels."""
    state = _get_state(ctx)
    render_levels(state.client.list_levels())


@app.command("readings")
def readings_command(
    ctx: typer.Context,
    level: Optional[str] = typer.Option(None, "--level", "-l", help="Only show this level."),
) -> None:
    """List stored device readings in the order they were received."""
    state = _get_state(ctx)
    render_readings(state.client.list_readings(level))


@app.command("devices")
def devices_command(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Match on name or id."),
) -> None:
    """Show the latest reading of every device."""
    state = _get_state(ctx)
    render_readings(state.client.list_devices(search), heading="Devices")


@app.command("positions")
def positions_command(
    ctx: typer.Context,
    level: str = typer.Option(..., "--level", "-l", help="Level to resolve devices on."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Match on name or id."),
) -> None:
    """Resolve the current position of every device on a level."""
    state = _get_state(ctx)
    render_positions(state.client.list_positions(level, search))


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file with one reading or a list."
    ),
    upsert: bool = typer.Option(
        False,
        "--upsert/--append",
        help="Replace the device's stored reading instead of appending a new one.",
    ),
) -> None:
    """Send device readings from a JSON file."""
    state = _get_state(ctx)
    try:
        document = json.loads(file.read_text())
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{file} is not valid JSON: {exc}") from exc

    readings = document if isinstance(document, list) else [document]
    if not all(isinstance(payload, dict) for payload in readings):
        raise typer.BadParameter(f"{file} must hold a reading object or a list of them.")

    stored: List[str] = []
    for payload in readings:
        try:
            status_code, message = state.client.submit_reading(payload, upsert=upsert)
        except typer.Exit:
            if stored:
                typer.secho(
                    f"Already stored before failure: {', '.join(stored)}",
                    fg=typer.colors.YELLOW,
                    err=True,
                )
            raise
        stored.append(str(payload.get("id")))
        typer.secho(
            f"{payload.get('id')}: {message} ({status_code})",
            fg=typer.colors.GREEN,
        )
