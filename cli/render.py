from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def _format_signals(signals: Iterable[Dict[str, Any]]) -> str:
    return ", ".join(f"{signal.get('apId')}={signal.get('rssi')}" for signal in signals)


def render_levels(levels: List[Dict[str, Any]]) -> None:
    echo_heading("Levels")
    if not levels:
        typer.echo("No levels defined.")
        return
    for level in levels:
        typer.echo(f"  - {level.get('id')}: {level.get('name')} (floor {level.get('floorNumber')})")


def render_readings(readings: List[Dict[str, Any]], heading: str = "Device Readings") -> None:
    echo_heading(heading)
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        typer.echo(
            f"  - {reading.get('name')} ({reading.get('id')}) "
            f"level={reading.get('levelId')} date={reading.get('date')}"
        )
        typer.echo(f"    signals: {_format_signals(reading.get('signals') or [])}")


def render_positions(positions: List[Dict[str, Any]]) -> None:
    echo_heading("Device Positions")
    if not positions:
        typer.echo("No devices on this level.")
        return
    for entry in positions:
        label = f"{entry.get('name')} ({entry.get('id')})"
        position = entry.get("position")
        if position:
            typer.echo(
                f"  - {label}: x={position.get('x'):.1f} y={position.get('y'):.1f} "
                f"room={entry.get('room')}"
            )
        else:
            typer.echo(f"  - {label}: unlocalized ({entry.get('outcome')})")
