from __future__ import annotations

from typing import Iterable, Optional

from app.schemas import Room
from models.records import Position

OUTSIDE = "Outside"


def contains(room: Room, point: Position) -> bool:
    # Edges are inclusive on all four sides.
    return (
        room.x <= point.x <= room.x + room.width
        and room.y <= point.y <= room.y + room.height
    )


def find_room(point: Position, rooms: Iterable[Room]) -> Optional[Room]:
    """Return the first room containing ``point``; earlier rooms win overlaps."""
    for room in rooms:
        if contains(room, point):
            return room
    return None


def locate(point: Position, rooms: Iterable[Room]) -> str:
    room = find_room(point, rooms)
    return OUTSIDE if room is None else room.name
