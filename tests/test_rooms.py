from __future__ import annotations

import pytest

from app.schemas import Room
from models.records import Position
from services.rooms import OUTSIDE, find_room, locate


def _room(room_id: str, name: str, x: float, y: float, width: float, height: float) -> Room:
    return Room(id=room_id, name=name, x=x, y=y, width=width, height=height, level_id="L1")


ROOMS = [
    _room("R1", "Lobby", 0, 0, 100, 100),
    _room("R2", "Lab", 50, 50, 100, 100),
    _room("R3", "Annex", 300, 0, 50, 50),
]


def test_point_inside_single_room() -> None:
    assert locate(Position(320, 10), ROOMS) == "Annex"


@pytest.mark.parametrize(
    "point",
    [Position(0, 0), Position(100, 100), Position(0, 100), Position(100, 0), Position(100, 37)],
)
def test_boundary_points_are_inside(point: Position) -> None:
    assert locate(point, [ROOMS[0]]) == "Lobby"


def test_first_room_wins_overlap() -> None:
    assert locate(Position(75, 75), ROOMS) == "Lobby"
    assert locate(Position(75, 75), list(reversed(ROOMS))) == "Lab"


def test_point_outside_all_rooms() -> None:
    assert locate(Position(200, 200), ROOMS) == OUTSIDE
    assert locate(Position(-0.001, 50), ROOMS) == "Outside"


def test_no_rooms_means_outside() -> None:
    assert locate(Position(1, 1), []) == OUTSIDE
    assert find_room(Position(1, 1), []) is None


def test_find_room_returns_record() -> None:
    room = find_room(Position(140, 140), ROOMS)

    assert room is not None
    assert room.id == "R2"
