from __future__ import annotations

import math

import pytest

from models.records import Anchor, Position
from services.trilateration import solve


def _anchor(x: float, y: float, target: Position) -> Anchor:
    return Anchor(x=x, y=y, distance=math.hypot(target.x - x, target.y - y))


@pytest.mark.parametrize(
    "target",
    [Position(30, 40), Position(50, 50), Position(-20, 135.5), Position(0, 0)],
)
def test_recovers_point_from_exact_distances(target: Position) -> None:
    result = solve(
        _anchor(0, 0, target),
        _anchor(100, 0, target),
        _anchor(0, 100, target),
    )

    assert result is not None
    assert result.x == pytest.approx(target.x, abs=1e-6)
    assert result.y == pytest.approx(target.y, abs=1e-6)


def test_collinear_anchors_are_unsolvable() -> None:
    result = solve(
        Anchor(0, 0, 10),
        Anchor(50, 0, 20),
        Anchor(100, 0, 30),
    )

    assert result is None


def test_coincident_anchors_are_unsolvable() -> None:
    assert solve(Anchor(10, 10, 5), Anchor(10, 10, 5), Anchor(40, 80, 5)) is None


def test_nearly_collinear_below_threshold_is_unsolvable() -> None:
    result = solve(
        Anchor(0, 0, 1),
        Anchor(1e-4, 0, 1),
        Anchor(2e-4, 1e-3, 1),
    )

    # A = -2e-4, B = 0, D = -4e-4, E = -2e-3 -> denom = 4e-7
    assert result is None


def test_small_but_valid_denominator_is_solved() -> None:
    result = solve(
        Anchor(0, 0, 1),
        Anchor(1e-3, 0, 1),
        Anchor(0, 1e-3, 1),
    )

    # A = -2e-3, E = -2e-3 -> denom = 4e-6
    assert result is not None


def test_equal_distances_give_circumcenter() -> None:
    result = solve(Anchor(0, 0, 7), Anchor(100, 0, 7), Anchor(0, 100, 7))

    assert result is not None
    assert result.x == pytest.approx(50.0)
    assert result.y == pytest.approx(50.0)


def test_huge_distances_do_not_raise() -> None:
    result = solve(Anchor(0, 0, 1e200), Anchor(100, 0, 50), Anchor(0, 100, 50))

    assert result is not None
    assert not math.isfinite(result.x)
