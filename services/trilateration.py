"""Closed-form 2D trilateration from three anchors."""

from __future__ import annotations

from typing import Optional

from models.records import Anchor, Position

DEGENERATE_THRESHOLD = 1e-6


def _square(value: float) -> float:
    # Multiplication saturates to inf where ** would raise OverflowError.
    return value * value


def solve(a: Anchor, b: Anchor, c: Anchor) -> Optional[Position]:
    """Intersect the three distance circles around ``a``, ``b`` and ``c``.

    Subtracting the circle equations pairwise (a-b, a-c) leaves a 2x2 linear
    system that is solved with Cramer's rule. Returns ``None`` when the system is
    singular, i.e. the anchors are collinear or nearly so.
    """
    coef_a = 2 * (a.x - b.x)
    coef_b = 2 * (a.y - b.y)
    coef_c = (
        _square(b.distance) - _square(a.distance)
        - _square(b.x) + _square(a.x)
        - _square(b.y) + _square(a.y)
    )
    coef_d = 2 * (a.x - c.x)
    coef_e = 2 * (a.y - c.y)
    coef_f = (
        _square(c.distance) - _square(a.distance)
        - _square(c.x) + _square(a.x)
        - _square(c.y) + _square(a.y)
    )

    denom = coef_a * coef_e - coef_b * coef_d
    if abs(denom) < DEGENERATE_THRESHOLD:
        return None

    return Position(
        x=(coef_c * coef_e - coef_b * coef_f) / denom,
        y=(coef_a * coef_f - coef_c * coef_d) / denom,
    )
