"""End-to-end tests for resolving readings into positions."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import pytest

from app.schemas import AccessPoint, DeviceReading, LocalizationOutcome, Room, Signal
from services.pipeline import PositionPipeline
from services.signal_model import estimate_distance

ACCESS_POINTS = [
    AccessPoint(id="A", x=0, y=0, level_id="L1"),
    AccessPoint(id="B", x=100, y=0, level_id="L1"),
    AccessPoint(id="C", x=0, y=100, level_id="L1"),
]
ROOMS = [Room(id="R1", name="R", x=0, y=0, width=100, height=100, level_id="L1")]


def _reading(signals: Sequence[Tuple[str, int]], device_id: str = "DEV001") -> DeviceReading:
    return DeviceReading(
        id=device_id,
        name="John",
        signals=tuple(Signal(ap_id=ap_id, rssi=rssi) for ap_id, rssi in signals),
        date="2024-01-01T10:00:00Z",
        level_id="L1",
    )


@pytest.fixture()
def pipeline() -> PositionPipeline:
    return PositionPipeline()


def test_equidistant_signals_resolve_to_centre(pipeline: PositionPipeline) -> None:
    reading = _reading([("A", -48), ("B", -48), ("C", -48)])

    localization = pipeline.locate(reading, ACCESS_POINTS, ROOMS)

    assert localization.located
    assert localization.outcome is LocalizationOutcome.located
    assert localization.position is not None
    assert localization.position.x == pytest.approx(50.0, abs=1e-6)
    assert localization.position.y == pytest.approx(50.0, abs=1e-6)
    assert localization.room == "R"
    assert pipeline.resolve(reading, ACCESS_POINTS, ROOMS) == localization.position


def test_solution_outside_rooms_is_unlocalizable(pipeline: PositionPipeline) -> None:
    # A much weaker than B and C pushes the solution far beyond x, y = 100.
    reading = _reading([("A", -90), ("B", -45), ("C", -45)])

    localization = pipeline.locate(reading, ACCESS_POINTS, ROOMS)

    assert localization.outcome is LocalizationOutcome.out_of_bounds
    assert localization.position is None
    assert localization.room is None
    assert pipeline.resolve(reading, ACCESS_POINTS, ROOMS) is None


def test_two_known_anchors_are_insufficient(pipeline: PositionPipeline) -> None:
    reading = _reading([("A", -48), ("B", -48), ("X", -48), ("Y", -48), ("Z", -48)])

    localization = pipeline.locate(reading, ACCESS_POINTS, ROOMS)

    assert localization.outcome is LocalizationOutcome.insufficient_anchors
    assert localization.anchor_count == 2
    assert pipeline.resolve(reading, ACCESS_POINTS, ROOMS) is None


def test_anchors_from_other_level_are_ignored(pipeline: PositionPipeline) -> None:
    reading = _reading([("A", -48), ("B", -48), ("C", -48)])

    localization = pipeline.locate(reading, ACCESS_POINTS[:2], ROOMS)

    assert localization.outcome is LocalizationOutcome.insufficient_anchors


def test_collinear_anchors_are_degenerate(pipeline: PositionPipeline) -> None:
    collinear = [
        AccessPoint(id="A", x=0, y=50, level_id="L1"),
        AccessPoint(id="B", x=50, y=50, level_id="L1"),
        AccessPoint(id="C", x=100, y=50, level_id="L1"),
    ]
    reading = _reading([("A", -48), ("B", -45), ("C", -48)])

    localization = pipeline.locate(reading, collinear, ROOMS)

    assert localization.outcome is LocalizationOutcome.degenerate_geometry
    assert pipeline.resolve(reading, collinear, ROOMS) is None


def test_only_first_three_usable_signals_are_used(pipeline: PositionPipeline) -> None:
    extra = ACCESS_POINTS + [AccessPoint(id="D", x=100, y=100, level_id="L1")]
    # The fourth signal would drag any least-squares fit away from the centre.
    reading = _reading([("Q", -30), ("A", -48), ("B", -48), ("C", -48), ("D", -99)])

    localization = pipeline.locate(reading, extra, ROOMS)

    assert localization.located
    assert localization.anchor_count == 4
    assert localization.position.x == pytest.approx(50.0, abs=1e-6)  # type: ignore[union-attr]
    assert localization.position.y == pytest.approx(50.0, abs=1e-6)  # type: ignore[union-attr]


def test_anchors_follow_signal_order_and_signal_model(pipeline: PositionPipeline) -> None:
    reading = _reading([("C", -60), ("missing", -50), ("A", -45)])

    anchors = pipeline.anchors_for(reading, ACCESS_POINTS)

    assert [(anchor.x, anchor.y) for anchor in anchors] == [(0, 100), (0, 0)]
    assert anchors[0].distance == pytest.approx(estimate_distance(-60))
    assert anchors[1].distance == pytest.approx(50.0)


def test_unlocalized_outcome_is_logged(pipeline: PositionPipeline, caplog) -> None:
    reading = _reading([("A", -48)], device_id="DEV042")

    with caplog.at_level(logging.DEBUG, logger="services.pipeline"):
        pipeline.locate(reading, ACCESS_POINTS, ROOMS)

    records: List[logging.LogRecord] = [
        record for record in caplog.records if record.name == "services.pipeline"
    ]
    assert records
    assert getattr(records[0], "device_id", None) == "DEV042"
    assert getattr(records[0], "outcome", None) == "insufficient_anchors"


@pytest.mark.parametrize("weak_rssi", [-4000, -7000])
def test_extremely_weak_signal_is_unlocalizable(pipeline: PositionPipeline, weak_rssi: int) -> None:
    reading = _reading([("A", weak_rssi), ("B", -45), ("C", -45)])

    localization = pipeline.locate(reading, ACCESS_POINTS, ROOMS)

    assert localization.outcome is LocalizationOutcome.degenerate_geometry
    assert localization.position is None
    assert pipeline.resolve(reading, ACCESS_POINTS, ROOMS) is None
