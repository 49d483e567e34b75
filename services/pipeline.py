"""Turns a device reading into a validated position on its level."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from app.schemas import AccessPoint, DeviceReading, LocalizationOutcome, Room
from models.records import Anchor, Position
from services import rooms as room_locator
from services import trilateration
from services.signal_model import SignalModel

logger = logging.getLogger(__name__)

REQUIRED_ANCHORS = 3


@dataclass(frozen=True)
class Localization:
    """Outcome of one resolution attempt.

    ``position`` and ``room`` are only set when ``outcome`` is ``located``.
    """

    outcome: LocalizationOutcome
    position: Optional[Position] = None
    room: Optional[str] = None
    anchor_count: int = 0

    @property
    def located(self) -> bool:
        return self.outcome is LocalizationOutcome.located


class PositionPipeline:
    """Filters signals to known anchors, trilaterates and checks room bounds."""

    def __init__(self, signal_model: Optional[SignalModel] = None) -> None:
        self.signal_model = signal_model or SignalModel()

    def anchors_for(
        self, reading: DeviceReading, access_points: Sequence[AccessPoint]
    ) -> List[Anchor]:
        """Map each signal from a known access point to a distance-annotated anchor.

        Signal order is preserved; signals naming unknown access points are dropped.
        """
        by_id: Dict[str, AccessPoint] = {}
        for access_point in access_points:
            by_id.setdefault(access_point.id, access_point)

        anchors: List[Anchor] = []
        for signal in reading.signals:
            access_point = by_id.get(signal.ap_id)
            if access_point is None:
                continue
            anchors.append(
                Anchor(
                    x=access_point.x,
                    y=access_point.y,
                    distance=self.signal_model.distance(signal.rssi),
                )
            )
        return anchors

    def locate(
        self,
        reading: DeviceReading,
        access_points: Sequence[AccessPoint],
        rooms: Sequence[Room],
    ) -> Localization:
        anchors = self.anchors_for(reading, access_points)
        if len(anchors) < REQUIRED_ANCHORS:
            return self._reject(reading, LocalizationOutcome.insufficient_anchors, len(anchors))

        # Only the first three usable anchors take part in the fix.
        candidate = trilateration.solve(*anchors[:REQUIRED_ANCHORS])
        # Overflowing distances solve to inf or nan rather than a usable point.
        if candidate is None or not (math.isfinite(candidate.x) and math.isfinite(candidate.y)):
            return self._reject(reading, LocalizationOutcome.degenerate_geometry, len(anchors))

        room = room_locator.find_room(candidate, rooms)
        if room is None:
            return self._reject(reading, LocalizationOutcome.out_of_bounds, len(anchors))

        return Localization(
            outcome=LocalizationOutcome.located,
            position=candidate,
            room=room.name,
            anchor_count=len(anchors),
        )

    def resolve(
        self,
        reading: DeviceReading,
        access_points: Sequence[AccessPoint],
        rooms: Sequence[Room],
    ) -> Optional[Position]:
        """Return the device position, or ``None`` when it cannot be localized."""
        return self.locate(reading, access_points, rooms).position

    @staticmethod
    def _reject(
        reading: DeviceReading, outcome: LocalizationOutcome, anchor_count: int
    ) -> Localization:
        logger.debug(
            "Device reading not localized",
            extra={
                "device_id": reading.id,
                "level_id": reading.level_id,
                "outcome": outcome.value,
                "signal_count": len(reading.signals),
                "anchor_count": anchor_count,
            },
        )
        return Localization(outcome=outcome, anchor_count=anchor_count)
