"""Log-distance path loss conversion from RSSI to distance."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_TX_POWER = -45.0
DEFAULT_PATH_LOSS_EXPONENT = 2.2
DEFAULT_DISTANCE_SCALE = 50.0


def estimate_distance(
    rssi: float,
    tx_power: float = DEFAULT_TX_POWER,
    path_loss_exponent: float = DEFAULT_PATH_LOSS_EXPONENT,
    scale: float = DEFAULT_DISTANCE_SCALE,
) -> float:
    """Return the distance, in floor-plan units, implied by ``rssi``.

    Weaker (more negative) readings give larger distances. Results are not clamped;
    readings too weak to represent as a float give ``math.inf``.
    """
    try:
        return 10 ** ((tx_power - rssi) / (10 * path_loss_exponent)) * scale
    except OverflowError:
        return math.inf


@dataclass(frozen=True)
class SignalModel:
    """Path loss parameters bound together for repeated conversions."""

    tx_power: float = DEFAULT_TX_POWER
    path_loss_exponent: float = DEFAULT_PATH_LOSS_EXPONENT
    scale: float = DEFAULT_DISTANCE_SCALE

    def distance(self, rssi: float) -> float:
        return estimate_distance(
            rssi,
            tx_power=self.tx_power,
            path_loss_exponent=self.path_loss_exponent,
            scale=self.scale,
        )
