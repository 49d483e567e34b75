from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_CATALOG_PATH_ENV = "CATALOG_PATH"
_READINGS_PATH_ENV = "READINGS_PERSISTENCE_PATH"
_TX_POWER_ENV = "RSSI_TX_POWER"
_PATH_LOSS_ENV = "PATH_LOSS_EXPONENT"
_DISTANCE_SCALE_ENV = "DISTANCE_SCALE"
_ENFORCE_LEVELS_ENV = "ENFORCE_KNOWN_LEVELS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    catalog_path: Optional[str]
    readings_persistence_path: Optional[str]
    tx_power: float
    path_loss_exponent: float
    distance_scale: float
    enforce_known_levels: bool
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_float(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    return parsed


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        catalog_path=_read_optional_env(_CATALOG_PATH_ENV, None),
        readings_persistence_path=_read_optional_env(_READINGS_PATH_ENV, None),
        tx_power=_read_float(_TX_POWER_ENV, -45.0),
        path_loss_exponent=_read_float(_PATH_LOSS_ENV, 2.2, positive=True),
        distance_scale=_read_float(_DISTANCE_SCALE_ENV, 50.0, positive=True),
        enforce_known_levels=_read_bool(_ENFORCE_LEVELS_ENV, True),
        log_level=_read_log_level("INFO"),
    )
