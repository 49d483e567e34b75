"""Pydantic schemas for the floor catalog, device readings and API payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from models.records import parse_timestamp


class _WireModel(BaseModel):
    """Base for records exchanged as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Level(_WireModel):
    """One independently addressed floor plan."""

    id: str
    name: str
    floor_number: int


class AccessPoint(_WireModel):
    """Fixed anchor placed on exactly one level."""

    id: str
    x: float
    y: float
    level_id: str


class Room(_WireModel):
    """Axis-aligned rectangle in its level's coordinate space."""

    id: str
    name: str
    x: float
    y: float
    width: float
    height: float
    level_id: str


class Signal(_WireModel):
    ap_id: str
    rssi: int


class DeviceReading(_WireModel):
    """Signals reported by one device at one point in time."""

    id: str = Field(..., description="Device identifier, reused as the record key.")
    name: str = ""
    signals: Tuple[Signal, ...]
    date: str = Field(..., description="ISO-8601 timestamp of the reading.")
    level_id: str

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parse_timestamp(value)
        return value


class LocalizationOutcome(str, Enum):
    """Result of resolving a reading into a position."""

    located = "located"
    insufficient_anchors = "insufficient_anchors"
    degenerate_geometry = "degenerate_geometry"
    out_of_bounds = "out_of_bounds"


class WriteStatus(str, Enum):
    """Effect of storing a reading."""

    created = "created"
    updated = "updated"


class MessageResponse(BaseModel):
    message: str


class Coordinates(BaseModel):
    x: float
    y: float


class DevicePosition(_WireModel):
    """Latest known state of a device together with its resolved position."""

    id: str
    name: str
    level_id: str
    date: str
    outcome: LocalizationOutcome
    position: Optional[Coordinates] = None
    room: Optional[str] = None


class ReadingValidationError(ValueError):
    """A submitted device reading is missing required data or is malformed."""


_REQUIRED_FIELDS = (
    ("id", "id"),
    ("signals", "signals"),
    ("date", "date"),
    ("levelId", "level_id"),
)


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def parse_device_reading(payload: Any) -> DeviceReading:
    """Build a ``DeviceReading`` from an untrusted payload.

    Raises ``ReadingValidationError`` when id, signals, date or levelId is absent
    or when any field fails validation. An empty ``signals`` list is accepted.
    """
    if isinstance(payload, DeviceReading):
        return payload
    if not isinstance(payload, Mapping):
        raise ReadingValidationError("Invalid device reading data: expected a JSON object.")

    missing = [
        alias
        for alias, attribute in _REQUIRED_FIELDS
        if _is_absent(payload.get(alias, payload.get(attribute)))
    ]
    if missing:
        raise ReadingValidationError(
            f"Invalid device reading data: missing {', '.join(missing)}."
        )

    try:
        return DeviceReading.model_validate(dict(payload))
    except ValidationError as exc:
        raise ReadingValidationError(f"Invalid device reading data: {_describe(exc)}") from exc
