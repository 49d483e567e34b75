"""Service layer joining the floor catalog, the reading log and the pipeline."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, List, Optional, Tuple

from app.schemas import (
    AccessPoint,
    Coordinates,
    DevicePosition,
    DeviceReading,
    Level,
    ReadingValidationError,
    Room,
    WriteStatus,
    parse_device_reading,
)
from datastore.catalog import FloorCatalog, build_default_catalog
from datastore.readings import ReadingStore, build_default_store
from services.pipeline import Localization, PositionPipeline
from services.reducer import ReadingReducer
from services.signal_model import SignalModel
from settings import get_settings

logger = logging.getLogger(__name__)


class LocatorService:
    """Coordinates reading ingestion and on-demand position resolution."""

    def __init__(
        self,
        catalog: FloorCatalog,
        store: ReadingStore,
        reducer: ReadingReducer,
        pipeline: PositionPipeline,
        enforce_known_levels: bool = True,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.reducer = reducer
        self.pipeline = pipeline
        self.enforce_known_levels = enforce_known_levels

    def list_levels(self) -> Tuple[Level, ...]:
        return self.catalog.levels()

    def list_access_points(self, level_id: Optional[str] = None) -> Tuple[AccessPoint, ...]:
        return self.catalog.access_points(level_id)

    def list_rooms(self, level_id: Optional[str] = None) -> Tuple[Room, ...]:
        return self.catalog.rooms(level_id)

    def list_readings(self, level_id: Optional[str] = None) -> Tuple[DeviceReading, ...]:
        if level_id is None:
            return self.store.all()
        return self.store.filter_by_level(level_id)

    def submit_reading(self, payload: Any) -> DeviceReading:
        """Validate and append a reading to the log."""
        return self.store.append(self._validate(payload))

    def upsert_reading(self, payload: Any) -> WriteStatus:
        """Validate a reading and replace the device's first record, or add one."""
        return self.store.upsert(self._validate(payload))

    def devices(self, search: Optional[str] = None) -> List[DeviceReading]:
        """Latest reading of every known device across all levels, sorted by name."""
        return self.reducer.roster(self.store.all(), search=search)

    def device_positions(
        self, level_id: str, search: Optional[str] = None
    ) -> List[DevicePosition]:
        """Resolve the latest reading of each device reported on ``level_id``."""
        readings = self.store.filter_by_level(level_id)
        access_points = self.catalog.access_points(level_id)
        rooms = self.catalog.rooms(level_id)
        return [
            self._describe(reading, self.pipeline.locate(reading, access_points, rooms))
            for reading in self.reducer.roster(readings, search=search)
        ]

    def device_position(self, device_id: str) -> DevicePosition:
        """Resolve a single device from its latest reading on whichever level it was taken."""
        latest = self.reducer.latest_per_device(
            reading for reading in self.store.all() if reading.id == device_id
        ).get(device_id)
        if latest is None:
            raise KeyError(f"No readings recorded for device {device_id!r}.")
        localization = self.pipeline.locate(
            latest,
            self.catalog.access_points(latest.level_id),
            self.catalog.rooms(latest.level_id),
        )
        return self._describe(latest, localization)

    def _validate(self, payload: Any) -> DeviceReading:
        try:
            reading = parse_device_reading(payload)
        except ReadingValidationError as exc:
            logger.warning("Rejected device reading", extra={"reason": str(exc)})
            raise
        if self.enforce_known_levels and not self.catalog.has_level(reading.level_id):
            logger.warning(
                "Rejected device reading for unknown level",
                extra={"device_id": reading.id, "level_id": reading.level_id},
            )
            raise ReadingValidationError(
                f"Invalid device reading data: unknown levelId {reading.level_id!r}."
            )
        return reading

    @staticmethod
    def _describe(reading: DeviceReading, localization: Localization) -> DevicePosition:
        position = localization.position
        return DevicePosition(
            id=reading.id,
            name=reading.name,
            level_id=reading.level_id,
            date=reading.date,
            outcome=localization.outcome,
            position=Coordinates(x=position.x, y=position.y) if position is not None else None,
            room=localization.room,
        )


def build_signal_model(
    tx_power: Optional[float] = None,
    path_loss_exponent: Optional[float] = None,
    scale: Optional[float] = None,
) -> SignalModel:
    settings = get_settings()
    return SignalModel(
        tx_power=settings.tx_power if tx_power is None else tx_power,
        path_loss_exponent=(
            settings.path_loss_exponent if path_loss_exponent is None else path_loss_exponent
        ),
        scale=settings.distance_scale if scale is None else scale,
    )


@lru_cache
def build_default_service() -> LocatorService:
    """Factory that wires the service with the default catalog and store."""
    settings = get_settings()
    return LocatorService(
        catalog=build_default_catalog(),
        store=build_default_store(),
        reducer=ReadingReducer(),
        pipeline=PositionPipeline(build_signal_model()),
        enforce_known_levels=settings.enforce_known_levels,
    )
