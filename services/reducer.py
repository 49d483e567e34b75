"""Reduction of a reading log to the latest reading per device."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from app.schemas import DeviceReading
from models.records import parse_timestamp


class ReadingReducer:
    """Pure reduction component that can be unit tested in isolation."""

    def latest_per_device(self, readings: Iterable[DeviceReading]) -> Dict[str, DeviceReading]:
        latest: Dict[str, DeviceReading] = {}
        latest_at: Dict[str, datetime] = {}

        for reading in readings:
            taken_at = parse_timestamp(reading.date)
            current = latest_at.get(reading.id)
            # Strictly later only: on equal timestamps the first record seen stays.
            if current is None or taken_at > current:
                latest[reading.id] = reading
                latest_at[reading.id] = taken_at

        return latest

    def roster(
        self,
        readings: Iterable[DeviceReading],
        search: Optional[str] = None,
    ) -> List[DeviceReading]:
        """Latest reading per device, sorted by name and optionally filtered.

        ``search`` is matched case-insensitively against device name and id.
        """
        devices = list(self.latest_per_device(readings).values())
        if search:
            needle = search.casefold()
            devices = [
                reading
                for reading in devices
                if needle in reading.name.casefold() or needle in reading.id.casefold()
            ]
        return sorted(devices, key=lambda reading: (reading.name.casefold(), reading.id))
