from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Mapping, Optional, Tuple, Union

from app.schemas import DeviceReading, ReadingValidationError, WriteStatus, parse_device_reading
from settings import get_settings

logger = logging.getLogger(__name__)

ReadingInput = Union[DeviceReading, Mapping[str, Any]]


class ReadingStore:
    """Insertion-ordered log of device readings.

    Writers are serialized by a lock and publish a new tuple on every change, so
    readers always iterate over an immutable snapshot without locking.
    """

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._records: Tuple[DeviceReading, ...] = ()
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, reading: ReadingInput) -> DeviceReading:
        """Add a reading even if one with the same device id already exists."""
        record = self._validate(reading)
        with self._lock:
            self._records = self._records + (record,)
            self._persist()
        logger.debug(
            "Appended device reading",
            extra={
                "device_id": record.id,
                "level_id": record.level_id,
                "status": WriteStatus.created.value,
            },
        )
        return record

    def upsert(self, reading: ReadingInput) -> WriteStatus:
        """Replace the first record with the same device id, or append a new one.

        Later duplicates of the id are left untouched and the replaced record
        keeps its place in the log. The level id plays no part in matching.
        """
        record = self._validate(reading)
        with self._lock:
            records = list(self._records)
            for index, existing in enumerate(records):
                if existing.id == record.id:
                    records[index] = record
                    status = WriteStatus.updated
                    break
            else:
                records.append(record)
                status = WriteStatus.created
            self._records = tuple(records)
            self._persist()
        logger.debug(
            "Upserted device reading",
            extra={
                "device_id": record.id,
                "level_id": record.level_id,
                "status": status.value,
            },
        )
        return status

    def all(self) -> Tuple[DeviceReading, ...]:
        return self._records

    def filter_by_level(self, level_id: str) -> Tuple[DeviceReading, ...]:
        return tuple(record for record in self._records if record.level_id == level_id)

    def __len__(self) -> int:
        return len(self._records)

    @staticmethod
    def _validate(reading: ReadingInput) -> DeviceReading:
        try:
            return parse_device_reading(reading)
        except ReadingValidationError as exc:
            logger.warning("Rejected device reading", extra={"reason": str(exc)})
            raise

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [record.model_dump(mode="json", by_alias=True) for record in self._records]
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = []

        records = []
        for payload in data:
            try:
                records.append(parse_device_reading(payload))
            except ReadingValidationError as exc:
                logger.warning("Skipping stored device reading", extra={"reason": str(exc)})
        self._records = tuple(records)
        logger.info(
            "Loaded device readings from disk",
            extra={"record_count": len(self._records)},
        )


@lru_cache
def build_default_store(path: Optional[str] = None) -> ReadingStore:
    settings = get_settings()
    store_path = settings.readings_persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return ReadingStore(persistence_path=persistence)
