"""Read-only catalog of levels, access points and rooms."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.schemas import AccessPoint, Level, Room
from settings import get_settings

logger = logging.getLogger(__name__)


class CatalogDocument(BaseModel):
    """On-disk layout of a catalog file."""

    model_config = ConfigDict(populate_by_name=True)

    levels: List[Level] = Field(default_factory=list)
    access_points: List[AccessPoint] = Field(default_factory=list, alias="accessPoints")
    rooms: List[Room] = Field(default_factory=list)


class FloorCatalog:
    """Levels with their anchors and room geometry, loaded once and never mutated."""

    def __init__(
        self,
        levels: Iterable[Level],
        access_points: Iterable[AccessPoint],
        rooms: Iterable[Room],
    ) -> None:
        self._levels: Tuple[Level, ...] = tuple(levels)
        self._access_points: Tuple[AccessPoint, ...] = tuple(access_points)
        self._rooms: Tuple[Room, ...] = tuple(rooms)
        self._level_ids = frozenset(level.id for level in self._levels)
        self._check_references()

    def levels(self) -> Tuple[Level, ...]:
        return self._levels

    def get_level(self, level_id: str) -> Optional[Level]:
        for level in self._levels:
            if level.id == level_id:
                return level
        return None

    def has_level(self, level_id: str) -> bool:
        return level_id in self._level_ids

    def access_points(self, level_id: Optional[str] = None) -> Tuple[AccessPoint, ...]:
        if level_id is None:
            return self._access_points
        return tuple(ap for ap in self._access_points if ap.level_id == level_id)

    def rooms(self, level_id: Optional[str] = None) -> Tuple[Room, ...]:
        if level_id is None:
            return self._rooms
        return tuple(room for room in self._rooms if room.level_id == level_id)

    def _check_references(self) -> None:
        dangling = sorted(
            {
                f"{type(item).__name__} {item.id} -> {item.level_id}"
                for item in (*self._access_points, *self._rooms)
                if item.level_id not in self._level_ids
            }
        )
        if dangling:
            raise ValueError(f"Catalog references unknown levels: {', '.join(dangling)}")


def load_catalog(path: Path) -> FloorCatalog:
    document = CatalogDocument.model_validate(json.loads(path.read_text()))
    return FloorCatalog(
        levels=document.levels,
        access_points=document.access_points,
        rooms=document.rooms,
    )


def default_catalog() -> FloorCatalog:
    """Three-floor office building used when no catalog file is configured."""
    levels = [
        Level(id="L001", name="Ground Floor", floor_number=0),
        Level(id="L002", name="First Floor", floor_number=1),
        Level(id="L003", name="Second Floor", floor_number=2),
    ]
    access_points = [
        AccessPoint(id=ap_id, x=x, y=y, level_id=level_id)
        for ap_id, x, y, level_id in (
            ("AP000001", 100, 100, "L001"),
            ("AP000002", 100, 500, "L001"),
            ("AP000003", 600, 100, "L001"),
            ("AP000004", 600, 500, "L001"),
            ("AP000005", 1600, 300, "L001"),
            ("AP000006", 100, 100, "L002"),
            ("AP000007", 100, 500, "L002"),
            ("AP000008", 850, 100, "L002"),
            ("AP000009", 850, 500, "L002"),
            ("AP000010", 1600, 100, "L002"),
            ("AP000011", 1600, 500, "L002"),
            ("AP000012", 100, 100, "L003"),
            ("AP000013", 100, 500, "L003"),
            ("AP000014", 1000, 300, "L003"),
            ("AP000015", 1400, 300, "L003"),
        )
    ]
    rooms = [
        Room(id=room_id, name=name, x=x, y=y, width=width, height=height, level_id=level_id)
        for room_id, name, x, y, width, height, level_id in (
            ("R001", "Pantry", 100, 100, 500, 400, "L001"),
            ("R002", "Meeting Room", 600, 100, 500, 400, "L001"),
            ("R003", "Office", 1100, 100, 500, 400, "L001"),
            ("R004", "Conference Room", 100, 100, 600, 400, "L002"),
            ("R005", "Executive Office", 700, 100, 400, 400, "L002"),
            ("R006", "Break Room", 1100, 100, 500, 400, "L002"),
            ("R007", "Training Room", 100, 500, 700, 300, "L002"),
            ("R008", "Server Room", 100, 100, 400, 400, "L003"),
            ("R009", "IT Office", 500, 100, 500, 400, "L003"),
            ("R010", "Storage", 1000, 100, 400, 400, "L003"),
        )
    ]
    return FloorCatalog(levels=levels, access_points=access_points, rooms=rooms)


@lru_cache
def build_default_catalog(path: Optional[str] = None) -> FloorCatalog:
    settings = get_settings()
    catalog_path = settings.catalog_path if path is None else path
    if not catalog_path:
        catalog = default_catalog()
    else:
        catalog = load_catalog(Path(catalog_path))
    logger.info(
        "Loaded floor catalog",
        extra={"record_count": len(catalog.levels())},
    )
    return catalog
