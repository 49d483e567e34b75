"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from app.schemas import (
    AccessPoint,
    DevicePosition,
    DeviceReading,
    Level,
    MessageResponse,
    Room,
    WriteStatus,
)
from services.locator import LocatorService, build_default_service

router = APIRouter()


def get_service() -> LocatorService:
    return build_default_service()


def _level_query() -> Any:
    return Query(None, alias="levelId", description="Only return records on this level.")


@router.get("/levels", response_model=List[Level], summary="List building levels.")
async def list_levels(service: LocatorService = Depends(get_service)) -> List[Level]:
    return list(service.list_levels())


@router.get(
    "/access-points",
    response_model=List[AccessPoint],
    summary="List access points, optionally for one level.",
)
async def list_access_points(
    level_id: Optional[str] = _level_query(),
    service: LocatorService = Depends(get_service),
) -> List[AccessPoint]:
    return list(service.list_access_points(level_id or None))


@router.get("/rooms", response_model=List[Room], summary="List rooms, optionally for one level.")
async def list_rooms(
    level_id: Optional[str] = _level_query(),
    service: LocatorService = Depends(get_service),
) -> List[Room]:
    return list(service.list_rooms(level_id or None))


@router.get(
    "/device-readings",
    response_model=List[DeviceReading],
    summary="List stored device readings in insertion order.",
)
async def list_device_readings(
    level_id: Optional[str] = _level_query(),
    service: LocatorService = Depends(get_service),
) -> List[DeviceReading]:
    return list(service.list_readings(level_id or None))


@router.post(
    "/device-readings",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Append a device reading to the log.",
)
async def create_device_reading(
    payload: Any = Body(None),
    service: LocatorService = Depends(get_service),
) -> MessageResponse:
    try:
        service.submit_reading(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return MessageResponse(message="Device reading created")


@router.put(
    "/device-readings",
    response_model=MessageResponse,
    summary="Replace a device's first stored reading, or add it when unknown.",
    responses={status.HTTP_201_CREATED: {"model": MessageResponse}},
)
async def upsert_device_reading(
    response: Response,
    payload: Any = Body(None),
    service: LocatorService = Depends(get_service),
) -> MessageResponse:
    try:
        outcome = service.upsert_reading(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    if outcome is WriteStatus.created:
        response.status_code = status.HTTP_201_CREATED
        return MessageResponse(message="Device reading created")
    return MessageResponse(message="Device reading updated")


@router.get(
    "/devices",
    response_model=List[DeviceReading],
    summary="Latest reading of every device, sorted by name.",
)
async def list_devices(
    search: Optional[str] = Query(None, description="Case-insensitive match on name or id."),
    service: LocatorService = Depends(get_service),
) -> List[DeviceReading]:
    return service.devices(search=search)


@router.get(
    "/devices/{device_id}/position",
    response_model=DevicePosition,
    summary="Resolve a device's latest reading into a position.",
)
async def get_device_position(
    device_id: str,
    service: LocatorService = Depends(get_service),
) -> DevicePosition:
    try:
        return service.device_position(device_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc.args[0]),
        ) from exc


@router.get(
    "/device-positions",
    response_model=List[DevicePosition],
    summary="Resolve the latest reading of every device on a level.",
)
async def list_device_positions(
    level_id: str = Query(..., alias="levelId"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or id."),
    service: LocatorService = Depends(get_service),
) -> List[DevicePosition]:
    if not service.catalog.has_level(level_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Level {level_id!r} not found.",
        )
    return service.device_positions(level_id, search=search)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
