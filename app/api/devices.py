"""Device routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status

from ..resources import DeviceResource
from ..schemas import DeviceCreate, DeviceHealth, DeviceSettingsUpdate
from .deps import DATA_SOURCE_HEADER, get_device_resource

router = APIRouter(prefix="/devices", tags=["devices"])


@router.get("")
async def list_devices(
    response: Response, devices: DeviceResource = Depends(get_device_resource)
) -> list[dict[str, Any]]:
    """Return every device, from the store or the in-memory dataset."""

    result = await devices.list_devices()
    response.headers[DATA_SOURCE_HEADER] = result.source
    return result.records


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_device(
    payload: DeviceCreate, devices: DeviceResource = Depends(get_device_resource)
) -> list[dict[str, Any]]:
    """Register a device; the created record is returned in a list."""

    return await devices.create_device(payload)


@router.get("/health", response_model=DeviceHealth)
async def device_health(
    response: Response, devices: DeviceResource = Depends(get_device_resource)
) -> DeviceHealth:
    health, source = await devices.health()
    response.headers[DATA_SOURCE_HEADER] = source
    return health


@router.put("/{device_id}/settings")
async def update_device_settings(
    device_id: str,
    payload: DeviceSettingsUpdate,
    devices: DeviceResource = Depends(get_device_resource),
) -> Any:
    """Upsert the settings row for ``device_id``."""

    return await devices.update_settings(device_id, payload)


__all__ = ["router"]
