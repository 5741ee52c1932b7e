"""Alert routes, including responses and photo uploads."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from wildwatch.errors import ValidationError

from ..resources import AlertResource
from ..schemas import (
    AlertCreate,
    AlertResponseReceipt,
    AlertResponseRequest,
    PhotoUploadResult,
)
from ..uploads import ALERT_CATEGORY, MediaIngestor
from .deps import DATA_SOURCE_HEADER, get_alert_resource, get_media_ingestor

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("")
async def list_alerts(
    response: Response, alerts: AlertResource = Depends(get_alert_resource)
) -> list[dict[str, Any]]:
    """Return alerts, newest first."""

    result = await alerts.list_alerts()
    response.headers[DATA_SOURCE_HEADER] = result.source
    return result.records


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_alert(
    payload: AlertCreate, alerts: AlertResource = Depends(get_alert_resource)
) -> list[dict[str, Any]]:
    """Persist an alert. Requires a configured store."""

    return await alerts.create_alert(payload)


@router.post("/respond", response_model=AlertResponseReceipt)
async def respond_to_alert(
    payload: AlertResponseRequest, alerts: AlertResource = Depends(get_alert_resource)
) -> AlertResponseReceipt:
    """Dispatch a response team and mark the alert resolved."""

    return await alerts.respond(payload)


@router.post(
    "/{alert_id}/photo",
    response_model=PhotoUploadResult,
    response_model_exclude_none=True,
)
async def upload_alert_photo(
    alert_id: str,
    photo: UploadFile | None = File(default=None),
    alerts: AlertResource = Depends(get_alert_resource),
    media: MediaIngestor = Depends(get_media_ingestor),
) -> PhotoUploadResult:
    """Store an image and link it to the alert identified by ``alert_id``."""

    alert_id = alert_id.strip()
    if not alert_id:
        raise ValidationError("Alert ID is required", field="alert_id")
    if photo is None:
        raise ValidationError("Photo file is required", field="photo")

    # Read one byte past the limit so oversize files are detected without
    # buffering them whole.
    data = await photo.read(media.max_bytes + 1)
    stored = await media.store(
        ALERT_CATEGORY,
        data,
        filename=photo.filename,
        content_type=photo.content_type,
    )
    try:
        return await alerts.attach_photo(alert_id, stored.url)
    except Exception:
        media.discard(stored)
        raise


__all__ = ["router"]
