from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_current_user,
    get_ingestion_service,
    get_telemetry_service,
)
from app.core.errors import InvalidPayload
from app.models.dashboard import CurrentUser
from app.models.telemetry import SyntheticTelemetryRequest, TelemetryReading
from app.services.ingestion_service import IngestionService
from app.services.telemetry_service import TelemetryService

router = APIRouter()


@router.post("/ingest")
async def ingest_event(
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
):
    try:
        payload = await request.json()
    except ValueError as e:
        raise InvalidPayload("Request body is not valid JSON") from e

    record = await service.ingest(payload)
    return JSONResponse(status_code=200, content=record)


@router.post("/synthetic", response_model=TelemetryReading, status_code=201)
async def create_synthetic_telemetry(
    body: SyntheticTelemetryRequest,
    user: CurrentUser = Depends(get_current_user),
    service: TelemetryService = Depends(get_telemetry_service),
):
    if not body.device_id:
        raise HTTPException(status_code=400, detail="No device selected")

    reading = await service.create_synthetic(body.device_id, user.user_id)
    if not reading:
        raise HTTPException(
            status_code=502, detail=f"Telemetry for {body.device_id} was not created"
        )
    return reading


@router.get("", response_model=list[TelemetryReading])
async def list_telemetry(
    device_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: TelemetryService = Depends(get_telemetry_service),
):
    return await service.list_telemetry(user.user_id, device_id)
