from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import (
    get_current_user,
    get_dashboard_service,
    get_device_service,
)
from app.models.dashboard import CurrentUser
from app.models.device import Device, DeviceCreate, DeviceDeleted
from app.services.dashboard_service import DashboardService
from app.services.device_service import DeviceService

router = APIRouter()


@router.get("", response_model=list[Device])
async def list_devices(
    user: CurrentUser = Depends(get_current_user),
    service: DeviceService = Depends(get_device_service),
):
    return await service.list_devices(user.user_id)


@router.post("", response_model=Device, status_code=201)
async def create_device(
    registration: DeviceCreate,
    user: CurrentUser = Depends(get_current_user),
    service: DeviceService = Depends(get_device_service),
):
    device = await service.create_device(registration.device_id, user.user_id)
    if not device:
        raise HTTPException(
            status_code=502, detail=f"Device {registration.device_id} was not created"
        )
    return device


@router.delete("/{device_id}", response_model=DeviceDeleted)
async def delete_device(
    device_id: str,
    selected: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.delete_device(user, device_id, selected)
