from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from app.api.dependencies import get_current_user, get_dashboard_service
from app.config.settings import Settings, get_settings
from app.models.dashboard import CurrentUser, DashboardView
from app.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("", response_model=DashboardView)
async def get_dashboard(
    selected: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.get_dashboard(user, selected)


@router.get("/stream")
async def stream_dashboard(
    selected: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
    settings: Settings = Depends(get_settings),
):
    async def events():
        async for view in service.observe(
            user,
            selected,
            interval_seconds=settings.observe_interval_seconds,
            limit=limit,
        ):
            yield f"data: {view.model_dump_json(by_alias=True)}\n\n"

    return StreamingResponse(events(), media_type="text/event-stream")
