from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, Header, HTTPException, Request

from app.config.settings import Settings, get_settings
from app.core.graphql_client import GraphQLClient
from app.models.dashboard import CurrentUser
from app.services.dashboard_service import DashboardService
from app.services.device_service import DeviceService
from app.services.ingestion_service import IngestionService
from app.services.telemetry_service import TelemetryService
from app.storage.idempotency_store import IdempotencyStore


def get_graphql_client(request: Request) -> GraphQLClient:
    return request.app.state.graphql_client


def get_redis(request: Request) -> Optional[redis.Redis]:
    return getattr(request.app.state, "redis", None)


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_login: Optional[str] = Header(None),
) -> CurrentUser:
    """Identity forwarded by the authorizer in front of the API."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return CurrentUser(user_id=x_user_id, login_id=x_user_login)


def get_device_service(
    client: GraphQLClient = Depends(get_graphql_client),
    settings: Settings = Depends(get_settings),
) -> DeviceService:
    return DeviceService(client, page_size=settings.list_page_size)


def get_telemetry_service(
    client: GraphQLClient = Depends(get_graphql_client),
    settings: Settings = Depends(get_settings),
) -> TelemetryService:
    return TelemetryService(client, page_size=settings.list_page_size)


def get_dashboard_service(
    device_service: DeviceService = Depends(get_device_service),
    telemetry_service: TelemetryService = Depends(get_telemetry_service),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(
        device_service,
        telemetry_service,
        chart_max_points=settings.chart_max_points,
    )


def get_ingestion_service(
    client: GraphQLClient = Depends(get_graphql_client),
    redis_client: Optional[redis.Redis] = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> IngestionService:
    store = None
    if settings.idempotency_enabled and redis_client is not None:
        store = IdempotencyStore(redis_client, settings.idempotency_ttl_seconds)
    return IngestionService(client, idempotency_store=store)
