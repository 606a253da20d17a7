import asyncio
import logging
import time
from typing import AsyncIterator, Callable, Optional

from app.core.errors import GraphQLOperationError, GraphQLTransportError
from app.models.dashboard import CurrentUser, DashboardView
from app.models.device import Device, DeviceDeleted
from app.models.telemetry import TelemetryReading
from app.services.dashboard_views import build_dashboard, fallback_selection
from app.services.device_service import DeviceService
from app.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


class DashboardService:
    def __init__(
        self,
        device_service: DeviceService,
        telemetry_service: TelemetryService,
        chart_max_points: int = 20,
        clock_ms: Optional[Callable[[], float]] = None,
    ):
        self.device_service = device_service
        self.telemetry_service = telemetry_service
        self.chart_max_points = chart_max_points
        self.clock_ms = clock_ms or _now_ms

    async def get_dashboard(
        self, user: CurrentUser, selected: Optional[str] = None
    ) -> DashboardView:
        devices, readings = await asyncio.gather(
            self.device_service.list_devices(user.user_id),
            self.telemetry_service.list_telemetry(user.user_id),
        )
        return self._render(user, devices, readings, selected)

    async def observe(
        self,
        user: CurrentUser,
        selected: Optional[str] = None,
        interval_seconds: float = 2.0,
        limit: Optional[int] = None,
    ) -> AsyncIterator[DashboardView]:
        """Yield a fresh dashboard view every ``interval_seconds``.

        The two collections are refreshed independently: a failed poll of one
        keeps its previous snapshot while the other still updates.
        """
        devices: list[Device] = []
        readings: list[TelemetryReading] = []
        emitted = 0

        while True:
            device_result, telemetry_result = await asyncio.gather(
                self.device_service.list_devices(user.user_id),
                self.telemetry_service.list_telemetry(user.user_id),
                return_exceptions=True,
            )

            devices = self._take_snapshot("devices", device_result, devices)
            readings = self._take_snapshot("telemetry", telemetry_result, readings)

            yield self._render(user, devices, readings, selected)

            emitted += 1
            if limit is not None and emitted >= limit:
                return
            await asyncio.sleep(interval_seconds)

    async def delete_device(
        self, user: CurrentUser, device_id: str, selected: Optional[str] = None
    ) -> DeviceDeleted:
        try:
            devices = await self.device_service.list_devices(user.user_id)
        except (GraphQLTransportError, GraphQLOperationError) as e:
            logger.error(f"Failed to list devices before deleting {device_id}: {e}")
            devices = []
        accepted = await self.device_service.delete_device(device_id)
        return DeviceDeleted(
            device_id=device_id,
            accepted=accepted,
            selected=fallback_selection(devices, device_id, selected),
        )

    def _render(
        self,
        user: CurrentUser,
        devices: list[Device],
        readings: list[TelemetryReading],
        selected: Optional[str],
    ) -> DashboardView:
        return build_dashboard(
            user,
            devices,
            readings,
            selected,
            now_ms=self.clock_ms(),
            max_points=self.chart_max_points,
        )

    @staticmethod
    def _take_snapshot(name: str, result, previous: list) -> list:
        if isinstance(result, (GraphQLTransportError, GraphQLOperationError)):
            logger.error(f"Failed to refresh {name}: {result}")
            return previous
        if isinstance(result, BaseException):
            raise result
        return result
