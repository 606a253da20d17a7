import logging
import random
import time
from typing import Callable, Optional

from app.core.errors import GraphQLOperationError, GraphQLTransportError
from app.core.graphql_client import GraphQLClient
from app.core.queries import CREATE_TELEMETRY, LIST_TELEMETRIES
from app.models.telemetry import TelemetryReading

logger = logging.getLogger(__name__)

TEMPERATURE_RANGE = (20.0, 30.0)
HUMIDITY_RANGE = (40.0, 90.0)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _uniform(rng: random.Random, low: float, high: float) -> float:
    # half-open [low, high); random.uniform may return high after rounding
    value = low + (high - low) * rng.random()
    return value if value < high else low


def synthetic_reading(
    device_id: str, owner: str, rng: random.Random, timestamp_ms: int
) -> dict:
    return {
        "device_id": device_id,
        "timestamp": timestamp_ms,
        "temperature": _uniform(rng, *TEMPERATURE_RANGE),
        "humidity": _uniform(rng, *HUMIDITY_RANGE),
        "owner": owner,
    }


class TelemetryService:
    def __init__(
        self,
        client: GraphQLClient,
        page_size: int = 100,
        rng: Optional[random.Random] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        self.client = client
        self.page_size = page_size
        self.rng = rng or random.Random()
        self.clock_ms = clock_ms or _now_ms

    async def list_telemetry(
        self, owner: str, device_id: Optional[str] = None
    ) -> list[TelemetryReading]:
        telemetry_filter = {"owner": {"eq": owner}}
        if device_id:
            telemetry_filter["device_id"] = {"eq": device_id}

        items = await self.client.execute_list(
            LIST_TELEMETRIES,
            "listTelemetries",
            {"filter": telemetry_filter},
            page_size=self.page_size,
            operation_name="ListTelemetries",
        )
        return [TelemetryReading.model_validate(item) for item in items]

    async def create_synthetic(
        self, device_id: str, owner: str
    ) -> Optional[TelemetryReading]:
        reading = synthetic_reading(device_id, owner, self.rng, self.clock_ms())

        try:
            body = await self.client.execute(
                CREATE_TELEMETRY, {"input": reading}, "CreateTelemetry"
            )
            if body.get("errors"):
                raise GraphQLOperationError("CreateTelemetry", body["errors"])
        except (GraphQLTransportError, GraphQLOperationError) as e:
            logger.error(f"Failed to create telemetry for {device_id}: {e}")
            return None

        created = (body.get("data") or {}).get("createTelemetry")
        if not created:
            logger.error(f"createTelemetry returned no record for {device_id}")
            return None
        return TelemetryReading.model_validate(created)
