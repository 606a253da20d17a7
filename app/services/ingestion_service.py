import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from app.core.errors import (
    DuplicateEvent,
    GraphQLTransportError,
    MutationRejected,
    OwnerLookupFailed,
    WriteFailed,
)
from app.core.graphql_client import GraphQLClient
from app.core.queries import CREATE_TELEMETRY, GET_DEVICE_OWNER
from app.models.telemetry import TelemetryEvent
from app.storage.idempotency_store import IdempotencyStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_iso(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def dig(body: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(body, dict):
            return None
        body = body.get(key)
    return body


class IngestionService:
    """Forwards one device event into the GraphQL API.

    One owner lookup followed by one createTelemetry mutation, no retries.
    When an idempotency store is configured, an event whose
    ``(device_id, timestamp)`` was already claimed is rejected before any
    network call, and the claim is released again if the event fails.
    """

    def __init__(
        self,
        client: GraphQLClient,
        idempotency_store: Optional[IdempotencyStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.idempotency_store = idempotency_store
        self.clock = clock or _utc_now

    async def ingest(self, payload: Any) -> dict:
        logger.info(f"EVENT: {json.dumps(payload, default=str)}")

        event = TelemetryEvent.from_payload(payload)

        claimed_key = None
        if self.idempotency_store:
            if not await self.idempotency_store.claim(event.idempotency_key):
                logger.warning(
                    f"Duplicate event for {event.device_id} at {event.timestamp}"
                )
                raise DuplicateEvent()
            claimed_key = event.idempotency_key

        try:
            owner = await self.resolve_owner(event.device_id)
            return await self.write_telemetry(event, owner)
        except Exception:
            if claimed_key:
                await self.idempotency_store.release(claimed_key)
            raise

    async def resolve_owner(self, device_id: str) -> str:
        try:
            body = await self.client.execute(
                GET_DEVICE_OWNER, {"device_id": device_id}, "GetDeviceOwner"
            )
        except GraphQLTransportError as e:
            logger.error(f"Error fetching owner for {device_id}: {e}")
            raise OwnerLookupFailed() from e

        owner = dig(body, "data", "getDevices", "owner")
        if not owner or not isinstance(owner, str):
            logger.error(
                f"No owner found for device_id: {device_id} "
                f"(errors: {body.get('errors')})"
            )
            raise OwnerLookupFailed()

        return owner

    async def write_telemetry(self, event: TelemetryEvent, owner: str) -> dict:
        now = format_iso(self.clock())
        variables = {
            "input": {
                "device_id": event.device_id,
                "temperature": event.temperature,
                "humidity": event.humidity,
                "timestamp": event.timestamp,
                "owner": owner,
                "createdAt": now,
                "updatedAt": now,
            }
        }

        try:
            body = await self.client.execute(
                CREATE_TELEMETRY, variables, "CreateTelemetry"
            )
        except GraphQLTransportError as e:
            logger.error(f"Error creating telemetry for {event.device_id}: {e}")
            raise WriteFailed() from e

        errors = body.get("errors")
        if errors:
            logger.error(f"GraphQL errors: {errors}")
            raise MutationRejected(errors)

        record = dig(body, "data", "createTelemetry")
        if not record:
            logger.error(f"createTelemetry returned no record for {event.device_id}")
            raise WriteFailed()

        return record
