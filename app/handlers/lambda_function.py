"""AWS Lambda entry point for the IoT Core telemetry rule.

The rule invokes the function with the device payload itself. Events coming
through API Gateway or a function URL wrap it as a JSON string in ``body``.
"""

import asyncio
import json
import logging
from typing import Any

from app.config.settings import Settings, get_settings
from app.core.errors import IngestionError, InvalidPayload
from app.core.graphql_client import create_graphql_client
from app.core.redis_client import close_redis_client, create_redis_client
from app.services.ingestion_service import IngestionService
from app.storage.idempotency_store import IdempotencyStore

logger = logging.getLogger(__name__)


def unwrap_event(event: Any) -> Any:
    if isinstance(event, dict) and "device_id" not in event and "body" in event:
        body = event.get("body")
        if isinstance(body, str):
            try:
                return json.loads(body)
            except ValueError as e:
                raise InvalidPayload("Request body is not valid JSON") from e
        return body
    return event


async def handle_event(event: Any, settings: Settings) -> tuple[int, Any]:
    client = create_graphql_client(settings)
    redis_client = (
        create_redis_client(settings) if settings.idempotency_enabled else None
    )
    store = (
        IdempotencyStore(redis_client, settings.idempotency_ttl_seconds)
        if redis_client is not None
        else None
    )

    try:
        service = IngestionService(client, idempotency_store=store)
        record = await service.ingest(unwrap_event(event))
        return 200, record
    except IngestionError as e:
        return e.status_code, e.body
    finally:
        await client.close()
        if redis_client is not None:
            await close_redis_client(redis_client)


def lambda_handler(event, context):
    settings = get_settings()
    # the Lambda runtime installs its own root handler at WARNING
    logging.getLogger().setLevel(settings.log_level)

    status_code, body = asyncio.run(handle_event(event, settings))
    logger.info(f"Ingestion finished with status {status_code}")
    return {
        "statusCode": status_code,
        "body": json.dumps(body),
    }
