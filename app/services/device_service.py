import logging
from typing import Optional

from app.core.errors import GraphQLOperationError, GraphQLTransportError
from app.core.graphql_client import GraphQLClient
from app.core.queries import CREATE_DEVICE, DELETE_DEVICE, LIST_DEVICES
from app.models.device import Device

logger = logging.getLogger(__name__)


class DeviceService:
    def __init__(self, client: GraphQLClient, page_size: int = 100):
        self.client = client
        self.page_size = page_size

    async def list_devices(self, owner: str) -> list[Device]:
        items = await self.client.execute_list(
            LIST_DEVICES,
            "listDevices",
            {"filter": {"owner": {"eq": owner}}},
            page_size=self.page_size,
            operation_name="ListDevices",
        )
        return [Device.model_validate(item) for item in items]

    async def create_device(self, device_id: str, owner: str) -> Optional[Device]:
        device_id = device_id.strip()
        if not device_id:
            raise ValueError("device_id must not be empty")

        try:
            body = await self.client.execute(
                CREATE_DEVICE,
                {"input": {"device_id": device_id, "owner": owner}},
                "CreateDevices",
            )
            if body.get("errors"):
                raise GraphQLOperationError("CreateDevices", body["errors"])
        except (GraphQLTransportError, GraphQLOperationError) as e:
            logger.error(f"Failed to create device {device_id}: {e}")
            return None

        created = (body.get("data") or {}).get("createDevices")
        if not created:
            logger.error(f"createDevices returned no record for {device_id}")
            return None
        return Device.model_validate(created)

    async def delete_device(self, device_id: str) -> bool:
        try:
            body = await self.client.execute(
                DELETE_DEVICE, {"input": {"device_id": device_id}}, "DeleteDevices"
            )
            if body.get("errors"):
                raise GraphQLOperationError("DeleteDevices", body["errors"])
        except (GraphQLTransportError, GraphQLOperationError) as e:
            logger.error(f"Failed to delete device {device_id}: {e}")
            return False

        return True
