import json
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_graphql_client
from app.core.graphql_client import GraphQLClient
from app.main import app


def _matches(record: dict, filters: dict) -> bool:
    for field, condition in (filters or {}).items():
        if record.get(field) != condition.get("eq"):
            return False
    return True


def _page(items: list, variables: dict) -> dict:
    start = int(variables.get("nextToken") or 0)
    limit = variables.get("limit") or 100
    end = start + limit
    return {
        "items": items[start:end],
        "nextToken": str(end) if end < len(items) else None,
    }


class FakeAppSync:
    """In-memory stand-in for the managed GraphQL backend."""

    def __init__(self):
        self.devices: dict[str, dict] = {}
        self.telemetry: list[dict] = []
        self.requests: list[dict] = []
        self.unreachable: set[str] = set()
        self.rejections: dict[str, list] = {}
        self.resolvers = {
            "GetDeviceOwner": self.get_device_owner,
            "CreateTelemetry": self.create_telemetry,
            "ListDevices": self.list_devices,
            "ListTelemetries": self.list_telemetries,
            "CreateDevices": self.create_device,
            "DeleteDevices": self.delete_device,
        }

    def add_device(self, device_id: str, owner: str, status: str = None) -> dict:
        device = {"device_id": device_id, "owner": owner, "status": status}
        self.devices[device_id] = device
        return device

    def add_reading(self, device_id: str, timestamp, owner: str = "alice", **values):
        reading = {
            "device_id": device_id,
            "timestamp": timestamp,
            "temperature": values.get("temperature", 22.0),
            "humidity": values.get("humidity", 50.0),
            "owner": owner,
        }
        self.telemetry.append(reading)
        return reading

    @property
    def operations(self) -> list[str]:
        return [r.get("operationName") for r in self.requests]

    def last_request(self, operation: str) -> dict:
        return [r for r in self.requests if r.get("operationName") == operation][-1]

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        operation = payload.get("operationName")

        if operation in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if operation in self.rejections:
            return httpx.Response(
                200, json={"data": None, "errors": self.rejections[operation]}
            )

        data = self.resolvers[operation](payload.get("variables") or {})
        return httpx.Response(200, json={"data": data})

    def get_device_owner(self, variables: dict) -> dict:
        device = self.devices.get(variables["device_id"])
        return {"getDevices": {"owner": device["owner"]} if device else None}

    def create_telemetry(self, variables: dict) -> dict:
        record = dict(variables["input"])
        record.setdefault("createdAt", "2024-05-01T12:00:00.000Z")
        record.setdefault("updatedAt", record["createdAt"])
        self.telemetry.append(record)
        return {"createTelemetry": record}

    def list_devices(self, variables: dict) -> dict:
        items = [
            d for d in self.devices.values() if _matches(d, variables.get("filter"))
        ]
        return {"listDevices": _page(items, variables)}

    def list_telemetries(self, variables: dict) -> dict:
        items = [t for t in self.telemetry if _matches(t, variables.get("filter"))]
        return {"listTelemetries": _page(items, variables)}

    def create_device(self, variables: dict) -> dict:
        values = variables["input"]
        return {"createDevices": self.add_device(values["device_id"], values["owner"])}

    def delete_device(self, variables: dict) -> dict:
        device_id = variables["input"]["device_id"]
        self.devices.pop(device_id, None)
        return {"deleteDevices": {"device_id": device_id}}


@pytest.fixture
def backend():
    return FakeAppSync()


@pytest.fixture
def graphql_client(backend):
    return GraphQLClient(
        "http://appsync.test/graphql",
        "test-api-key",
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def client(graphql_client):
    app.dependency_overrides[get_graphql_client] = lambda: graphql_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    return {"X-User-Id": "alice", "X-User-Login": "alice@example.com"}


@pytest.fixture
def unique_id():
    return uuid.uuid4().hex[:8]
