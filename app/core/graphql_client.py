from typing import Any, Optional

import httpx

from app.config.settings import Settings
from app.core.errors import GraphQLOperationError, GraphQLTransportError


class GraphQLClient:
    """Thin async client for an AppSync style GraphQL endpoint.

    Every request carries its values as GraphQL variables. Network failures,
    timeouts, non-2xx answers without an error list and undecodable bodies raise
    ``GraphQLTransportError``; GraphQL ``errors`` are left in the returned body
    for the caller to interpret.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self._http = httpx.AsyncClient(
            headers={
                "x-api-key": api_key,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def execute(
        self,
        query: str,
        variables: Optional[dict] = None,
        operation_name: Optional[str] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": query, "variables": variables or {}}
        if operation_name:
            payload["operationName"] = operation_name

        name = operation_name or "GraphQL request"

        try:
            response = await self._http.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            raise GraphQLTransportError(f"{name} failed: {e}") from e
        except (TypeError, ValueError) as e:
            # variables that cannot be encoded as JSON, e.g. NaN or Infinity
            raise GraphQLTransportError(f"{name} could not be encoded: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise GraphQLTransportError(
                f"{name} returned invalid JSON (HTTP {response.status_code})"
            ) from e

        if not isinstance(body, dict):
            raise GraphQLTransportError(f"{name} returned unexpected body")
        # AppSync reports request level errors with a 4xx and an errors list
        if response.is_error and not body.get("errors"):
            raise GraphQLTransportError(f"{name} failed with HTTP {response.status_code}")

        return body

    async def execute_list(
        self,
        query: str,
        root_field: str,
        variables: Optional[dict] = None,
        page_size: int = 100,
        operation_name: Optional[str] = None,
    ) -> list[dict]:
        items: list[dict] = []
        next_token = None

        while True:
            page_variables = dict(variables or {})
            page_variables["limit"] = page_size
            page_variables["nextToken"] = next_token

            body = await self.execute(query, page_variables, operation_name)
            if body.get("errors"):
                raise GraphQLOperationError(operation_name or root_field, body["errors"])

            page = (body.get("data") or {}).get(root_field) or {}
            items.extend(item for item in page.get("items") or [] if item)

            next_token = page.get("nextToken")
            if not next_token:
                return items

    async def close(self) -> None:
        await self._http.aclose()


def create_graphql_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> GraphQLClient:
    return GraphQLClient(
        settings.api_endpoint,
        settings.api_key,
        timeout=settings.api_timeout_seconds,
        transport=transport,
    )
