"""Typed access to ``/api/ui-components`` with query caching."""

import uuid
from typing import Any

import httpx
import structlog

from roome.client.cache import QueryCache, QueryKey
from roome.config import get_settings
from roome.rendering.component import ComponentQuery
from roome.rendering.tracking import UsageRecord
from roome.schemas.ui_component import (
    ComponentAnalytics,
    ComponentResponse,
    UsageResponse,
)

logger = structlog.get_logger(__name__)

COMPONENTS_PATH = "/api/ui-components"
BY_NAME_PATH = "/api/ui-components/name"


class ComponentRequestError(Exception):
    """A component API call failed (non-2xx response or transport error)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return f"Request failed with status {response.status_code}"


class ComponentClient:
    """Client for the component registry API.

    Reads are cached in a ``QueryCache`` under the same keys the frontend
    uses, and writes invalidate them. There is no retry policy.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: QueryCache | None = None,
    ):
        settings = get_settings()
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.components_api_url,
            timeout=timeout if timeout is not None else settings.components_request_timeout,
            headers=headers,
            transport=transport,
        )
        self.cache = cache if cache is not None else QueryCache()

    async def __aenter__(self) -> "ComponentClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("component_request_failed", method=method, path=path, error=str(e))
            raise ComponentRequestError(str(e) or type(e).__name__) from e

        if response.is_error:
            message = _error_message(response)
            logger.debug(
                "component_request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            raise ComponentRequestError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _cached(self, key: QueryKey, path: str, params: dict[str, Any] | None = None) -> Any:
        if key in self.cache:
            return self.cache.get(key)
        result = await self._request("GET", path, params=params)
        self.cache.set(key, result)
        return result

    async def fetch_component(
        self, *, name: str | None = None, id: uuid.UUID | None = None
    ) -> ComponentQuery:
        """Resolve a descriptor by name (preferred) or id. Never raises."""
        if not name and id is None:
            return ComponentQuery(enabled=False)
        try:
            if name:
                component = await self.get_component_by_name(name)
            elif id is not None:
                component = await self.get_component(id)
            else:
                return ComponentQuery(enabled=False)
        except ComponentRequestError as e:
            return ComponentQuery(error=e.message)
        return ComponentQuery(data=component)

    async def list_components(
        self,
        *,
        category: str | None = None,
        is_active: bool | None = None,
        is_public: bool | None = None,
    ) -> list[ComponentResponse]:
        params: dict[str, Any] = {}
        if category is not None:
            params["category"] = category
        if is_active is not None:
            params["isActive"] = str(is_active).lower()
        if is_public is not None:
            params["isPublic"] = str(is_public).lower()

        key = (COMPONENTS_PATH, tuple(sorted(params.items())))
        rows = await self._cached(key, COMPONENTS_PATH, params=params)
        return [ComponentResponse.model_validate(row) for row in rows]

    async def get_component(self, component_id: uuid.UUID) -> ComponentResponse:
        row = await self._cached(
            (COMPONENTS_PATH, str(component_id)), f"{COMPONENTS_PATH}/{component_id}"
        )
        return ComponentResponse.model_validate(row)

    async def get_component_by_name(self, name: str) -> ComponentResponse:
        row = await self._cached((BY_NAME_PATH, name), f"{BY_NAME_PATH}/{name}")
        return ComponentResponse.model_validate(row)

    async def get_analytics(self, component_id: uuid.UUID) -> ComponentAnalytics:
        stats = await self._cached(
            (COMPONENTS_PATH, str(component_id), "analytics"),
            f"{COMPONENTS_PATH}/{component_id}/analytics",
        )
        return ComponentAnalytics.model_validate(stats)

    async def create_component(self, payload: dict[str, Any]) -> ComponentResponse:
        row = await self._request("POST", COMPONENTS_PATH, json=payload)
        self.cache.invalidate((COMPONENTS_PATH,))
        self.cache.invalidate((BY_NAME_PATH,))
        return ComponentResponse.model_validate(row)

    async def update_component(
        self, component_id: uuid.UUID, payload: dict[str, Any]
    ) -> ComponentResponse:
        row = await self._request("PUT", f"{COMPONENTS_PATH}/{component_id}", json=payload)
        self.cache.invalidate((COMPONENTS_PATH,))
        self.cache.invalidate((COMPONENTS_PATH, str(component_id)))
        self.cache.invalidate((BY_NAME_PATH,))
        return ComponentResponse.model_validate(row)

    async def delete_component(self, component_id: uuid.UUID) -> None:
        await self._request("DELETE", f"{COMPONENTS_PATH}/{component_id}")
        self.cache.invalidate((COMPONENTS_PATH,))
        self.cache.invalidate((BY_NAME_PATH,))

    async def track_usage(self, record: UsageRecord) -> UsageResponse:
        """Post one usage event. Raises on failure; the tracker swallows."""
        row = await self._request(
            "POST", f"{COMPONENTS_PATH}/track-usage", json=record.to_payload()
        )
        return UsageResponse.model_validate(row)
