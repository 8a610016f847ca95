"""Tests for the component API client and its query cache."""

import json
import uuid
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from roome.client import ComponentClient, ComponentRequestError, QueryCache
from roome.rendering.tracking import UsageRecord


def component_json(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "name": "sale-banner",
        "displayName": "Sale Banner",
        "description": None,
        "category": "banner",
        "componentType": "banner",
        "config": {"type": "info"},
        "template": None,
        "styles": None,
        "interactions": None,
        "responsive": None,
        "isActive": True,
        "isPublic": True,
        "usageCount": 0,
        "version": 1,
        "createdBy": None,
        "updatedBy": None,
        "createdAt": "2026-10-01T12:00:00Z",
        "updatedAt": "2026-10-01T12:00:00Z",
    }
    body.update(overrides)
    return body


Handler = Callable[[httpx.Request], httpx.Response]


def make_client(handler: Handler) -> tuple[ComponentClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = ComponentClient("http://api.test", transport=httpx.MockTransport(record))
    return client, requests


class TestQueryCache:
    """Tests for prefix invalidation."""

    def test_invalidate_prefix(self) -> None:
        cache = QueryCache()
        cache.set(("/api/ui-components", ()), ["all"])
        cache.set(("/api/ui-components", "abc"), "one")
        cache.set(("/api/ui-components", "abc", "analytics"), "stats")
        cache.set(("/api/ui-components/name", "promo"), "by-name")

        removed = cache.invalidate(("/api/ui-components",))

        assert removed == 3
        assert ("/api/ui-components/name", "promo") in cache
        assert len(cache) == 1

    def test_invalidate_exact_key_and_children(self) -> None:
        cache = QueryCache()
        cache.set(("/api/ui-components", "abc"), "one")
        cache.set(("/api/ui-components", "abc", "analytics"), "stats")
        cache.set(("/api/ui-components", "xyz"), "other")

        cache.invalidate(("/api/ui-components", "abc"))

        assert ("/api/ui-components", "xyz") in cache
        assert len(cache) == 1


class TestFetchComponent:
    """Tests for the descriptor query."""

    async def test_disabled_without_reference(self) -> None:
        client, requests = make_client(lambda r: httpx.Response(500))

        query = await client.fetch_component()

        assert query.enabled is False
        assert query.data is None
        assert query.error is None
        assert requests == []

    async def test_by_name(self) -> None:
        client, requests = make_client(lambda r: httpx.Response(200, json=component_json()))

        query = await client.fetch_component(name="sale-banner")

        assert query.error is None
        assert query.data is not None
        assert query.data.display_name == "Sale Banner"
        assert requests[0].url.path == "/api/ui-components/name/sale-banner"

    async def test_name_wins_over_id(self) -> None:
        client, requests = make_client(lambda r: httpx.Response(200, json=component_json()))

        await client.fetch_component(name="sale-banner", id=uuid.uuid4())

        assert requests[0].url.path == "/api/ui-components/name/sale-banner"

    async def test_by_id(self) -> None:
        component_id = uuid.uuid4()
        client, requests = make_client(
            lambda r: httpx.Response(200, json=component_json(id=str(component_id)))
        )

        query = await client.fetch_component(id=component_id)

        assert query.data is not None
        assert query.data.id == component_id
        assert requests[0].url.path == f"/api/ui-components/{component_id}"

    async def test_empty_name_falls_back_to_id(self) -> None:
        component_id = uuid.uuid4()
        client, requests = make_client(
            lambda r: httpx.Response(200, json=component_json(id=str(component_id)))
        )

        query = await client.fetch_component(name="", id=component_id)

        assert query.data is not None
        assert requests[0].url.path == f"/api/ui-components/{component_id}"

    async def test_empty_name_without_id_is_disabled(self) -> None:
        client, requests = make_client(lambda r: httpx.Response(500))

        query = await client.fetch_component(name="")

        assert query.enabled is False
        assert requests == []

    async def test_error_is_captured(self) -> None:
        client, _ = make_client(
            lambda r: httpx.Response(
                404,
                json={"error": {"code": "not_found", "message": "Component 'x' not found"}},
            )
        )

        query = await client.fetch_component(name="x")

        assert query.data is None
        assert query.error == "Component 'x' not found"

    async def test_transport_error_is_captured(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(fail)
        query = await client.fetch_component(name="x")

        assert query.data is None
        assert query.error == "connection refused"

    async def test_cached(self) -> None:
        client, requests = make_client(lambda r: httpx.Response(200, json=component_json()))

        await client.fetch_component(name="sale-banner")
        await client.fetch_component(name="sale-banner")

        assert len(requests) == 1


class TestReadsAndWrites:
    """Tests for listing, analytics and mutations."""

    async def test_list_sends_filters(self) -> None:
        client, requests = make_client(lambda r: httpx.Response(200, json=[component_json()]))

        rows = await client.list_components(category="banner", is_active=True)

        assert len(rows) == 1
        assert requests[0].url.params["category"] == "banner"
        assert requests[0].url.params["isActive"] == "true"
        assert "isPublic" not in requests[0].url.params

    async def test_non_2xx_raises(self) -> None:
        client, _ = make_client(lambda r: httpx.Response(500, text="oops"))

        with pytest.raises(ComponentRequestError) as exc_info:
            await client.list_components()

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Request failed with status 500"

    async def test_analytics(self) -> None:
        component_id = uuid.uuid4()
        stats = {
            "componentId": str(component_id),
            "totalUsage": 4,
            "uniqueUsers": 2,
            "avgLoadTime": 12.5,
            "topPages": ["/home"],
            "recentUsage": 3,
            "usageCount": 4,
        }
        client, requests = make_client(lambda r: httpx.Response(200, json=stats))

        result = await client.get_analytics(component_id)

        assert result.total_usage == 4
        assert result.top_pages == ["/home"]
        assert requests[0].url.path == f"/api/ui-components/{component_id}/analytics"

    async def test_create_invalidates_listing(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(201, json=component_json(name="new-one"))
            return httpx.Response(200, json=[])

        client, requests = make_client(handler)

        await client.list_components()
        await client.list_components()
        await client.create_component({"name": "new-one"})
        await client.list_components()

        assert [r.method for r in requests] == ["GET", "POST", "GET"]

    async def test_update_invalidates_id_key(self) -> None:
        component_id = uuid.uuid4()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=component_json(id=str(component_id)))

        client, requests = make_client(handler)

        await client.get_component(component_id)
        await client.update_component(component_id, {"displayName": "Renamed"})
        await client.get_component(component_id)

        assert [r.method for r in requests] == ["GET", "PUT", "GET"]
        assert json.loads(requests[1].content) == {"displayName": "Renamed"}

    async def test_update_refreshes_name_lookup(self) -> None:
        component_id = uuid.uuid4()
        state = {"isActive": True}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                state.update(json.loads(request.content))
            return httpx.Response(200, json=component_json(id=str(component_id), **state))

        client, requests = make_client(handler)

        first = await client.fetch_component(name="sale-banner")
        await client.update_component(component_id, {"isActive": False})
        second = await client.fetch_component(name="sale-banner")

        assert [r.method for r in requests] == ["GET", "PUT", "GET"]
        assert first.data is not None and first.data.is_active is True
        assert second.data is not None and second.data.is_active is False

    async def test_delete_refreshes_name_lookup(self) -> None:
        component_id = uuid.uuid4()
        deleted = False

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal deleted
            if request.method == "DELETE":
                deleted = True
                return httpx.Response(200, json={"message": "Component deleted successfully"})
            if deleted:
                return httpx.Response(
                    404,
                    json={"error": {"code": "not_found", "message": "Component not found"}},
                )
            return httpx.Response(200, json=component_json(id=str(component_id)))

        client, _ = make_client(handler)

        await client.fetch_component(name="sale-banner")
        await client.delete_component(component_id)
        query = await client.fetch_component(name="sale-banner")

        assert query.data is None
        assert query.error == "Component not found"

    async def test_create_clears_cached_missing_name(self) -> None:
        created = False

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal created
            if request.method == "POST":
                created = True
                return httpx.Response(201, json=component_json())
            if not created:
                return httpx.Response(404, json={"error": {"message": "Component not found"}})
            return httpx.Response(200, json=component_json())

        client, _ = make_client(handler)

        missing = await client.fetch_component(name="sale-banner")
        await client.create_component({"name": "sale-banner"})
        found = await client.fetch_component(name="sale-banner")

        assert missing.error == "Component not found"
        assert found.data is not None

    async def test_delete(self) -> None:
        component_id = uuid.uuid4()
        client, requests = make_client(
            lambda r: httpx.Response(200, json={"message": "Component deleted successfully"})
        )

        await client.delete_component(component_id)

        assert requests[0].method == "DELETE"
        assert requests[0].url.path == f"/api/ui-components/{component_id}"

    async def test_track_usage_posts_payload(self) -> None:
        component_id = uuid.uuid4()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                201,
                json={
                    "id": str(uuid.uuid4()),
                    "componentId": str(component_id),
                    "userId": None,
                    "page": "/home",
                    "context": {},
                    "performanceMetrics": {"loadTime": 5.0},
                    "userAgent": None,
                    "createdAt": "2026-10-01T12:00:00Z",
                },
            )

        client, requests = make_client(handler)

        usage = await client.track_usage(
            UsageRecord(component_id=component_id, page="/home", load_time=5.0)
        )

        assert usage.component_id == component_id
        body = json.loads(requests[0].content)
        assert body["componentId"] == str(component_id)
        assert body["performanceMetrics"] == {"loadTime": 5.0}

    async def test_bearer_token(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[])

        async with ComponentClient(
            "http://api.test", token="abc", transport=httpx.MockTransport(handler)
        ) as client:
            await client.list_components()

        assert requests[0].headers["Authorization"] == "Bearer abc"
