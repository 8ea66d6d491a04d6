from __future__ import annotations

import json
from collections import Counter
from typing import Any

import httpx
import pytest

from pos_order.gateway import SupabaseGateway
from pos_order.storage import ImageStorage

BASE_URL = "https://test.supabase.co"
API_KEY = "anon-key"


def _param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FakeBackend:
    """In-memory PostgREST + storage endpoints served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.objects: dict[str, bytes] = {}
        self.calls: Counter[tuple[str, str]] = Counter()
        self.requests: list[httpx.Request] = []
        self._failures: dict[tuple[str, str], set[int]] = {}
        self.offline = False
        self._canned: dict[tuple[str, str], httpx.Response] = {}

    def fail(self, method: str, table: str, on_call: int = 1) -> None:
        """Make the Nth ``method`` request against ``table`` return HTTP 500."""
        self._failures.setdefault((method, table), set()).add(on_call)

    def respond(self, method: str, table: str, response: httpx.Response) -> None:
        """Serve ``response`` for every ``method`` request against ``table``."""
        self._canned[(method, table)] = response

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("backend unreachable", request=request)

        parts = request.url.path.strip("/").split("/")
        if parts[:2] == ["storage", "v1"]:
            return self._storage(request, parts[2:])
        assert parts[:2] == ["rest", "v1"], request.url.path
        table = parts[2]

        key = (request.method, table)
        self.calls[key] += 1
        if key in self._canned:
            return self._canned[key]
        if self.calls[key] in self._failures.get(key, set()):
            return httpx.Response(500, json={"message": f"{table} write failed"})

        params = dict(request.url.params)
        if request.method == "GET":
            return httpx.Response(200, json=self._select(table, params))
        if request.method == "POST":
            body = json.loads(request.content)
            self.rows(table).extend(body)
            return httpx.Response(201, json=body)
        if request.method == "PATCH":
            matched = self._match(table, params)
            for row in matched:
                row.update(json.loads(request.content))
            return httpx.Response(200, json=matched)
        if request.method == "DELETE":
            matched = self._match(table, params)
            self.tables[table] = [row for row in self.rows(table) if row not in matched]
            return httpx.Response(204)
        return httpx.Response(405)

    def _match(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        filters = {
            column: value[len("eq."):]
            for column, value in params.items()
            if column not in {"select", "order"} and value.startswith("eq.")
        }
        return [
            row
            for row in self.rows(table)
            if all(_param(row.get(column)) == value for column, value in filters.items())
        ]

    def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        rows = self._match(table, params)
        order = params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows = sorted(rows, key=lambda row: row.get(column) or "", reverse=direction == "desc")
        return rows

    def _storage(self, request: httpx.Request, parts: list[str]) -> httpx.Response:
        # object/<bucket>/<path...>
        bucket_path = "/".join(parts[2:])
        if request.method == "POST":
            if request.headers.get("x-deny") or bucket_path.startswith("forbidden/"):
                return httpx.Response(
                    403, json={"message": "new row violates row-level security policy"}
                )
            self.objects[bucket_path] = request.content
            return httpx.Response(200, json={"Key": f"{parts[1]}/{bucket_path}"})
        if request.method == "DELETE":
            prefixes = json.loads(request.content)["prefixes"]
            for prefix in prefixes:
                self.objects.pop(prefix, None)
            return httpx.Response(200, json=[{"name": p} for p in prefixes])
        return httpx.Response(405)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def http_client(backend: FakeBackend) -> httpx.Client:
    client = httpx.Client(transport=httpx.MockTransport(backend.handler))
    yield client
    client.close()


@pytest.fixture
def gateway(http_client: httpx.Client) -> SupabaseGateway:
    return SupabaseGateway(BASE_URL, API_KEY, client=http_client)


@pytest.fixture
def storage(http_client: httpx.Client) -> ImageStorage:
    return ImageStorage(BASE_URL, API_KEY, bucket="POS", client=http_client)


@pytest.fixture
def catalog(backend: FakeBackend) -> FakeBackend:
    """Two categories, three items (one inactive) and two payment methods."""
    backend.tables["menu_categories"] = [
        {"id": "drinks", "name": "Drinks", "display_order": 2, "is_active": True},
        {"id": "food", "name": "Food", "display_order": 1, "is_active": True},
        {"id": "old", "name": "Old", "display_order": 3, "is_active": False},
    ]
    backend.tables["menu_items"] = [
        {"id": "pad-thai", "category_id": "food", "name": "Pad Thai", "price": 50, "cost_default": 20, "is_active": True},
        {"id": "iced-tea", "category_id": "drinks", "name": "Iced Tea", "price": "30.00", "cost_default": None, "is_active": True},
        {"id": "green-curry", "category_id": "food", "name": "Green Curry", "price": 80.5, "is_active": True},
        {"id": "retired", "category_id": "food", "name": "Retired Dish", "price": 10, "is_active": False},
    ]
    backend.tables["payment_methods"] = [
        {"id": "qr", "name": "QR PromptPay", "display_order": 2, "is_active": True},
        {"id": "cash", "name": "Cash", "display_order": 1, "is_active": True},
    ]
    return backend
