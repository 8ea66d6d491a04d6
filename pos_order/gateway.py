"""Supabase table access over the PostgREST HTTP interface."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from pos_order.config import HTTP_TIMEOUT_SECONDS
from pos_order.models import (
    BackOfficeRecord,
    MenuCategory,
    MenuItem,
    OrderItemRecord,
    OrderRecord,
    PaymentMethod,
    money_str,
    utc_now_iso,
)
from pos_order.result import Err, Ok, Result

logger = logging.getLogger(__name__)

MENU_CATEGORIES = "menu_categories"
MENU_ITEMS = "menu_items"
ORDERS = "orders"
ORDER_ITEMS = "order_items"
PAYMENT_METHODS = "payment_methods"
KITCHEN_TICKETS = "kitchen_tickets"
EXPENSES = "expenses"
INCOME = "income"

# Columns accepted by the menu_items table; anything else is dropped before writes.
_MENU_ITEM_COLUMNS = (
    "id",
    "category_id",
    "name",
    "price",
    "cost_default",
    "image_url",
    "is_active",
    "branch_id",
    "created_at",
    "updated_at",
)


def auth_headers(api_key: str) -> dict[str, str]:
    return {"apikey": api_key, "Authorization": f"Bearer {api_key}"}


def _error_reason(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)


class SupabaseGateway:
    """Row-level list/create/update/delete against named backend tables.

    Reads degrade to an empty list on failure. Writes never raise for
    backend or transport failures; they return ``Ok(row)`` or ``Err(reason)``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        client: httpx.Client | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = auth_headers(api_key)

    def close(self) -> None:
        self._client.close()

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _send(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Result[Any]:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = self._client.request(method, self._url(table), params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("request_failed method=%s table=%s error=%r", method, table, exc)
            return Err(f"Could not reach backend: {exc}")

        if response.is_error:
            reason = _error_reason(response)
            logger.error(
                "request_rejected method=%s table=%s status=%s reason=%r",
                method,
                table,
                response.status_code,
                reason,
            )
            return Err(reason, response.status_code)

        if not response.content:
            return Ok(None)
        try:
            return Ok(response.json())
        except ValueError:
            logger.error(
                "response_not_json method=%s table=%s status=%s content_type=%r",
                method,
                table,
                response.status_code,
                response.headers.get("content-type"),
            )
            return Err("Unexpected response from backend", response.status_code)

    def fetch(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        columns: str = "*",
    ) -> Result[list[dict[str, Any]]]:
        """Select rows with ``eq`` filters, returning the result value."""
        params = {"select": columns}
        for column, value in (filters or {}).items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[column] = f"eq.{value}"
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        result = self._send("GET", table, params=params)
        if not result.ok:
            return result
        if result.value is None:
            return Ok([])
        if not isinstance(result.value, list):
            logger.error("select_not_a_list table=%s type=%s", table, type(result.value).__name__)
            return Err(f"Unexpected response from {table}")
        return Ok(result.value)

    def list(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        result = self.fetch(table, filters=filters, order=order, descending=descending)
        if not result.ok:
            logger.warning("list_degraded table=%s reason=%r", table, str(result))
            return []
        return result.value

    def create(self, table: str, record: dict[str, Any]) -> Result[dict[str, Any]]:
        result = self._send("POST", table, json=[record], prefer="return=representation")
        return self._first_row(table, result)

    def update(self, table: str, row_id: str, partial: dict[str, Any]) -> Result[dict[str, Any]]:
        result = self._send(
            "PATCH",
            table,
            params={"id": f"eq.{row_id}"},
            json=partial,
            prefer="return=representation",
        )
        return self._first_row(table, result)

    def delete(self, table: str, row_id: str) -> Result[None]:
        result = self._send("DELETE", table, params={"id": f"eq.{row_id}"})
        if not result.ok:
            return result
        return Ok(None)

    def _first_row(self, table: str, result: Result[Any]) -> Result[dict[str, Any]]:
        if not result.ok:
            return result
        rows = result.value
        if isinstance(rows, list):
            if not rows:
                return Err(f"No row returned from {table}")
            return Ok(rows[0])
        if isinstance(rows, dict):
            return Ok(rows)
        return Err(f"Unexpected response from {table}")

    # Menu categories

    def list_categories(self) -> list[MenuCategory]:
        rows = self.list(MENU_CATEGORIES, filters={"is_active": True}, order="display_order")
        return [MenuCategory.from_row(row) for row in rows]

    def create_category(self, category: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.create(MENU_CATEGORIES, category)

    def update_category(self, category_id: str, updates: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.update(MENU_CATEGORIES, category_id, updates)

    # Menu items

    def list_menu_items(self) -> list[MenuItem]:
        rows = self.list(MENU_ITEMS, filters={"is_active": True})
        return [MenuItem.from_row(row) for row in rows]

    def create_menu_item(self, item: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.create(MENU_ITEMS, _menu_item_columns(item, include_id=True))

    def update_menu_item(self, item_id: str, updates: dict[str, Any]) -> Result[dict[str, Any]]:
        payload = _menu_item_columns(updates, include_id=False)
        payload.setdefault("updated_at", utc_now_iso())
        return self.update(MENU_ITEMS, item_id, payload)

    # Orders

    def list_orders(self) -> list[OrderRecord]:
        rows = self.list(ORDERS, order="created_at", descending=True)
        return [OrderRecord.from_row(row) for row in rows]

    def create_order(self, order: OrderRecord) -> Result[dict[str, Any]]:
        logger.info("create_order order_no=%s id=%s", order.order_no, order.id)
        return self.create(ORDERS, order.to_row())

    def update_order(self, order_id: str, updates: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.update(ORDERS, order_id, updates)

    def delete_order(self, order_id: str) -> Result[None]:
        return self.delete(ORDERS, order_id)

    # Order items

    def list_order_items(self, order_id: str) -> list[OrderItemRecord]:
        rows = self.list(ORDER_ITEMS, filters={"order_id": order_id})
        return [OrderItemRecord.from_row(row) for row in rows]

    def create_order_item(self, item: OrderItemRecord) -> Result[dict[str, Any]]:
        logger.info("create_order_item order_id=%s item_id=%s qty=%s", item.order_id, item.item_id, item.qty)
        return self.create(ORDER_ITEMS, item.to_row())

    def delete_order_item(self, order_item_id: str) -> Result[None]:
        return self.delete(ORDER_ITEMS, order_item_id)

    # Payment methods

    def list_payment_methods(self) -> list[PaymentMethod]:
        rows = self.list(PAYMENT_METHODS, filters={"is_active": True}, order="display_order")
        return [PaymentMethod.from_row(row) for row in rows]

    def create_payment_method(self, method: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.create(PAYMENT_METHODS, method)

    def update_payment_method(self, method_id: str, updates: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.update(PAYMENT_METHODS, method_id, updates)

    # Back office

    def list_kitchen_tickets(self) -> list[BackOfficeRecord]:
        return _back_office(self.list(KITCHEN_TICKETS, order="created_at", descending=True))

    def create_kitchen_ticket(self, ticket: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.create(KITCHEN_TICKETS, ticket)

    def update_kitchen_ticket(self, ticket_id: str, updates: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.update(KITCHEN_TICKETS, ticket_id, updates)

    def list_expenses(self) -> list[BackOfficeRecord]:
        return _back_office(self.list(EXPENSES, order="created_at", descending=True))

    def create_expense(self, expense: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.create(EXPENSES, expense)

    def list_income(self) -> list[BackOfficeRecord]:
        return _back_office(self.list(INCOME, order="created_at", descending=True))

    def create_income(self, income: dict[str, Any]) -> Result[dict[str, Any]]:
        return self.create(INCOME, income)


def _menu_item_columns(item: dict[str, Any], include_id: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for column in _MENU_ITEM_COLUMNS:
        if column == "id" and not include_id:
            continue
        if column not in item:
            continue
        value = item[column]
        if column in {"price", "cost_default"} and value is not None:
            value = money_str(value) if not isinstance(value, (int, float, str)) else value
        payload[column] = value
    return payload


def _back_office(rows: Iterable[dict[str, Any]]) -> list[BackOfficeRecord]:
    return [BackOfficeRecord.from_row(row) for row in rows]
