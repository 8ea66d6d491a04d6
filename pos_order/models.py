"""Domain models for pos-order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert a backend numeric (int, float, str or None) to Decimal."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money_str(value: Decimal) -> str:
    """Serialize money for the backend without float rounding."""
    return str(value.quantize(Decimal("0.01")))


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class MenuCategory:
    """A menu category used to filter the menu."""

    id: str
    name: str
    display_order: int = 0
    is_active: bool = True

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> MenuCategory:
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            display_order=int(row.get("display_order") or 0),
            is_active=bool(row.get("is_active", True)),
        )


@dataclass(frozen=True)
class MenuItem:
    """A sellable menu item."""

    id: str
    category_id: str | None
    name: str
    price: Decimal
    cost_default: Decimal = ZERO
    image_url: str | None = None
    description: str | None = None
    is_active: bool = True
    branch_id: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> MenuItem:
        category_id = row.get("category_id")
        return cls(
            id=str(row["id"]),
            category_id=str(category_id) if category_id is not None else None,
            name=str(row.get("name") or ""),
            price=to_decimal(row.get("price")),
            cost_default=to_decimal(row.get("cost_default")),
            image_url=row.get("image_url") or None,
            description=row.get("description") or None,
            is_active=bool(row.get("is_active", True)),
            branch_id=row.get("branch_id"),
        )


@dataclass(frozen=True)
class PaymentMethod:
    """A payment method the cashier can pick at checkout."""

    id: str
    name: str
    display_order: int = 0
    is_active: bool = True

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PaymentMethod:
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            display_order=int(row.get("display_order") or 0),
            is_active=bool(row.get("is_active", True)),
        )


@dataclass
class OrderLine:
    """One draft line; name and prices are snapshots taken when first added."""

    item_id: str
    name: str
    unit_price: Decimal
    cost: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderRecord:
    """A persisted order header."""

    id: str
    order_no: str
    status: str
    subtotal: Decimal
    grand_total: Decimal
    payment_method: str
    branch_id: str
    cashier_id: str
    created_at: str
    updated_at: str

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_no": self.order_no,
            "status": self.status,
            "subtotal": money_str(self.subtotal),
            "grand_total": money_str(self.grand_total),
            "payment_method": self.payment_method,
            "branch_id": self.branch_id,
            "cashier_id": self.cashier_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> OrderRecord:
        return cls(
            id=str(row["id"]),
            order_no=str(row.get("order_no") or ""),
            status=str(row.get("status") or ""),
            subtotal=to_decimal(row.get("subtotal")),
            grand_total=to_decimal(row.get("grand_total")),
            payment_method=str(row.get("payment_method") or ""),
            branch_id=str(row.get("branch_id") or ""),
            cashier_id=str(row.get("cashier_id") or ""),
            created_at=str(row.get("created_at") or ""),
            updated_at=str(row.get("updated_at") or ""),
        )


@dataclass(frozen=True)
class OrderItemRecord:
    """A persisted order line."""

    id: str
    order_id: str
    item_id: str
    name: str
    qty: int
    unit_price: Decimal
    total_price: Decimal
    created_at: str

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "item_id": self.item_id,
            "name": self.name,
            "qty": self.qty,
            "unit_price": money_str(self.unit_price),
            "total_price": money_str(self.total_price),
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> OrderItemRecord:
        return cls(
            id=str(row["id"]),
            order_id=str(row.get("order_id") or ""),
            item_id=str(row.get("item_id") or ""),
            name=str(row.get("name") or ""),
            qty=int(row.get("qty") or 0),
            unit_price=to_decimal(row.get("unit_price")),
            total_price=to_decimal(row.get("total_price")),
            created_at=str(row.get("created_at") or ""),
        )


@dataclass
class BackOfficeRecord:
    """Loosely typed row for kitchen tickets, expenses and income."""

    id: str
    created_at: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> BackOfficeRecord:
        rest = {key: value for key, value in row.items() if key not in {"id", "created_at"}}
        return cls(id=str(row.get("id", "")), created_at=row.get("created_at"), fields=rest)
