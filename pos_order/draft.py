"""In-memory order draft (the running cart)."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Iterable

from pos_order.models import ZERO, MenuItem, OrderLine


class QuantityChange(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class OrderDraft:
    """Lines in insertion order plus the catalog they are added from.

    Totals are properties over the current lines, so they are recomputed on
    every read and can never go stale after a mutation.
    """

    def __init__(self, menu_items: Iterable[MenuItem] = ()) -> None:
        self._menu: dict[str, MenuItem] = {}
        self._lines: list[OrderLine] = []
        self.discount: Decimal = ZERO
        self.set_menu(menu_items)

    def set_menu(self, menu_items: Iterable[MenuItem]) -> None:
        """Replace the catalog; existing lines keep their snapshots."""
        self._menu = {item.id: item for item in menu_items}

    @property
    def menu(self) -> list[MenuItem]:
        return list(self._menu.values())

    @property
    def lines(self) -> tuple[OrderLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines), ZERO)

    @property
    def grand_total(self) -> Decimal:
        return self.subtotal - self.discount

    def line_for(self, item_id: str) -> OrderLine | None:
        for line in self._lines:
            if line.item_id == item_id:
                return line
        return None

    def add_line(self, item_id: str) -> None:
        """Add one of a catalog item; ids not in the loaded catalog are ignored."""
        item = self._menu.get(item_id)
        if item is None:
            return

        line = self.line_for(item_id)
        if line is not None:
            line.quantity += 1
            return

        self._lines.append(
            OrderLine(
                item_id=item.id,
                name=item.name,
                unit_price=item.price,
                cost=item.cost_default,
                quantity=1,
            )
        )

    def change_quantity(self, item_id: str, direction: QuantityChange | str) -> None:
        direction = QuantityChange(direction)
        line = self.line_for(item_id)
        if line is None:
            return

        if direction is QuantityChange.INCREASE:
            line.quantity += 1
            return

        line.quantity -= 1
        if line.quantity <= 0:
            self._lines.remove(line)

    def clear(self) -> None:
        self._lines.clear()
        self.discount = ZERO

    def filter_menu(self, category_id: str | None = None, query: str = "") -> list[MenuItem]:
        """Catalog items in the given category (``None`` for all) matching ``query``."""
        items = self.menu
        if category_id is not None:
            items = [item for item in items if item.category_id == category_id]
        if query:
            q = query.lower()
            items = [item for item in items if q in item.name.lower()]
        return items
