"""Human-readable order numbers (ORD0001, ORD0002, ...)."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Protocol

from pos_order.errors import SeedingError
from pos_order.gateway import ORDERS
from pos_order.result import Result

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "ORD"
_ORDER_NUMBER_RE = re.compile(rf"^{ORDER_NUMBER_PREFIX}(\d+)$")


class OrderSource(Protocol):
    def fetch(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        columns: str = "*",
    ) -> Result[list[dict[str, Any]]]: ...


def format_order_number(value: int) -> str:
    """Pad to four digits; larger values are never truncated."""
    return f"{ORDER_NUMBER_PREFIX}{value:04d}"


def parse_order_number(text: Any) -> int | None:
    """Return the numeric suffix of ``ORD####`` or ``None`` if malformed."""
    if not isinstance(text, str):
        return None
    match = _ORDER_NUMBER_RE.match(text.strip())
    if match is None:
        return None
    return int(match.group(1))


def next_from_order_numbers(order_numbers: Iterable[Any]) -> int:
    parsed = [n for n in (parse_order_number(text) for text in order_numbers) if n is not None]
    if not parsed:
        return 1
    return max(parsed) + 1


class OrderNumberSequencer:
    """Process-local counter; two terminals seeded from the same data will collide."""

    def __init__(self, start: int = 1) -> None:
        self.current = start

    def next_order_number(self) -> str:
        """Format the current value without advancing."""
        return format_order_number(self.current)

    def advance(self) -> None:
        self.current += 1

    def seed_from_orders(self, rows: Iterable[dict[str, Any]]) -> int:
        self.current = next_from_order_numbers(row.get("order_no") for row in rows)
        return self.current

    def seed(self, source: OrderSource) -> int:
        """Seed from persisted orders, falling back to 1 when they cannot be read."""
        try:
            rows = _load_order_rows(source)
        except SeedingError as exc:
            logger.warning("order_number_seed_failed error=%s fallback=1", exc)
            self.current = 1
            return self.current

        self.seed_from_orders(rows)
        logger.info("order_number_seeded orders=%d next=%s", len(rows), self.next_order_number())
        return self.current


def _load_order_rows(source: OrderSource) -> list[dict[str, Any]]:
    try:
        result = source.fetch(ORDERS, columns="order_no")
    except Exception as exc:
        raise SeedingError(f"could not load orders: {exc}") from exc
    if not result.ok:
        raise SeedingError(str(result))
    return list(result.value)
