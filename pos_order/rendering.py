"""Rendering helpers for order lines, totals and the menu."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text

from pos_order.config import CURRENCY_SYMBOL
from pos_order.models import MenuItem, OrderLine

ORDER_BADGE_STYLE = "bold #ffffff on #4f46e5"
TOTAL_STYLE = "bold #34d399"
DISCOUNT_STYLE = "#f87171"


def format_currency(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def format_order_badge(order_no: str) -> Text:
    return Text(f" #{order_no} ", style=ORDER_BADGE_STYLE)


def format_menu_item(item: MenuItem) -> Text:
    text = Text(item.name)
    text.append(f"  {format_currency(item.price)}", style="green")
    return text


def format_order_line(line: OrderLine) -> Text:
    """Render ``name  total`` with a dim ``price x qty`` detail."""
    text = Text()
    text.append(line.name, style="bold")
    text.append(f"  {format_currency(line.line_total)}")
    text.append(f"\n      {format_currency(line.unit_price)} × {line.quantity}", style="dim")
    return text


def format_totals(subtotal: Decimal, discount: Decimal, grand_total: Decimal) -> Text:
    text = Text()
    text.append(f"Subtotal: {format_currency(subtotal)}\n")
    text.append(f"Discount: -{format_currency(discount)}\n", style=DISCOUNT_STYLE)
    text.append(f"Total:    {format_currency(grand_total)}", style=TOTAL_STYLE)
    return text
