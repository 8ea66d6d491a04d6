"""Receipt printing on a serial ESC/POS thermal printer."""

from __future__ import annotations

import logging
from pathlib import Path

from pos_order.config import (
    PRINTER_BAUDRATE,
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_SERIAL_PORT,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_WIDTH_PX,
)
from pos_order.models import OrderItemRecord, OrderRecord
from pos_order.rendering import format_currency

logger = logging.getLogger(__name__)

SYSTEM_FONTS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/System/Library/Fonts/SFNS.ttf",
)
_RULE = "-" * 24
_ROW_GAP_PX = 10


def font_candidates() -> list[str]:
    """Configured font first, then common system fonts, without duplicates."""
    return list(dict.fromkeys(path for path in (PRINTER_FONT_PATH, *SYSTEM_FONTS) if path))


def load_receipt_font(size: int = PRINTER_FONT_SIZE) -> object:
    from PIL import ImageFont

    candidates = font_candidates()
    for path in candidates:
        if Path(path).is_file():
            return ImageFont.truetype(path, size)
    raise RuntimeError(f"No receipt font found; set POS_PRINTER_FONT_PATH. Tried: {', '.join(candidates)}")


def check_printer_dependencies() -> tuple[bool, str]:
    """Check that python-escpos, a font and the serial port are all present."""
    try:
        from escpos.printer import Serial  # noqa: F401

        load_receipt_font()
        if not Path(PRINTER_SERIAL_PORT).exists():
            raise RuntimeError(f"{PRINTER_SERIAL_PORT} not found")
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def receipt_lines(order: OrderRecord, items: list[OrderItemRecord], payment_name: str) -> list[str]:
    """Text lines of a receipt, top to bottom."""
    lines = [f"#{order.order_no}", _RULE]
    for item in items:
        lines.append(f"{item.qty} x {item.name}")
        lines.append(f"    {format_currency(item.total_price)}")
    lines.append(_RULE)
    discount = order.subtotal - order.grand_total
    lines.append(f"Subtotal {format_currency(order.subtotal)}")
    lines.append(f"Discount -{format_currency(discount)}")
    lines.append(f"Total {format_currency(order.grand_total)}")
    lines.append(f"Paid: {payment_name}")
    return lines


def render_receipt(lines: list[str], font: object, tail_px: int = PRINTER_TAIL_SPACER_PX) -> object:
    """Draw every line onto one 1-bit canvas as wide as the paper, plus a blank tail for tearing."""
    from PIL import Image, ImageDraw

    # "Ag" spans cap height and descender, so no row clips into the next.
    row_px = font.getbbox("Ag")[3] + _ROW_GAP_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, row_px * len(lines) + max(0, tail_px)), color=1)
    draw = ImageDraw.Draw(img)
    for row, text in enumerate(lines):
        draw.text((PRINTER_LEFT_INDENT_PX, row * row_px + _ROW_GAP_PX // 2), text, font=font, fill=0)
    return img


def print_receipt(order: OrderRecord, items: list[OrderItemRecord], payment_name: str) -> None:
    """Print a paid order and cut the ticket."""
    if not items:
        return

    try:
        from escpos.printer import Serial
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    receipt = render_receipt(receipt_lines(order, items, payment_name), load_receipt_font())
    printer = Serial(devfile=PRINTER_SERIAL_PORT, baudrate=PRINTER_BAUDRATE)
    try:
        printer.image(receipt)
        printer.cut()
    finally:
        printer.close()
    logger.info("receipt_printed order_no=%s items=%d port=%s", order.order_no, len(items), PRINTER_SERIAL_PORT)
