from __future__ import annotations

from decimal import Decimal

import pytest
from PIL import ImageFont

from pos_order import printer
from pos_order.config import PRINTER_WIDTH_PX
from pos_order.models import OrderItemRecord, OrderRecord
from pos_order.printer import load_receipt_font, print_receipt, receipt_lines, render_receipt


def _order() -> OrderRecord:
    return OrderRecord(
        id="o1",
        order_no="ORD0012",
        status="paid",
        subtotal=Decimal("130"),
        grand_total=Decimal("130"),
        payment_method="cash",
        branch_id="branch1",
        cashier_id="cashier1",
        created_at="",
        updated_at="",
    )


def _item(name: str, qty: int, total: str) -> OrderItemRecord:
    return OrderItemRecord(
        id=name,
        order_id="o1",
        item_id=name,
        name=name,
        qty=qty,
        unit_price=Decimal(total) / qty,
        total_price=Decimal(total),
        created_at="",
    )


def test_receipt_lines() -> None:
    lines = receipt_lines(_order(), [_item("Pad Thai", 2, "100"), _item("Iced Tea", 1, "30")], "Cash")

    assert lines[0] == "#ORD0012"
    assert "2 x Pad Thai" in lines
    assert "    ฿100.00" in lines
    assert "1 x Iced Tea" in lines
    assert "Subtotal ฿130.00" in lines
    assert "Discount -฿0.00" in lines
    assert lines[-2:] == ["Total ฿130.00", "Paid: Cash"]


def test_render_receipt_stacks_lines_above_tail() -> None:
    font = ImageFont.load_default()

    one = render_receipt(["Total 1.00"], font, tail_px=0)
    three = render_receipt(["#ORD0001", "1 x Tea", "Total 1.00"], font, tail_px=40)

    assert three.mode == "1"
    assert three.width == PRINTER_WIDTH_PX
    assert three.height == one.height * 3 + 40
    assert min(three.getdata()) == 0
    tail = three.crop((0, three.height - 40, PRINTER_WIDTH_PX, three.height))
    assert min(tail.getdata()) == 255


def test_load_receipt_font_without_any_font(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(printer, "PRINTER_FONT_PATH", str(tmp_path / "missing.ttf"))
    monkeypatch.setattr(printer, "SYSTEM_FONTS", (str(tmp_path / "also-missing.ttf"),))

    with pytest.raises(RuntimeError, match="POS_PRINTER_FONT_PATH"):
        load_receipt_font()


class _FakeSerial:
    instances: list[_FakeSerial] = []

    def __init__(self, devfile: str, baudrate: int) -> None:
        self.devfile = devfile
        self.baudrate = baudrate
        self.images: list[object] = []
        self.cuts = 0
        self.closed = False
        _FakeSerial.instances.append(self)

    def image(self, img: object) -> None:
        self.images.append(img)

    def cut(self) -> None:
        self.cuts += 1

    def close(self) -> None:
        self.closed = True


def test_print_receipt_prints_image_then_cuts(monkeypatch) -> None:
    monkeypatch.setattr("escpos.printer.Serial", _FakeSerial)
    monkeypatch.setattr(printer, "load_receipt_font", lambda: ImageFont.load_default())

    print_receipt(_order(), [_item("Pad Thai", 2, "100")], "Cash")

    device = _FakeSerial.instances[-1]
    assert device.devfile == printer.PRINTER_SERIAL_PORT
    assert device.baudrate == printer.PRINTER_BAUDRATE
    assert len(device.images) == 1
    assert device.images[0].width == PRINTER_WIDTH_PX
    assert device.cuts == 1
    assert device.closed


def test_print_receipt_without_items_skips_printer(monkeypatch) -> None:
    monkeypatch.setattr("escpos.printer.Serial", _FakeSerial)
    before = len(_FakeSerial.instances)

    print_receipt(_order(), [], "Cash")

    assert len(_FakeSerial.instances) == before
