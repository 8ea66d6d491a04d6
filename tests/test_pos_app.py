from __future__ import annotations

import pytest

from pos_order.controller import PosController
from pos_order.payment_modal import PaymentModal
from pos_order.pos_app import PosApp


@pytest.fixture
def app(gateway, catalog) -> PosApp:
    catalog.tables["orders"] = [{"id": "old", "order_no": "ORD0009", "created_at": "2026-01-01"}]
    return PosApp(PosController(gateway), printing_enabled=False)


@pytest.mark.asyncio
async def test_add_items_and_pay(app: PosApp, catalog) -> None:
    async with app.run_test() as pilot:
        assert app.controller.order_number == "ORD0010"

        await pilot.press("enter", "enter", "down", "enter")
        lines = [(line.item_id, line.quantity) for line in app.controller.lines()]
        assert lines == [("pad-thai", 2), ("iced-tea", 1)]

        await pilot.press("p")
        await pilot.pause()
        assert isinstance(app.screen, PaymentModal)

        await pilot.press("j", "enter")
        await pilot.pause()

        assert not isinstance(app.screen, PaymentModal)
        assert app.controller.lines() == ()
        assert app.controller.order_number == "ORD0011"

    [order] = [row for row in catalog.rows("orders") if row["order_no"] == "ORD0010"]
    assert order["payment_method"] == "qr"
    assert order["grand_total"] == "130.00"
    assert len(catalog.rows("order_items")) == 2


@pytest.mark.asyncio
async def test_quantity_keys_and_clear(app: PosApp) -> None:
    async with app.run_test() as pilot:
        await pilot.press("enter", "plus", "plus")
        assert app.controller.lines()[0].quantity == 3

        await pilot.press("minus")
        assert app.controller.lines()[0].quantity == 2

        await pilot.press("x")
        assert app.controller.lines() == ()

        await pilot.press("p")
        await pilot.pause()
        assert not isinstance(app.screen, PaymentModal)


@pytest.mark.asyncio
async def test_search_and_category(app: PosApp) -> None:
    async with app.run_test() as pilot:
        await pilot.press("s", "c", "u", "r")
        assert app.input_state == "active"
        assert [item.id for item in app.controller.visible_menu()] == ["green-curry"]

        await pilot.press("enter", "ctrl+c")
        assert app.input_state == "normal"
        assert app.controller.state.query == ""
        assert [line.item_id for line in app.controller.lines()] == ["green-curry"]

        await pilot.press("c", "c")
        assert app.controller.category_name() == "Drinks"


@pytest.mark.asyncio
async def test_failed_payment_keeps_modal_open(app: PosApp, catalog) -> None:
    catalog.fail("POST", "orders")
    async with app.run_test() as pilot:
        await pilot.press("enter", "p")
        await pilot.pause()
        await pilot.press("enter")
        await pilot.pause()

        assert isinstance(app.screen, PaymentModal)
        assert len(app.controller.lines()) == 1

        await pilot.press("escape")
        await pilot.pause()
        assert not isinstance(app.screen, PaymentModal)
        assert app.controller.order_number == "ORD0010"
