"""Main Textual app class."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from pos_order.checkout import CheckoutResult
from pos_order.config import RECEIPT_PRINTING_ENABLED
from pos_order.controller import PosController
from pos_order.models import MenuItem, OrderLine
from pos_order.payment_modal import PaymentModal
from pos_order.printer import check_printer_dependencies, print_receipt
from pos_order.rendering import format_menu_item, format_order_badge, format_order_line, format_totals

logger = logging.getLogger(__name__)


class PosApp(App):
    """A Textual point-of-sale screen: menu on the right, current order on the left."""

    TITLE = "POS"
    SUB_TITLE = "Ordering"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #order-pane {
        width: 2fr;
        border: round $primary;
        padding: 1;
    }

    #menu-pane {
        width: 3fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #menu-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-lines {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-totals {
        height: auto;
        padding: 1 1 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    selected_index = reactive(0)
    order_selected_index = reactive(None)

    BINDINGS = [
        ("up", "cycle_results(-1)", "Previous item"),
        ("down", "cycle_results(1)", "Next item"),
        ("enter", "add_selected", "Add item"),
        ("backspace", "backspace_query", "Delete query char"),
        Binding("ctrl+s", "checkout", "Pay", priority=True),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, controller: PosController, printing_enabled: bool = RECEIPT_PRINTING_ENABLED) -> None:
        super().__init__()
        self.controller = controller
        self.printing_enabled = printing_enabled
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="order-pane"):
                yield Static("Current Order", id="order-title", classes="pane-title")
                yield Static("(no items yet)", id="order-lines")
                yield Static(id="order-totals")
            with Vertical(id="menu-pane"):
                yield Static(id="search-bar")
                yield Static(id="menu-list")

    def on_mount(self) -> None:
        self.controller.load_catalog()
        order_no = self.controller.seed_order_numbers()
        self.system_status = f"Next order {order_no}"
        if self.printing_enabled:
            _, msg = check_printer_dependencies()
            self.system_status = f"{self.system_status} · {msg}"
        logger.info("app_mounted status=%r", self.system_status)
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        # While a modal is active, let the modal own keyboard handling.
        if isinstance(self.screen, PaymentModal):
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        char = event.character
        if self.input_state == "active":
            if char.isprintable():
                self.controller.set_query(self.controller.state.query + char)
                self.selected_index = 0
                self._refresh_menu_pane()
                event.stop()
            return

        key = char.lower()
        if key in {"+", "="}:
            self._change_selected_quantity(increase=True)
        elif key == "-":
            self._change_selected_quantity(increase=False)
        elif key == "j":
            self._move_order_selection(1)
        elif key == "k":
            self._move_order_selection(-1)
        elif key == "c":
            self.controller.cycle_category()
            self.selected_index = 0
            self._refresh_menu_pane()
        elif key == "s":
            self.input_state = "active"
            self.controller.set_query("")
            self.selected_index = 0
            self._refresh_menu_pane()
        elif key == "x":
            self.controller.clear_order()
            self.order_selected_index = None
            self._refresh_order_pane()
        elif key == "p":
            self.action_checkout()
        else:
            return
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if isinstance(self.screen, PaymentModal):
            return
        if self.input_state == "normal":
            return

        self.input_state = "normal"
        self.controller.set_query("")
        self.selected_index = 0
        self._refresh_menu_pane()

    def action_cycle_results(self, delta: int) -> None:
        if isinstance(self.screen, PaymentModal):
            return

        results = self.controller.visible_menu()
        if not results:
            self.selected_index = 0
            self._refresh_menu_pane()
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_menu_pane()

    def action_add_selected(self) -> None:
        if isinstance(self.screen, PaymentModal):
            return

        results = self.controller.visible_menu()
        if not results:
            return
        if self.selected_index >= len(results):
            self.selected_index = 0

        item = results[self.selected_index]
        self.controller.add_item(item.id)
        self._select_line(item.id)
        self._refresh_order_pane()

    def action_backspace_query(self) -> None:
        if isinstance(self.screen, PaymentModal):
            return
        if self.input_state != "active":
            return

        query = self.controller.state.query
        if not query:
            return
        self.controller.set_query(query[:-1])
        self.selected_index = 0
        self._refresh_menu_pane()

    def action_checkout(self) -> None:
        if isinstance(self.screen, PaymentModal):
            return
        if self.input_state != "normal":
            self.system_status = "Pay only outside search (Ctrl+C to leave search)"
            self._refresh_menu_pane()
            return
        if not self.controller.open_checkout():
            self.system_status = "Nothing to pay"
            self._refresh_menu_pane()
            return

        self.push_screen(PaymentModal(self.controller), callback=self._on_payment_closed)

    def _on_payment_closed(self, result: CheckoutResult | None) -> None:
        if result is None:
            self._refresh_all()
            return

        self.notify(result.message, title="Paid")
        self.system_status = f"{result.message} · next {self.controller.order_number}"
        self.order_selected_index = None
        if self.printing_enabled and result.order is not None:
            payment_name = self.controller.checkout.payment_method_name(result.order.payment_method)
            try:
                print_receipt(result.order, list(result.items), payment_name)
            except Exception as exc:
                logger.warning("receipt_print_failed order_no=%s error=%r", result.order.order_no, exc)
                self.notify(f"Receipt not printed: {exc}", severity="warning")
        self._refresh_all()

    def _selected_line(self) -> OrderLine | None:
        lines = self.controller.lines()
        if self.order_selected_index is None:
            return None
        if not (0 <= self.order_selected_index < len(lines)):
            return None
        return lines[self.order_selected_index]

    def _select_line(self, item_id: str) -> None:
        for idx, line in enumerate(self.controller.lines()):
            if line.item_id == item_id:
                self.order_selected_index = idx
                return

    def _change_selected_quantity(self, increase: bool) -> None:
        line = self._selected_line()
        if line is None:
            return
        if increase:
            self.controller.increase(line.item_id)
        else:
            self.controller.decrease(line.item_id)
        self._refresh_order_pane()

    def _move_order_selection(self, delta: int) -> None:
        lines = self.controller.lines()
        if not lines:
            return

        if self.order_selected_index is None:
            self.order_selected_index = 0 if delta > 0 else len(lines) - 1
        else:
            self.order_selected_index = (self.order_selected_index + delta) % len(lines)
        self._refresh_order_pane()

    def _refresh_all(self) -> None:
        self._refresh_order_pane()
        self._refresh_menu_pane()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_order_pane(self) -> None:
        try:
            title_widget = self.query_one("#order-title", Static)
            lines_widget = self.query_one("#order-lines", Static)
            totals_widget = self.query_one("#order-totals", Static)
        except NoMatches:
            return

        draft = self.controller.draft
        title = Text("Current Order ")
        lines = self.controller.lines()
        if lines:
            title.append_text(format_order_badge(self.controller.order_number))
        title_widget.update(title)
        totals_widget.update(format_totals(draft.subtotal, draft.discount, draft.grand_total))

        if not lines:
            self.order_selected_index = None
            lines_widget.update("(no items yet)")
            return

        if self.order_selected_index is not None and self.order_selected_index >= len(lines):
            self.order_selected_index = len(lines) - 1

        # Each line renders on two rows.
        visible_rows = max(1, self._visible_rows(lines_widget) // 2)
        start, end = self._window_bounds(len(lines), visible_rows, self.order_selected_index)

        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            pointer = "➤ " if idx == self.order_selected_index else "  "
            text.append(pointer)
            text.append_text(format_order_line(lines[idx]))

        if end < len(lines):
            text.append("\n⋮", style="dim")

        lines_widget.update(text)

    def _refresh_menu_pane(self) -> None:
        self._refresh_search_bar()
        self._refresh_menu(self.controller.visible_menu())

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return

        category = self.controller.category_name()
        if self.input_state == "normal":
            text = Text()
            text.append(f" {category} ", style="bold #ffffff on #2f6db5")
            text.append(" C category · S search · Enter add · P pay\n")
            text.append(self.system_status or "Ready", style="dim")
            bar.update(text)
            return

        text = Text()
        text.append(f" {category} ", style="bold #ffffff on #2f6db5")
        text.append(f" search: {self.controller.state.query}")
        bar.update(text)

    def _refresh_menu(self, results: list[MenuItem]) -> None:
        try:
            menu_widget = self.query_one("#menu-list", Static)
        except NoMatches:
            return

        if not results:
            menu_widget.update("No menu items")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        visible_rows = self._visible_rows(menu_widget)
        start, end = self._window_bounds(len(results), visible_rows, self.selected_index)

        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            text.append(pointer)
            text.append_text(format_menu_item(results[idx]))

        if end < len(results):
            text.append("\n⋮", style="dim")

        menu_widget.update(text)
