"""Payment selection modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_order.checkout import CheckoutResult
from pos_order.controller import PosController
from pos_order.rendering import format_currency


class PaymentModal(ModalScreen[CheckoutResult | None]):
    """Pick a payment method and submit the current order."""

    CSS = """
    PaymentModal {
        align: center middle;
        background: $background 60%;
    }

    #payment-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #payment-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #payment-summary {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #payment-methods {
        color: white;
        margin-bottom: 1;
    }

    #payment-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #payment-help {
        color: #dddddd;
    }
    """

    def __init__(self, controller: PosController) -> None:
        super().__init__()
        self.controller = controller
        self.methods = list(controller.state.payment_methods)
        self.cursor_index = self._initial_cursor()
        self.error = ""

    def _initial_cursor(self) -> int:
        selected = self.controller.checkout.selected_payment_method
        for idx, method in enumerate(self.methods):
            if method.id == selected:
                return idx
        return 0

    def compose(self) -> ComposeResult:
        with Container(id="payment-dialog"):
            yield Static("Payment", id="payment-title")
            yield Static(id="payment-summary")
            yield Static(id="payment-methods")
            yield Static(id="payment-error")
            yield Static("J/K/↑/↓ choose. Enter pay. Esc/q cancel.", id="payment-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q", "ctrl+c"}:
            self.controller.close_checkout()
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key in {"j", "down", "tab"}:
            self._move_cursor(1)
            event.stop()
            return

        if event.key in {"k", "up"}:
            self._move_cursor(-1)
            event.stop()

    def _move_cursor(self, delta: int) -> None:
        if not self.methods:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.methods)
        self.controller.choose_payment(self.methods[self.cursor_index].id)
        self.error = ""
        self._refresh_content()

    def _confirm(self) -> None:
        if self.methods:
            self.controller.choose_payment(self.methods[self.cursor_index].id)
        result = self.controller.pay()
        if result.succeeded:
            self.dismiss(result)
            return
        if not self.controller.state.payment_modal_open:
            # Draft emptied underneath us; nothing left to pay.
            self.dismiss(None)
            return
        self.error = result.message
        self._refresh_content()

    def _refresh_content(self) -> None:
        draft = self.controller.draft
        summary = Text()
        summary.append(f"Order #{self.controller.order_number}\n", style="bold")
        summary.append(format_currency(draft.grand_total), style="bold #34d399")
        self.query_one("#payment-summary", Static).update(summary)

        methods = Text()
        if not self.methods:
            methods.append("(no payment methods)", style="dim")
        for idx, method in enumerate(self.methods):
            if idx > 0:
                methods.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            style = "bold white" if idx == self.cursor_index else "white"
            methods.append(f"{pointer}{method.name}", style=style)
        self.query_one("#payment-methods", Static).update(methods)
        self.query_one("#payment-error", Static).update(self.error or "")
