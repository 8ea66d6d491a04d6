"""Application state and the operations the screen dispatches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pos_order.checkout import CheckoutResult, CheckoutState, CheckoutWorkflow
from pos_order.config import ROLLBACK_ON_PARTIAL_FAILURE
from pos_order.draft import OrderDraft, QuantityChange
from pos_order.gateway import SupabaseGateway
from pos_order.models import MenuCategory, MenuItem, OrderLine, PaymentMethod
from pos_order.sequencer import OrderNumberSequencer

logger = logging.getLogger(__name__)


@dataclass
class PosState:
    """Everything the ordering screen shows, owned by one controller."""

    draft: OrderDraft = field(default_factory=OrderDraft)
    sequencer: OrderNumberSequencer = field(default_factory=OrderNumberSequencer)
    categories: list[MenuCategory] = field(default_factory=list)
    payment_methods: list[PaymentMethod] = field(default_factory=list)
    selected_category: str | None = None
    query: str = ""
    payment_modal_open: bool = False


class PosController:
    def __init__(
        self,
        gateway: SupabaseGateway,
        state: PosState | None = None,
        rollback_on_partial_failure: bool = ROLLBACK_ON_PARTIAL_FAILURE,
    ) -> None:
        self.gateway = gateway
        self.state = state or PosState()
        self.checkout = CheckoutWorkflow(
            gateway,
            self.state.draft,
            self.state.sequencer,
            rollback_on_partial_failure=rollback_on_partial_failure,
        )

    @property
    def draft(self) -> OrderDraft:
        return self.state.draft

    @property
    def order_number(self) -> str:
        return self.state.sequencer.next_order_number()

    def load_catalog(self) -> None:
        """Fetch categories, menu items and payment methods; failures leave lists empty."""
        self.state.categories = self.gateway.list_categories()
        self.state.draft.set_menu(self.gateway.list_menu_items())
        self.state.payment_methods = self.gateway.list_payment_methods()
        self.checkout.set_payment_methods(self.state.payment_methods)
        if self.state.selected_category not in {c.id for c in self.state.categories}:
            self.state.selected_category = None
        logger.info(
            "catalog_loaded categories=%d items=%d payment_methods=%d",
            len(self.state.categories),
            len(self.state.draft.menu),
            len(self.state.payment_methods),
        )

    def seed_order_numbers(self) -> str:
        self.state.sequencer.seed(self.gateway)
        return self.order_number

    def select_category(self, category_id: str | None) -> None:
        self.state.selected_category = category_id

    def cycle_category(self, delta: int = 1) -> None:
        """Step through "all" followed by each category in display order."""
        options: list[str | None] = [None, *(category.id for category in self.state.categories)]
        try:
            idx = options.index(self.state.selected_category)
        except ValueError:
            idx = 0
        self.state.selected_category = options[(idx + delta) % len(options)]

    def category_name(self) -> str:
        for category in self.state.categories:
            if category.id == self.state.selected_category:
                return category.name
        return "All"

    def set_query(self, query: str) -> None:
        self.state.query = query

    def visible_menu(self) -> list[MenuItem]:
        return self.state.draft.filter_menu(self.state.selected_category, self.state.query)

    def add_item(self, item_id: str) -> None:
        self.state.draft.add_line(item_id)

    def increase(self, item_id: str) -> None:
        self.state.draft.change_quantity(item_id, QuantityChange.INCREASE)

    def decrease(self, item_id: str) -> None:
        self.state.draft.change_quantity(item_id, QuantityChange.DECREASE)

    def clear_order(self) -> None:
        self.state.draft.clear()

    def lines(self) -> tuple[OrderLine, ...]:
        return self.state.draft.lines

    def open_checkout(self) -> bool:
        opened = self.checkout.begin()
        self.state.payment_modal_open = opened
        return opened

    def close_checkout(self) -> None:
        self.checkout.cancel()
        self.state.payment_modal_open = False

    def choose_payment(self, method_id: str) -> None:
        self.checkout.select_payment(method_id)

    def pay(self) -> CheckoutResult:
        result = self.checkout.submit()
        if result.state in {CheckoutState.SUCCEEDED, CheckoutState.IDLE}:
            self.state.payment_modal_open = False
        return result
