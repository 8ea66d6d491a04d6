"""Checkout: turn the draft into persisted order and order-item rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Protocol, Sequence
from uuid import uuid4

from pos_order.config import BRANCH_ID, CASHIER_ID, ROLLBACK_ON_PARTIAL_FAILURE
from pos_order.draft import OrderDraft
from pos_order.errors import PersistenceError, ValidationError
from pos_order.models import OrderItemRecord, OrderRecord, PaymentMethod, utc_now_iso
from pos_order.result import Err, Result
from pos_order.sequencer import OrderNumberSequencer

logger = logging.getLogger(__name__)

ORDER_STATUS_PAID = "paid"

MSG_SELECT_PAYMENT = "Please select a payment method."
MSG_ORDER_FAILED = "Could not create the order. Please try again."
MSG_ITEM_FAILED = "Could not save the order items. Please try again."
MSG_PAID = "Payment complete."


class OrderWriter(Protocol):
    def create_order(self, order: OrderRecord) -> Result[dict[str, Any]]: ...

    def create_order_item(self, item: OrderItemRecord) -> Result[dict[str, Any]]: ...

    def delete_order(self, order_id: str) -> Result[None]: ...

    def delete_order_item(self, order_item_id: str) -> Result[None]: ...


class CheckoutState(str, Enum):
    IDLE = "idle"
    AWAITING_PAYMENT = "awaiting_payment_selection"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of one submit attempt, ready to show to the cashier."""

    state: CheckoutState
    message: str = ""
    order: OrderRecord | None = None
    items: tuple[OrderItemRecord, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.state is CheckoutState.SUCCEEDED


@dataclass
class _WrittenRows:
    order_id: str | None = None
    item_ids: list[str] = field(default_factory=list)


class CheckoutWorkflow:
    """Sequential checkout over a draft, a sequencer and a backend writer.

    Writes happen one at a time: the order header first, then one row per
    draft line in draft order. Without ``rollback_on_partial_failure`` a
    failed item write leaves the rows written before it in the backend.
    """

    def __init__(
        self,
        writer: OrderWriter,
        draft: OrderDraft,
        sequencer: OrderNumberSequencer,
        branch_id: str = BRANCH_ID,
        cashier_id: str = CASHIER_ID,
        rollback_on_partial_failure: bool = ROLLBACK_ON_PARTIAL_FAILURE,
    ) -> None:
        self.writer = writer
        self.draft = draft
        self.sequencer = sequencer
        self.branch_id = branch_id
        self.cashier_id = cashier_id
        self.rollback_on_partial_failure = rollback_on_partial_failure
        self.state = CheckoutState.IDLE
        self.payment_methods: list[PaymentMethod] = []
        self.selected_payment_method = ""

    def set_payment_methods(self, methods: Sequence[PaymentMethod]) -> None:
        self.payment_methods = list(methods)
        self.selected_payment_method = self.default_payment_method()

    def default_payment_method(self) -> str:
        return self.payment_methods[0].id if self.payment_methods else ""

    def payment_method_name(self, method_id: str) -> str:
        for method in self.payment_methods:
            if method.id == method_id:
                return method.name
        return method_id

    def begin(self) -> bool:
        """Open checkout for the current draft; refused while the draft is empty."""
        if self.draft.is_empty:
            self.state = CheckoutState.IDLE
            return False
        self.state = CheckoutState.AWAITING_PAYMENT
        return True

    def select_payment(self, method_id: str) -> None:
        self.selected_payment_method = method_id

    def cancel(self) -> None:
        self.state = CheckoutState.IDLE
        self.selected_payment_method = self.default_payment_method()

    def submit(self) -> CheckoutResult:
        if self.draft.is_empty:
            self.state = CheckoutState.IDLE
            return CheckoutResult(self.state)

        try:
            if not self.selected_payment_method:
                raise ValidationError(MSG_SELECT_PAYMENT)
            self.state = CheckoutState.SUBMITTING
            order, items = self._persist()
        except ValidationError as exc:
            self.state = CheckoutState.FAILED
            logger.info("checkout_rejected reason=%r", str(exc))
            return CheckoutResult(self.state, str(exc))
        except PersistenceError as exc:
            self.state = CheckoutState.FAILED
            logger.error("checkout_failed order_no=%s reason=%s", self.sequencer.next_order_number(), exc.err)
            return CheckoutResult(self.state, str(exc))

        self.draft.clear()
        self.sequencer.advance()
        self.state = CheckoutState.SUCCEEDED
        self.selected_payment_method = self.default_payment_method()
        logger.info(
            "checkout_succeeded order_no=%s items=%d grand_total=%s",
            order.order_no,
            len(items),
            order.grand_total,
        )
        return CheckoutResult(self.state, f"{MSG_PAID} {order.order_no}", order=order, items=tuple(items))

    def _persist(self) -> tuple[OrderRecord, list[OrderItemRecord]]:
        now = utc_now_iso()
        order = OrderRecord(
            id=uuid4().hex,
            order_no=self.sequencer.next_order_number(),
            status=ORDER_STATUS_PAID,
            subtotal=self.draft.subtotal,
            grand_total=self.draft.grand_total,
            payment_method=self.selected_payment_method,
            branch_id=self.branch_id,
            cashier_id=self.cashier_id,
            created_at=now,
            updated_at=now,
        )
        logger.info("checkout_start order_no=%s lines=%d", order.order_no, len(self.draft.lines))

        result = self.writer.create_order(order)
        if isinstance(result, Err):
            raise PersistenceError(MSG_ORDER_FAILED, result)

        order_id = str(result.value.get("id") or order.id)
        written = _WrittenRows(order_id=order_id)
        logger.info("order_written order_no=%s id=%s", order.order_no, order_id)

        items: list[OrderItemRecord] = []
        for line in self.draft.lines:
            item = OrderItemRecord(
                id=uuid4().hex,
                order_id=order_id,
                item_id=line.item_id,
                name=line.name,
                qty=line.quantity,
                unit_price=line.unit_price,
                total_price=line.line_total,
                created_at=utc_now_iso(),
            )
            item_result = self.writer.create_order_item(item)
            if isinstance(item_result, Err):
                message = MSG_ITEM_FAILED
                if self.rollback_on_partial_failure and not self._roll_back(written):
                    message = f"{MSG_ITEM_FAILED} Some rows could not be removed."
                raise PersistenceError(message, item_result)
            written.item_ids.append(str(item_result.value.get("id") or item.id))
            items.append(item)
            logger.info("item_written order_no=%s item_id=%s qty=%d", order.order_no, line.item_id, line.quantity)

        return replace(order, id=order_id), items

    def _roll_back(self, written: _WrittenRows) -> bool:
        """Delete rows written by a failed checkout, children first."""
        clean = True
        for item_id in reversed(written.item_ids):
            result = self.writer.delete_order_item(item_id)
            if isinstance(result, Err):
                clean = False
                logger.error("rollback_item_failed id=%s reason=%s", item_id, result)
        if written.order_id is not None:
            result = self.writer.delete_order(written.order_id)
            if isinstance(result, Err):
                clean = False
                logger.error("rollback_order_failed id=%s reason=%s", written.order_id, result)
        logger.warning("checkout_rolled_back order_id=%s items=%d clean=%s", written.order_id, len(written.item_ids), clean)
        return clean
