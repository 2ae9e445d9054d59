"""Order aggregate: the core of the domain.

The Order is an aggregate root that owns its line items and its payment
proof.  It knows which status transitions are legal and which stock effect
each one implies, but it never touches stock itself: the
OrderLifecycleService applies the effect in the same transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from preorder.domain.exceptions import (
    CannotDelete,
    IllegalStatusTransition,
    PaymentProofRequired,
    ValidationError,
)
from preorder.domain.model.value_objects import Money, PhoneNumber, Quantity


class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_RECEIVED = "payment_received"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.PICKED_UP, OrderStatus.CANCELLED)

    @staticmethod
    def parse(value: str) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise ValidationError(f"Unknown order status: {value!r}") from None


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset(
        {OrderStatus.PAYMENT_RECEIVED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PAYMENT_RECEIVED: frozenset(
        {OrderStatus.PREPARING, OrderStatus.CANCELLED}
    ),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.PICKED_UP}),
    OrderStatus.PICKED_UP: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class StockEffect(Enum):
    """What a status transition does to the reserved stock of an order."""

    NONE = "none"
    RESTORE = "restore"  # reservation undone, units go back to available
    RELEASE = "release"  # sale locked in, units leave the pool


def stock_effect_of(target: OrderStatus) -> StockEffect:
    # Each item's reservation is settled exactly once: on cancellation or
    # on pickup.  Both targets are terminal, so neither can fire twice.
    if target == OrderStatus.CANCELLED:
        return StockEffect.RESTORE
    if target == OrderStatus.PICKED_UP:
        return StockEffect.RELEASE
    return StockEffect.NONE


class PaymentMethod(Enum):
    PENDING = "pending"  # not chosen yet
    QRIS = "qris"
    TRANSFER = "transfer"
    COD = "cod"  # cash on pickup

    @property
    def is_cash(self) -> bool:
        return self == PaymentMethod.COD

    @staticmethod
    def parse(value: str) -> PaymentMethod:
        try:
            return PaymentMethod(value)
        except ValueError:
            raise ValidationError(f"Unknown payment method: {value!r}") from None


COD_CONFIRMATION = "cod_confirmation"


@dataclass(frozen=True)
class PaymentProof:
    """Uploaded proof of payment, or the cash-on-pickup sentinel."""

    file_type: str
    file_ref: str | None = None
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def cash_on_pickup() -> PaymentProof:
        return PaymentProof(file_type=COD_CONFIRMATION)


MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class Customer:
    name: str
    phone: PhoneNumber
    address: str | None = None

    @staticmethod
    def create(name: str, phone: str, address: str | None = None) -> Customer:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Customer name is required")
        if not MIN_NAME_LENGTH <= len(cleaned) <= MAX_NAME_LENGTH:
            raise ValidationError(
                f"Customer name must be {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters"
            )
        return Customer(
            name=cleaned,
            phone=PhoneNumber.parse(phone),
            address=(address or "").strip() or None,
        )


@dataclass
class OrderItem:
    """Captures what was reserved and at which price.

    ``price_per_item`` is the price the customer saw at checkout; later
    product price edits never reach it.
    """

    product_id: int
    product_name: str
    quantity: Quantity
    price_per_item: Money  # locked at order-creation time
    id: int | None = None

    @property
    def line_total(self) -> Money:
        return self.price_per_item * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for customer pre-orders.

    Use the ``Order.create()`` factory for new orders.  It must only be
    reached through the reservation transaction (PlaceOrderHandler); an
    order built anywhere else would exist without its stock reservation.
    The ``__init__`` is intentionally simple so the repository can
    reconstitute persisted orders without re-validating.
    """

    id: int | None
    batch_id: int
    customer: Customer
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    payment_method: PaymentMethod = PaymentMethod.PENDING
    total_amount: Money | None = None
    payment_started_at: datetime | None = None
    payment_proof: PaymentProof | None = None
    request_token: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        batch_id: int,
        customer: Customer,
        items: list[OrderItem],
        payment_method: PaymentMethod = PaymentMethod.PENDING,
        request_token: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        seen: set[int] = set()
        for item in items:
            if item.product_id in seen:
                raise ValidationError(
                    f"{item.product_name} is listed more than once"
                )
            seen.add(item.product_id)
            if item.price_per_item.is_zero:
                raise ValidationError(f"{item.product_name} has no price")

        order = Order(
            id=None,
            batch_id=batch_id,
            customer=customer,
            items=list(items),
            payment_method=payment_method,
            request_token=request_token,
        )
        order.total_amount = order.total
        return order

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def advance_to(self, target: OrderStatus) -> StockEffect:
        """Move forward along the fulfillment path.

        Cancellation has its own entry point (``cancel``) because it must
        be idempotent.  Returns the stock effect the caller has to apply.
        """
        if target == OrderStatus.CANCELLED:
            raise ValidationError("Use cancel() to cancel an order")
        self._check_transition(target)

        if (
            self.status == OrderStatus.PENDING_PAYMENT
            and target == OrderStatus.PAYMENT_RECEIVED
        ):
            self._check_payment_verifiable(target)

        self._set_status(target)
        return stock_effect_of(target)

    def cancel(self) -> bool:
        """Transition any non-terminal status -> CANCELLED.

        Returns False (and changes nothing) when the order is already
        cancelled, so repeated cancellation never restores stock twice.
        The caller restores stock only when True is returned.
        """
        if self.status == OrderStatus.CANCELLED:
            return False
        self._check_transition(OrderStatus.CANCELLED)
        self.payment_proof = None
        self._set_status(OrderStatus.CANCELLED)
        return True

    # --- Payment step ---------------------------------------------------------

    def start_payment_timer(self, now: datetime) -> bool:
        """Record when the customer reached the payment step.

        The timer never restarts; returns False if it was already running.
        """
        self._require_awaiting_payment("start payment")
        if self.payment_started_at is not None:
            return False
        self.payment_started_at = now
        self._touch()
        return True

    def select_payment_method(self, method: PaymentMethod) -> None:
        self._require_awaiting_payment("change the payment method")
        if method == PaymentMethod.PENDING:
            raise ValidationError("Choose a payment method")
        self.payment_method = method
        self._touch()

    def reset_payment_method(self) -> None:
        """Back to 'no method chosen'; a proof made for the old method is dropped."""
        self._require_awaiting_payment("change the payment method")
        self.payment_method = PaymentMethod.PENDING
        self.payment_proof = None
        self._touch()

    def attach_payment_proof(self, file_ref: str | None, file_type: str | None) -> PaymentProof:
        self._require_awaiting_payment("upload a payment proof")
        if self.payment_method == PaymentMethod.PENDING:
            raise ValidationError("Choose a payment method before uploading a proof")

        if self.payment_method.is_cash:
            proof = PaymentProof.cash_on_pickup()
        else:
            if not file_ref or not file_type:
                raise ValidationError("A payment proof file is required")
            proof = PaymentProof(file_type=file_type, file_ref=file_ref)

        self.payment_proof = proof
        self._touch()
        return proof

    def is_payment_expired(self, now: datetime, timeout: timedelta) -> bool:
        """True if the payment timer ran out without any proof."""
        return (
            self.status == OrderStatus.PENDING_PAYMENT
            and self.payment_started_at is not None
            and self.payment_started_at + timeout < now
            and self.payment_proof is None
        )

    # --- Deletion -------------------------------------------------------------

    def ensure_deletable(self) -> None:
        if self.status != OrderStatus.CANCELLED:
            raise CannotDelete(
                f"Order #{self.id} is {self.status.value}; only cancelled orders can be deleted"
            )

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def display_total(self) -> Money:
        """Stored total when present, else the sum of the line items."""
        if self.total_amount is None or self.total_amount.is_zero:
            return self.total
        return self.total_amount

    @property
    def has_payment_proof(self) -> bool:
        return self.payment_proof is not None

    # --- Internal helpers -----------------------------------------------------

    def _check_transition(self, target: OrderStatus) -> None:
        if not self.can_transition_to(target):
            raise IllegalStatusTransition(self.status.value, target.value)

    def _check_payment_verifiable(self, target: OrderStatus) -> None:
        if self.payment_method == PaymentMethod.PENDING:
            raise IllegalStatusTransition(
                self.status.value, target.value, "no payment method selected"
            )
        if not self.payment_method.is_cash and self.payment_proof is None:
            raise PaymentProofRequired(self.status.value, target.value)

    def _require_awaiting_payment(self, action: str) -> None:
        if self.status != OrderStatus.PENDING_PAYMENT:
            raise ValidationError(
                f"Cannot {action}: order #{self.id} is {self.status.value}"
            )

    def _set_status(self, target: OrderStatus) -> None:
        self.status = target
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
