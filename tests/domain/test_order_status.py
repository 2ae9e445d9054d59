"""Unit tests for the Order aggregate: status machine and payment step."""

from datetime import datetime, timedelta, timezone

import pytest

from preorder.domain.exceptions import (
    CannotDelete,
    IllegalStatusTransition,
    PaymentProofRequired,
    ValidationError,
)
from preorder.domain.model.order import (
    COD_CONFIRMATION,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    StockEffect,
)
from preorder.domain.model.value_objects import Money, Quantity

NOW = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


def _item(product_id: int = 1, qty: int = 2, price: str = "15000", name: str = "Orange") -> OrderItem:
    return OrderItem(
        product_id=product_id,
        product_name=name,
        quantity=Quantity(qty),
        price_per_item=Money.of(price),
    )


def _order(method: PaymentMethod = PaymentMethod.PENDING, items=None) -> Order:
    order = Order.create(
        batch_id=1,
        customer=Customer.create("Budi", "081234567890"),
        items=items or [_item()],
        payment_method=method,
    )
    order.id = 1
    return order


def _paid_order() -> Order:
    order = _order(PaymentMethod.QRIS)
    order.attach_payment_proof("proofs/1.jpg", "image/jpeg")
    order.advance_to(OrderStatus.PAYMENT_RECEIVED)
    return order


class TestOrderCreate:

    def test_new_order_awaits_payment(self):
        order = _order()
        assert order.status == OrderStatus.PENDING_PAYMENT
        assert order.payment_method == PaymentMethod.PENDING

    def test_total_amount_is_stored(self):
        order = _order(items=[_item(1, 2, "15000"), _item(2, 1, "20000", "Apple")])
        assert order.total_amount == Money.of("50000")
        assert str(order.display_total) == "Rp50.000"

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create(batch_id=1, customer=Customer.create("Budi", "0812345678"), items=[])

    def test_duplicate_product_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            _order(items=[_item(1), _item(1)])

    def test_too_many_lines_rejected(self):
        items = [_item(i, 1, name=f"P{i}") for i in range(1, 52)]
        with pytest.raises(ValidationError, match="Maximum 50"):
            _order(items=items)

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="no price"):
            _order(items=[_item(price="0")])

    def test_display_total_falls_back_to_items(self):
        order = _order()
        order.total_amount = None
        assert order.display_total == Money.of("30000")


class TestOrderTransitions:

    def test_full_happy_path(self):
        order = _paid_order()
        assert order.advance_to(OrderStatus.PREPARING) == StockEffect.NONE
        assert order.advance_to(OrderStatus.READY) == StockEffect.NONE
        assert order.advance_to(OrderStatus.PICKED_UP) == StockEffect.RELEASE
        assert order.status.is_terminal

    def test_cannot_skip_steps(self):
        order = _paid_order()
        with pytest.raises(IllegalStatusTransition, match="payment_received to ready"):
            order.advance_to(OrderStatus.READY)

    def test_cannot_move_backwards(self):
        order = _paid_order()
        with pytest.raises(IllegalStatusTransition):
            order.advance_to(OrderStatus.PENDING_PAYMENT)

    def test_advance_cannot_cancel(self):
        with pytest.raises(ValidationError, match="cancel"):
            _order().advance_to(OrderStatus.CANCELLED)

    def test_payment_received_requires_proof(self):
        order = _order(PaymentMethod.TRANSFER)
        with pytest.raises(PaymentProofRequired):
            order.advance_to(OrderStatus.PAYMENT_RECEIVED)
        assert order.status == OrderStatus.PENDING_PAYMENT

    def test_payment_received_requires_method(self):
        with pytest.raises(IllegalStatusTransition, match="no payment method"):
            _order().advance_to(OrderStatus.PAYMENT_RECEIVED)

    def test_cod_needs_no_proof(self):
        order = _order(PaymentMethod.COD)
        order.advance_to(OrderStatus.PAYMENT_RECEIVED)
        assert order.status == OrderStatus.PAYMENT_RECEIVED


class TestOrderCancel:

    def test_cancel_pending_order(self):
        order = _order()
        assert order.cancel() is True
        assert order.status == OrderStatus.CANCELLED

    def test_cancel_drops_payment_proof(self):
        order = _order(PaymentMethod.QRIS)
        order.attach_payment_proof("proofs/1.jpg", "image/png")
        order.cancel()
        assert order.payment_proof is None

    def test_cancel_twice_is_noop(self):
        order = _order()
        order.cancel()
        assert order.cancel() is False
        assert order.status == OrderStatus.CANCELLED

    def test_cancel_while_preparing(self):
        order = _paid_order()
        order.advance_to(OrderStatus.PREPARING)
        assert order.cancel() is True

    def test_cannot_cancel_ready_order(self):
        order = _paid_order()
        order.advance_to(OrderStatus.PREPARING)
        order.advance_to(OrderStatus.READY)
        with pytest.raises(IllegalStatusTransition):
            order.cancel()

    def test_cannot_cancel_picked_up_order(self):
        order = _paid_order()
        for status in (OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.PICKED_UP):
            order.advance_to(status)
        with pytest.raises(IllegalStatusTransition):
            order.cancel()


class TestPaymentStep:

    def test_timer_starts_once(self):
        order = _order()
        assert order.start_payment_timer(NOW) is True
        assert order.start_payment_timer(NOW + timedelta(minutes=5)) is False
        assert order.payment_started_at == NOW

    def test_select_method(self):
        order = _order()
        order.select_payment_method(PaymentMethod.TRANSFER)
        assert order.payment_method == PaymentMethod.TRANSFER

    def test_pending_is_not_selectable(self):
        with pytest.raises(ValidationError, match="Choose a payment method"):
            _order().select_payment_method(PaymentMethod.PENDING)

    def test_reset_method_drops_proof(self):
        order = _order(PaymentMethod.QRIS)
        order.attach_payment_proof("proofs/1.jpg", "image/jpeg")
        order.reset_payment_method()
        assert order.payment_method == PaymentMethod.PENDING
        assert order.payment_proof is None

    def test_cod_proof_is_confirmation_marker(self):
        order = _order(PaymentMethod.COD)
        proof = order.attach_payment_proof(None, None)
        assert proof.file_type == COD_CONFIRMATION
        assert proof.file_ref is None

    def test_proof_needs_file_for_transfer(self):
        order = _order(PaymentMethod.TRANSFER)
        with pytest.raises(ValidationError, match="file is required"):
            order.attach_payment_proof(None, None)

    def test_proof_needs_method(self):
        with pytest.raises(ValidationError, match="Choose a payment method"):
            _order().attach_payment_proof("proofs/1.jpg", "image/jpeg")

    def test_payment_changes_rejected_after_verification(self):
        order = _paid_order()
        with pytest.raises(ValidationError, match="payment_received"):
            order.select_payment_method(PaymentMethod.COD)

    def test_payment_expiry(self):
        order = _order()
        order.start_payment_timer(NOW)
        timeout = timedelta(minutes=15)
        assert not order.is_payment_expired(NOW + timedelta(minutes=14), timeout)
        assert order.is_payment_expired(NOW + timedelta(minutes=16), timeout)

    def test_proof_stops_expiry(self):
        order = _order(PaymentMethod.QRIS)
        order.start_payment_timer(NOW)
        order.attach_payment_proof("proofs/1.jpg", "image/jpeg")
        assert not order.is_payment_expired(NOW + timedelta(hours=1), timedelta(minutes=15))

    def test_no_timer_never_expires(self):
        assert not _order().is_payment_expired(NOW + timedelta(days=1), timedelta(minutes=15))


class TestOrderDeletion:

    def test_only_cancelled_orders_deletable(self):
        order = _order()
        with pytest.raises(CannotDelete):
            order.ensure_deletable()
        order.cancel()
        order.ensure_deletable()


class TestStatusParsing:

    def test_parse_known_status(self):
        assert OrderStatus.parse("ready") == OrderStatus.READY

    def test_parse_unknown_status(self):
        with pytest.raises(ValidationError, match="Unknown order status"):
            OrderStatus.parse("shipped")

    def test_parse_unknown_method(self):
        with pytest.raises(ValidationError, match="Unknown payment method"):
            PaymentMethod.parse("bitcoin")
