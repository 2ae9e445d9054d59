"""Tests for the AdvanceOrderStatus use cases, single and bulk."""

import pytest

from preorder.application.advance_order_status import (
    AdvanceOrderStatusHandler,
    BulkAdvanceOrderStatusHandler,
)
from preorder.application.dto import OrderItemSpec
from preorder.application.place_order import PlaceOrderHandler
from preorder.domain.exceptions import (
    EntityNotFoundError,
    IllegalStatusTransition,
    PaymentProofRequired,
    ValidationError,
)
from preorder.domain.model.order import OrderStatus


def _place(uow, qty: int = 1, method: str = "cod", product_id: int = 1) -> int:
    return PlaceOrderHandler(uow).handle(
        1, "Budi", "081234567890", [OrderItemSpec(product_id, qty)], payment_method=method
    )


class TestAdvanceOrderStatus:

    def test_full_lifecycle_releases_stock(self, uow):
        order_id = _place(uow, qty=3)
        handler = AdvanceOrderStatusHandler(uow)
        for status in ("payment_received", "preparing", "ready", "picked_up"):
            assert handler.handle(order_id, status) is True

        entry = uow.stock.get(1, 1)
        assert (entry.available, entry.reserved) == (2, 0)
        assert uow.orders.get_by_id(order_id).status == OrderStatus.PICKED_UP

    def test_illegal_jump_changes_nothing(self, uow):
        order_id = _place(uow)
        with pytest.raises(IllegalStatusTransition):
            AdvanceOrderStatusHandler(uow).handle(order_id, "ready")
        assert uow.orders.get_by_id(order_id).status == OrderStatus.PENDING_PAYMENT

    def test_verification_needs_proof(self, uow):
        order_id = _place(uow, method="qris")
        with pytest.raises(PaymentProofRequired):
            AdvanceOrderStatusHandler(uow).handle(order_id, "payment_received")

    def test_cancel_through_advance(self, uow):
        order_id = _place(uow, qty=2)
        handler = AdvanceOrderStatusHandler(uow)
        assert handler.handle(order_id, "cancelled") is True
        assert handler.handle(order_id, "cancelled") is False
        assert uow.stock.get(1, 1).available == 5

    def test_unknown_status(self, uow):
        with pytest.raises(ValidationError):
            AdvanceOrderStatusHandler(uow).handle(1, "shipped")

    def test_unknown_order(self, uow):
        with pytest.raises(EntityNotFoundError):
            AdvanceOrderStatusHandler(uow).handle(99, "preparing")


class TestBulkAdvance:

    def test_failures_do_not_block_others(self, uow):
        cod = _place(uow, method="cod")
        needs_proof = _place(uow, method="transfer")
        result = BulkAdvanceOrderStatusHandler(uow).handle([cod, needs_proof, 99], "payment_received")

        assert result.updated == [cod]
        assert set(result.failed) == {needs_proof, 99}
        assert uow.orders.get_by_id(cod).status == OrderStatus.PAYMENT_RECEIVED
        assert uow.orders.get_by_id(needs_proof).status == OrderStatus.PENDING_PAYMENT

    def test_bulk_cancel_restores_each_order_once(self, uow):
        first = _place(uow, qty=2)
        second = _place(uow, qty=3, product_id=2)
        handler = BulkAdvanceOrderStatusHandler(uow)

        result = handler.handle([first, second, first], "cancelled")
        assert result.updated == [first, second]

        again = handler.handle([first, second], "cancelled")
        assert again.skipped == [first, second]
        assert uow.stock.get(1, 1).available == 5
        assert uow.stock.get(1, 2).available == 10

    def test_unknown_status_rejected_up_front(self, uow):
        with pytest.raises(ValidationError):
            BulkAdvanceOrderStatusHandler(uow).handle([1], "lost")
