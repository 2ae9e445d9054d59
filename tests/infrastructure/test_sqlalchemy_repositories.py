"""Integration tests: use cases running on the SQLAlchemy repositories (SQLite)."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from preorder.application.advance_order_status import AdvanceOrderStatusHandler
from preorder.application.cancel_order import CancelOrderHandler
from preorder.application.delete_batch import DeleteBatchHandler
from preorder.application.delete_order import DeleteOrderHandler
from preorder.application.delete_product import DeleteProductHandler
from preorder.application.dto import OrderItemSpec, StockSpec
from preorder.application.create_batch import CreateBatchHandler
from preorder.application.duplicate_batch import DuplicateBatchHandler
from preorder.application.edit_stock import EditStockHandler
from preorder.application.payment import (
    ResetPaymentMethodHandler,
    SetPaymentMethodHandler,
    StartPaymentHandler,
    SubmitPaymentProofHandler,
)
from preorder.application.place_order import PlaceOrderHandler
from preorder.application.show_batches import ShowBatchStockHandler, ShowOpenBatchHandler
from preorder.application.show_order import LookupOrdersHandler
from preorder.application.sweep_expired_orders import SweepExpiredOrdersHandler
from preorder.domain.exceptions import CannotDelete, InsufficientStock, InvalidStockEdit
from preorder.domain.model.order import OrderStatus, PaymentMethod
from preorder.domain.model.value_objects import Money
from preorder.infrastructure.persistence.orm import OrderItemRecord, StockEntryRecord

STARTED = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


def _place(make_uow, batch_id, *specs, **kwargs) -> int:
    return PlaceOrderHandler(make_uow()).handle(
        batch_id, "Budi", kwargs.pop("phone", "081234567890"), list(specs), **kwargs
    )


def _stock(make_uow, batch_id, product_id):
    with make_uow() as uow:
        return uow.stock.get(batch_id, product_id)


def _order(make_uow, order_id):
    with make_uow() as uow:
        return uow.orders.get_by_id(order_id)


class TestOrderPersistence:

    def test_order_round_trip(self, make_uow, open_batch):
        order_id = _place(
            make_uow, open_batch, OrderItemSpec(1, 2), OrderItemSpec(2, 1, "18000"),
            customer_address="Jl. Merdeka 1", payment_method="transfer",
        )
        order = _order(make_uow, order_id)

        assert order.status == OrderStatus.PENDING_PAYMENT
        assert order.payment_method == PaymentMethod.TRANSFER
        assert str(order.customer.phone) == "+6281234567890"
        assert order.customer.address == "Jl. Merdeka 1"
        assert order.total_amount == Money(Decimal("48000"))
        assert [(i.product_name, i.quantity.value) for i in order.items] == [("Orange", 2), ("Apple", 1)]
        assert all(i.id is not None for i in order.items)
        assert order.created_at.tzinfo is not None

    def test_reservation_committed(self, make_uow, open_batch):
        _place(make_uow, open_batch, OrderItemSpec(1, 3))
        entry = _stock(make_uow, open_batch, 1)
        assert (entry.available, entry.reserved) == (2, 3)

    def test_rejected_checkout_leaves_no_trace(self, make_uow, open_batch):
        with pytest.raises(InsufficientStock):
            _place(make_uow, open_batch, OrderItemSpec(2, 3), OrderItemSpec(1, 10))

        assert _stock(make_uow, open_batch, 2).available == 10
        with make_uow() as uow:
            assert uow.orders.list_for_batch(open_batch) == []

    def test_request_token_is_idempotent(self, make_uow, open_batch):
        first = _place(make_uow, open_batch, OrderItemSpec(1, 1), request_token="abc")
        second = _place(make_uow, open_batch, OrderItemSpec(1, 1), request_token="abc")
        assert first == second
        assert _stock(make_uow, open_batch, 1).reserved == 1

    def test_lookup_newest_first(self, make_uow, open_batch):
        first = _place(make_uow, open_batch, OrderItemSpec(1, 1))
        second = _place(make_uow, open_batch, OrderItemSpec(2, 1), phone="+6281234567890")
        found = LookupOrdersHandler(make_uow()).handle("0812-3456-7890")
        assert [o.id for o in found] == [second, first]


class TestPaymentProofPersistence:

    def test_proof_replaced_in_place(self, make_uow, open_batch):
        order_id = _place(make_uow, open_batch, OrderItemSpec(1, 1))
        SetPaymentMethodHandler(make_uow()).handle(order_id, "qris")
        SubmitPaymentProofHandler(make_uow()).handle(order_id, "proofs/a.jpg", "image/jpeg")
        SubmitPaymentProofHandler(make_uow()).handle(order_id, "proofs/b.png", "image/png")

        proof = _order(make_uow, order_id).payment_proof
        assert (proof.file_ref, proof.file_type) == ("proofs/b.png", "image/png")

    def test_reset_method_deletes_proof(self, make_uow, open_batch):
        order_id = _place(make_uow, open_batch, OrderItemSpec(1, 1))
        SetPaymentMethodHandler(make_uow()).handle(order_id, "transfer")
        SubmitPaymentProofHandler(make_uow()).handle(order_id, "proofs/a.jpg", "image/jpeg")
        ResetPaymentMethodHandler(make_uow()).handle(order_id)

        order = _order(make_uow, order_id)
        assert order.payment_method == PaymentMethod.PENDING
        assert order.payment_proof is None

    def test_cancel_deletes_proof(self, make_uow, open_batch):
        order_id = _place(make_uow, open_batch, OrderItemSpec(1, 1))
        SetPaymentMethodHandler(make_uow()).handle(order_id, "cod")
        SubmitPaymentProofHandler(make_uow()).handle(order_id)
        CancelOrderHandler(make_uow()).handle(order_id)

        assert _order(make_uow, order_id).payment_proof is None


class TestLifecycleOnDatabase:

    def test_scenarios(self, make_uow, open_batch):
        # Reserve 3 of 5, cancel, then a full lifecycle releases the sale.
        cancelled = _place(make_uow, open_batch, OrderItemSpec(1, 3), payment_method="cod")
        CancelOrderHandler(make_uow()).handle(cancelled)
        entry = _stock(make_uow, open_batch, 1)
        assert (entry.available, entry.reserved) == (5, 0)

        sold = _place(make_uow, open_batch, OrderItemSpec(1, 3), payment_method="cod")
        for status in ("payment_received", "preparing", "ready", "picked_up"):
            AdvanceOrderStatusHandler(make_uow()).handle(sold, status)
        entry = _stock(make_uow, open_batch, 1)
        assert (entry.available, entry.reserved) == (2, 0)

    def test_stock_edit_below_reserved(self, make_uow, open_batch):
        _place(make_uow, open_batch, OrderItemSpec(1, 3))
        with pytest.raises(InvalidStockEdit):
            EditStockHandler(make_uow()).handle(open_batch, 1, 1)
        line = EditStockHandler(make_uow()).handle(open_batch, 1, 8)
        assert (line.total, line.available) == (8, 5)

    def test_sweep_cancels_expired_orders_once(self, make_uow, open_batch):
        expired = _place(make_uow, open_batch, OrderItemSpec(1, 2))
        fresh = _place(make_uow, open_batch, OrderItemSpec(2, 2))
        StartPaymentHandler(make_uow(), clock=lambda: STARTED).handle(expired)
        StartPaymentHandler(make_uow(), clock=lambda: STARTED + timedelta(minutes=10)).handle(fresh)

        now = STARTED + timedelta(minutes=20)
        sweep = SweepExpiredOrdersHandler(make_uow(), clock=lambda: now)
        assert sweep.handle() == [expired]
        assert sweep.handle() == []

        assert _order(make_uow, expired).status == OrderStatus.CANCELLED
        assert _order(make_uow, fresh).status == OrderStatus.PENDING_PAYMENT
        assert _stock(make_uow, open_batch, 1).available == 5

    def test_delete_cancelled_order_cascades(self, make_uow, open_batch):
        order_id = _place(make_uow, open_batch, OrderItemSpec(1, 1))
        CancelOrderHandler(make_uow()).handle(order_id)
        DeleteOrderHandler(make_uow()).handle(order_id)

        uow = make_uow()
        with uow:
            assert uow.orders.get_by_id(order_id) is None
            assert uow.session.query(OrderItemRecord).count() == 0


class TestBatchPersistence:

    def test_duplicate_and_delete_draft(self, make_uow, open_batch):
        _place(make_uow, open_batch, OrderItemSpec(1, 2))
        copy = DuplicateBatchHandler(make_uow()).handle(open_batch)

        _, lines = ShowBatchStockHandler(make_uow()).handle(copy.id)
        assert {(l.product_name, l.available, l.reserved) for l in lines} == {
            ("Orange", 3, 0),
            ("Apple", 10, 0),
        }

        DeleteBatchHandler(make_uow()).handle(copy.id)
        uow = make_uow()
        with uow:
            remaining = uow.session.query(StockEntryRecord).filter_by(batch_id=copy.id).count()
        assert remaining == 0

    def test_batch_with_orders_cannot_be_deleted(self, make_uow, open_batch):
        _place(make_uow, open_batch, OrderItemSpec(1, 1))
        with pytest.raises(CannotDelete):
            DeleteBatchHandler(make_uow()).handle(open_batch)

    def test_open_batch_menu(self, make_uow, open_batch):
        _place(make_uow, open_batch, OrderItemSpec(1, 5))
        menu = ShowOpenBatchHandler(make_uow()).handle()
        assert menu.batch.id == open_batch
        assert [(m.product_name, m.sold_out) for m in menu.menu] == [("Apple", False), ("Orange", True)]

    def test_product_on_open_menu_cannot_be_deleted(self, make_uow, open_batch):
        with pytest.raises(CannotDelete):
            DeleteProductHandler(make_uow()).handle(1)

    def test_new_batch_stock_starts_unreserved(self, make_uow, open_batch):
        batch = CreateBatchHandler(make_uow()).handle("Week 13", date(2026, 3, 27), [StockSpec(2, 7)])
        entry = _stock(make_uow, batch.id, 2)
        assert (entry.available, entry.reserved, entry.product_name) == (7, 0, "Apple")
