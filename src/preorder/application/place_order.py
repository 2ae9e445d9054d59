"""Application service: Place Order use case (the reservation transaction).

Validates the requested quantities against the batch stock and creates
the order in a single unit of work:

1. Re-check that the batch is still OPEN (it may have closed since the
   customer loaded the menu).  The batch row is share-locked: checkouts
   do not wait for each other, only for a publish or close in flight.
2. Lock every requested stock row and collect shortfalls.
3. Insert the order and its items, reserve every line.
4. Commit.

Any failure rolls the whole unit of work back: either the order, its
items and the reservation all exist, or none of them do.  Concurrent
checkouts for the same product serialize on the row lock, so whoever
commits first gets the stock.
"""

from __future__ import annotations

import logging

from preorder.application.dto import OrderItemSpec
from preorder.domain.exceptions import (
    BatchNotOpen,
    EntityNotFoundError,
    PersistenceError,
    ValidationError,
)
from preorder.domain.model.order import Customer, Order, OrderItem, PaymentMethod
from preorder.domain.model.value_objects import Money, Quantity
from preorder.domain.repository.unit_of_work import UnitOfWork
from preorder.domain.service.stock_ledger_service import StockLedgerService

logger = logging.getLogger(__name__)


class PlaceOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        batch_id: int,
        customer_name: str,
        customer_phone: str,
        item_specs: list[OrderItemSpec],
        customer_address: str | None = None,
        payment_method: str = PaymentMethod.PENDING.value,
        request_token: str | None = None,
    ) -> int:
        """Place an order and return its ID.

        ``request_token`` makes a retried checkout safe: if an order was
        already placed with the same token, its ID is returned and no stock
        is reserved again.
        """
        # Cheap validation first, before any lock is taken.
        customer = Customer.create(customer_name, customer_phone, customer_address)
        method = PaymentMethod.parse(payment_method)
        if not item_specs:
            raise ValidationError("Order must contain at least one item")
        quantities = {spec.product_id: Quantity(spec.quantity) for spec in item_specs}
        if len(quantities) != len(item_specs):
            raise ValidationError("Each product may appear only once per order")
        prices = {
            spec.product_id: Money.of(spec.unit_price) if spec.unit_price is not None else None
            for spec in item_specs
        }

        try:
            return self._place(
                batch_id, customer, method, item_specs, quantities, prices, request_token
            )
        except PersistenceError:
            if not request_token:
                raise
            # A concurrent retry with the same token may have committed first;
            # the unique token then rejects this insert.
            existing_id = self._placed_with(request_token)
            if existing_id is None:
                raise
            logger.info(
                "Checkout token %s was placed concurrently as order #%s", request_token, existing_id
            )
            return existing_id

    def _place(
        self,
        batch_id: int,
        customer: Customer,
        method: PaymentMethod,
        item_specs: list[OrderItemSpec],
        quantities: dict[int, Quantity],
        prices: dict[int, Money | None],
        request_token: str | None,
    ) -> int:
        with self._uow as uow:
            if request_token:
                existing = uow.orders.get_by_request_token(request_token)
                if existing is not None:
                    logger.info(
                        "Checkout token %s already placed order #%s", request_token, existing.id
                    )
                    return existing.id  # type: ignore[return-value]

            batch = uow.batches.get_by_id(batch_id, for_share=True)
            if batch is None:
                raise EntityNotFoundError(f"Batch #{batch_id} not found")
            if not batch.is_open:
                raise BatchNotOpen(batch_id)

            ledger = StockLedgerService(uow.stock)
            entries = ledger.reserve(
                batch_id, {pid: qty.value for pid, qty in quantities.items()}
            )

            items = [
                OrderItem(
                    product_id=spec.product_id,
                    product_name=entries[spec.product_id].product_name,
                    quantity=quantities[spec.product_id],
                    price_per_item=prices[spec.product_id] or self._catalog_price(uow, spec.product_id),
                )
                for spec in item_specs
            ]

            order = Order.create(
                batch_id=batch_id,
                customer=customer,
                items=items,
                payment_method=method,
                request_token=request_token,
            )
            uow.orders.add(order)
            uow.commit()

        logger.info(
            "Order #%s placed in batch %s for %s (%s)",
            order.id,
            batch_id,
            customer.name,
            order.total,
        )
        return order.id  # type: ignore[return-value]

    @staticmethod
    def _catalog_price(uow: UnitOfWork, product_id: int) -> Money:
        product = uow.products.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product.price

    def _placed_with(self, request_token: str) -> int | None:
        with self._uow as uow:
            existing = uow.orders.get_by_request_token(request_token)
            return existing.id if existing is not None else None
