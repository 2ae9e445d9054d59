"""Application services: order queries."""

from __future__ import annotations

from preorder.application.dto import OrderDTO, OrderSummaryDTO
from preorder.application.retry import retry_read
from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.model.order import OrderStatus
from preorder.domain.model.value_objects import PhoneNumber
from preorder.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        return retry_read(lambda: self._load(order_id))

    def _load(self, order_id: int) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            return OrderDTO.from_order(order)


class LookupOrdersHandler:
    """Find a customer's orders by the phone number used at checkout."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, phone: str) -> list[OrderSummaryDTO]:
        normalized = str(PhoneNumber.parse(phone))
        return retry_read(lambda: self._load(normalized))

    def _load(self, phone: str) -> list[OrderSummaryDTO]:
        with self._uow as uow:
            return [OrderSummaryDTO.from_order(o) for o in uow.orders.list_by_phone(phone)]


class ListBatchOrdersHandler:
    """Staff view: the orders placed in one batch, optionally by status."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int, status: str | None = None) -> list[OrderSummaryDTO]:
        wanted = OrderStatus.parse(status) if status is not None else None
        return retry_read(lambda: self._load(batch_id, wanted))

    def _load(self, batch_id: int, status: OrderStatus | None) -> list[OrderSummaryDTO]:
        with self._uow as uow:
            return [
                OrderSummaryDTO.from_order(o)
                for o in uow.orders.list_for_batch(batch_id, status=status)
            ]
