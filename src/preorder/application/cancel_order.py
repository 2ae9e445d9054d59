"""Application service: Cancel Order use case.

Every cancellation, whether by the customer, by staff, in bulk or by the
payment timeout sweep, ends in ``OrderLifecycleService.cancel`` inside
its own unit of work: restore all items, drop the payment proof, set the
status, commit.  Cancelling an already cancelled order changes nothing.
"""

from __future__ import annotations

from preorder.domain.exceptions import EntityNotFoundError, IllegalStatusTransition
from preorder.domain.model.order import OrderStatus
from preorder.domain.repository.unit_of_work import UnitOfWork
from preorder.domain.service.order_lifecycle_service import OrderLifecycleService


class CancelOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, by_customer: bool = False) -> bool:
        """Cancel an order and restore its stock.

        Customers may only cancel while the order awaits payment; staff
        may cancel any order that is not finished.  Returns False if the
        order was already cancelled.
        """
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, for_update=True)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            if (
                by_customer
                and order.status not in (OrderStatus.PENDING_PAYMENT, OrderStatus.CANCELLED)
            ):
                raise IllegalStatusTransition(
                    order.status.value,
                    OrderStatus.CANCELLED.value,
                    "payment already verified, please contact the shop",
                )

            cancelled = OrderLifecycleService(uow.stock).cancel(order)
            if cancelled:
                uow.orders.save(order)
                uow.commit()
            return cancelled
