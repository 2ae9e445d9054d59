"""Application service: Delete Order use case (cancelled orders only)."""

from __future__ import annotations

import logging

from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DeleteOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> None:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, for_update=True)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            order.ensure_deletable()
            uow.orders.delete(order_id)
            uow.commit()
        logger.info("Order #%s deleted", order_id)
