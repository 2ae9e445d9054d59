"""Domain service: Order Lifecycle.

The single place where an order status change and its stock effect are
applied together.  Manual cancellation, bulk updates and the payment
timeout sweep all come through here, so each order item is settled
exactly once: restored on cancellation or released on pickup.
"""

from __future__ import annotations

import logging

from preorder.domain.model.order import Order, OrderStatus, StockEffect
from preorder.domain.repository.stock_repository import StockRepository
from preorder.domain.service.stock_ledger_service import StockLedgerService

logger = logging.getLogger(__name__)


class OrderLifecycleService:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._ledger = StockLedgerService(stock_repo)

    def transition(self, order: Order, target: OrderStatus) -> bool:
        """Move *order* to *target* and apply the stock effect.

        Returns False only when cancelling an order that is already
        cancelled (nothing happens).  Illegal transitions raise before any
        stock is touched.
        """
        if target == OrderStatus.CANCELLED:
            return self.cancel(order)

        effect = order.advance_to(target)
        if effect == StockEffect.RELEASE:
            self._ledger.release_for_order(order)
        logger.info("Order #%s moved to %s", order.id, target.value)
        return True

    def cancel(self, order: Order) -> bool:
        """Cancel *order* and restore its reserved stock.

        The status check happens first; a second cancellation is a no-op
        and restores nothing.
        """
        if not order.cancel():
            logger.info("Order #%s already cancelled, nothing to restore", order.id)
            return False

        self._ledger.restore_for_order(order)
        logger.info("Order #%s cancelled, stock restored", order.id)
        return True
