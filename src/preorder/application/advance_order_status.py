"""Application services: Advance Order Status, single and bulk.

Staff move orders along pending_payment -> payment_received -> preparing
-> ready -> picked_up, or cancel them.  Picking up releases the reserved
stock, cancelling restores it; the other steps only change the status.
"""

from __future__ import annotations

import logging

from preorder.application.dto import BulkUpdateResult
from preorder.domain.exceptions import DomainException, EntityNotFoundError
from preorder.domain.model.order import OrderStatus
from preorder.domain.repository.unit_of_work import UnitOfWork
from preorder.domain.service.order_lifecycle_service import OrderLifecycleService

logger = logging.getLogger(__name__)


class AdvanceOrderStatusHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, new_status: str) -> bool:
        """Apply one status change in its own transaction.

        Returns False only for the no-op of cancelling a cancelled order.
        """
        target = OrderStatus.parse(new_status)

        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, for_update=True)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            changed = OrderLifecycleService(uow.stock).transition(order, target)
            if changed:
                uow.orders.save(order)
                uow.commit()
            return changed


class BulkAdvanceOrderStatusHandler:
    """Apply the same status change to many orders.

    Each order gets its own transaction: one order failing (illegal
    transition, missing proof, lock timeout) is reported and the others
    still go through.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._single = AdvanceOrderStatusHandler(uow)

    def handle(self, order_ids: list[int], new_status: str) -> BulkUpdateResult:
        OrderStatus.parse(new_status)

        updated: list[int] = []
        skipped: list[int] = []
        failed: dict[int, str] = {}

        for order_id in dict.fromkeys(order_ids):
            try:
                if self._single.handle(order_id, new_status):
                    updated.append(order_id)
                else:
                    skipped.append(order_id)
            except DomainException as exc:
                logger.warning("Bulk %s: order #%s failed: %s", new_status, order_id, exc)
                failed[order_id] = str(exc)

        logger.info(
            "Bulk %s: %d updated, %d skipped, %d failed",
            new_status,
            len(updated),
            len(skipped),
            len(failed),
        )
        return BulkUpdateResult(updated=updated, skipped=skipped, failed=failed)
