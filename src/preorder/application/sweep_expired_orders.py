"""Application service: cancel orders whose payment timer ran out.

Meant to be triggered periodically (e.g. every minute by cron).  It is a
plain callable with no scheduling of its own.

Candidates are found with one query; each one is then re-checked under
its row lock and cancelled in its own unit of work through the same
path as a manual cancellation.  An order that got a proof, was paid or
was cancelled in the meantime is left alone, so running the sweep twice
cancels every expired order exactly once.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from preorder.domain.exceptions import DomainException
from preorder.domain.repository.unit_of_work import UnitOfWork
from preorder.domain.service.order_lifecycle_service import OrderLifecycleService

logger = logging.getLogger(__name__)

PAYMENT_TIMEOUT = timedelta(minutes=15)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SweepExpiredOrdersHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        timeout: timedelta = PAYMENT_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow = uow
        self._timeout = timeout
        self._clock = clock

    def handle(self) -> list[int]:
        """Cancel every expired order; return the IDs cancelled by this run."""
        now = self._clock()

        with self._uow as uow:
            candidates = uow.orders.list_expired_payment_ids(now - self._timeout)

        cancelled: list[int] = []
        for order_id in candidates:
            try:
                if self._cancel_if_expired(order_id, now):
                    cancelled.append(order_id)
            except DomainException:
                # One broken order must not stop the sweep.
                logger.exception("Could not cancel expired order #%s", order_id)

        if cancelled:
            logger.info("Cancelled %d expired orders: %s", len(cancelled), cancelled)
        return cancelled

    def _cancel_if_expired(self, order_id: int, now: datetime) -> bool:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, for_update=True)
            if order is None or not order.is_payment_expired(now, self._timeout):
                return False

            if not OrderLifecycleService(uow.stock).cancel(order):
                return False
            uow.orders.save(order)
            uow.commit()
            return True
