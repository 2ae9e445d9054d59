"""Application services for the customer's payment step.

The customer reaches the payment page (timer starts), picks a method,
possibly changes it, and uploads a proof.  All of this is only possible
while the order is still awaiting payment.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.model.order import Order, PaymentMethod
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _load_locked(uow: UnitOfWork, order_id: int) -> Order:
    order = uow.orders.get_by_id(order_id, for_update=True)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order


class StartPaymentHandler:
    """Start the payment timer the first time the payment step is shown."""

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = _utcnow) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int) -> datetime:
        with self._uow as uow:
            order = _load_locked(uow, order_id)
            if order.start_payment_timer(self._clock()):
                uow.orders.save(order)
                uow.commit()
                logger.info("Payment timer started for order #%s", order_id)
            return order.payment_started_at  # type: ignore[return-value]


class SetPaymentMethodHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, method: str) -> None:
        payment_method = PaymentMethod.parse(method)
        with self._uow as uow:
            order = _load_locked(uow, order_id)
            order.select_payment_method(payment_method)
            uow.orders.save(order)
            uow.commit()


class ResetPaymentMethodHandler:
    """Let the customer choose again; any uploaded proof is discarded."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> None:
        with self._uow as uow:
            order = _load_locked(uow, order_id)
            order.reset_payment_method()
            uow.orders.save(order)
            uow.commit()


class SubmitPaymentProofHandler:
    """Record the proof of payment.

    The file itself is stored elsewhere; only its reference is kept.  For
    cash on pickup no file is needed and a confirmation marker is stored.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, file_ref: str | None = None, file_type: str | None = None) -> None:
        with self._uow as uow:
            order = _load_locked(uow, order_id)
            proof = order.attach_payment_proof(file_ref, file_type)
            uow.orders.save(order)
            uow.commit()
        logger.info("Payment proof (%s) recorded for order #%s", proof.file_type, order_id)
