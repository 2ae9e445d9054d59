"""Abstract repository for Order aggregate.

Items and the payment proof belong to the aggregate and are loaded and
saved with it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from preorder.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_request_token(self, token: str) -> Order | None:
        """Return the order placed with a checkout request token, or None."""

    @abstractmethod
    def list_by_phone(self, phone: str) -> list[Order]:
        """Return a customer's orders, newest first."""

    @abstractmethod
    def list_for_batch(self, batch_id: int, status: OrderStatus | None = None) -> list[Order]:
        """Return the orders of a batch, oldest first, optionally only those
        in one status."""

    @abstractmethod
    def list_expired_payment_ids(self, started_before: datetime) -> list[int]:
        """IDs of orders awaiting payment whose timer started before the
        cutoff and that have no payment proof."""

    @abstractmethod
    def exists_for_batch(self, batch_id: int) -> bool:
        """True if any order references the batch."""

    @abstractmethod
    def exists_for_product(self, product_id: int) -> bool:
        """True if any order item references the product."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order with its items and assign IDs."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist status, payment fields and proof of an existing order."""

    @abstractmethod
    def delete(self, order_id: int) -> None:
        """Remove an order with its items and proof."""
