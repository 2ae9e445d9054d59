"""Abstract unit of work: one transaction plus the repositories bound to it.

Use cases open a unit of work with ``with uow:``, do their reads and
writes through ``uow.<repository>`` and call ``uow.commit()``.  Leaving
the block without committing rolls everything back, so a failing
operation never leaves partial writes behind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from preorder.domain.repository.batch_repository import BatchRepository
from preorder.domain.repository.order_repository import OrderRepository
from preorder.domain.repository.product_repository import ProductRepository
from preorder.domain.repository.stock_repository import StockRepository


class UnitOfWork(ABC):

    products: ProductRepository
    batches: BatchRepository
    stock: StockRepository
    orders: OrderRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # No-op after a successful commit.
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit of work durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted write."""
