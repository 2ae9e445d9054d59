"""Abstract repository for StockEntry aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from preorder.domain.model.stock import StockEntry


class StockRepository(ABC):

    @abstractmethod
    def get(self, batch_id: int, product_id: int, for_update: bool = False) -> StockEntry | None:
        """Return the stock entry of a product in a batch, or None.

        With ``for_update`` the row stays locked until the unit of work
        ends, so no concurrent transaction can read-validate-write it.
        """

    @abstractmethod
    def list_for_batch(self, batch_id: int) -> list[StockEntry]:
        """Return every stock entry of a batch, ordered by product name."""

    @abstractmethod
    def list_for_product(self, product_id: int) -> list[StockEntry]:
        """Return the entries of a product across all batches."""

    @abstractmethod
    def add(self, entry: StockEntry) -> None:
        """Persist a new stock entry."""

    @abstractmethod
    def save(self, entry: StockEntry) -> None:
        """Persist updated counters."""

    @abstractmethod
    def delete_for_product(self, product_id: int) -> None:
        """Remove every stock entry of a product."""
