"""Domain service: Stock Ledger.

Coordinates the cross-aggregate work of reserving, restoring or releasing
batch stock for a whole order.  It lives in the domain layer because the
bookkeeping rules (which counter moves where) are core business rules.

Every method must run inside an open unit of work: rows are read with
``for_update`` so the read-validate-write sequence holds the row lock
until the caller commits or rolls back.
"""

from __future__ import annotations

import logging

from preorder.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStock,
    StockShortfall,
)
from preorder.domain.model.order import Order
from preorder.domain.model.stock import StockEntry
from preorder.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)


class StockLedgerService:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def reserve(self, batch_id: int, quantities: dict[int, int]) -> dict[int, StockEntry]:
        """Reserve ``{product_id: quantity}`` in one batch, all or nothing.

        Uses a two-phase approach:
          Phase 1 - lock and validate: lock every row (ascending product id,
                    so concurrent checkouts always lock in the same order)
                    and collect every shortfall.  Fails before any mutation.
          Phase 2 - mutate and persist: ``reserve()`` on each entry.

        Returns the locked entries keyed by product id.
        """
        # Phase 1: lock all rows and validate
        entries: dict[int, StockEntry] = {}
        shortfalls: list[StockShortfall] = []

        for product_id in sorted(quantities):
            entry = self._locked_entry(batch_id, product_id)
            shortfall = entry.shortfall_for(quantities[product_id])
            if shortfall is not None:
                shortfalls.append(shortfall)
            entries[product_id] = entry

        if shortfalls:
            logger.warning(
                "Reservation rejected for batch %s: %s",
                batch_id,
                ", ".join(str(s) for s in shortfalls),
            )
            raise InsufficientStock(shortfalls)

        # Phase 2: mutate and persist
        for product_id, entry in entries.items():
            entry.reserve(quantities[product_id])
            self._stock_repo.save(entry)

        return entries

    def restore_for_order(self, order: Order) -> None:
        """Return every item of an unsold order to ``available``."""
        for item in self._sorted_items(order):
            entry = self._locked_entry(order.batch_id, item.product_id)
            entry.restore(item.quantity.value)
            self._stock_repo.save(entry)

    def release_for_order(self, order: Order) -> None:
        """Remove every item of a completed sale from ``reserved``."""
        for item in self._sorted_items(order):
            entry = self._locked_entry(order.batch_id, item.product_id)
            entry.release(item.quantity.value)
            self._stock_repo.save(entry)

    # --- Internal helpers -----------------------------------------------------

    def _locked_entry(self, batch_id: int, product_id: int) -> StockEntry:
        entry = self._stock_repo.get(batch_id, product_id, for_update=True)
        if entry is None:
            raise EntityNotFoundError(
                f"Product #{product_id} is not on the menu of batch #{batch_id}"
            )
        return entry

    @staticmethod
    def _sorted_items(order: Order):
        return sorted(order.items, key=lambda item: item.product_id)
