"""StockEntry aggregate: the per (batch, product) stock ledger.

Each product offered in a batch has exactly one StockEntry holding two
counters:

- ``available``: units nobody has claimed yet
- ``reserved``: units claimed by orders that are not finished

Order operations only move units between the counters (reserve/restore)
or drop them from ``reserved`` once sold (release).  The nominal total
``available + reserved`` changes only through a staff stock edit.
"""

from __future__ import annotations

from dataclasses import dataclass

from preorder.domain.exceptions import (
    InsufficientStock,
    InvalidStockEdit,
    StockShortfall,
    ValidationError,
)


@dataclass
class StockEntry:
    """Aggregate root for one product's stock within one batch.

    Invariants:
    - ``available`` is always >= 0
    - ``reserved`` is always >= 0
    """

    batch_id: int
    product_id: int
    product_name: str
    available: int
    reserved: int = 0

    def __post_init__(self) -> None:
        if self.available < 0 or self.reserved < 0:
            raise ValidationError(
                f"Stock counters for {self.product_name} cannot be negative"
            )

    @property
    def total(self) -> int:
        return self.available + self.reserved

    def shortfall_for(self, quantity: int) -> StockShortfall | None:
        """Return the shortfall if *quantity* cannot be reserved, else None."""
        if quantity > self.available:
            return StockShortfall(
                product_id=self.product_id,
                product_name=self.product_name,
                requested=quantity,
                available=self.available,
            )
        return None

    def reserve(self, quantity: int) -> None:
        """Claim stock for a new order: available -> reserved.

        Raises InsufficientStock if fewer than *quantity* units are available.
        """
        _require_positive(quantity, "Reservation")
        shortfall = self.shortfall_for(quantity)
        if shortfall is not None:
            raise InsufficientStock([shortfall])
        self.available -= quantity
        self.reserved += quantity

    def restore(self, quantity: int) -> None:
        """Undo a reservation that will never be sold: reserved -> available.

        ``reserved`` is clamped at zero so a replayed restore cannot drive
        it negative.
        """
        _require_positive(quantity, "Restore")
        self.available += quantity
        self.reserved = max(0, self.reserved - quantity)

    def release(self, quantity: int) -> None:
        """Drop sold units from ``reserved``; ``available`` is untouched."""
        _require_positive(quantity, "Release")
        self.reserved = max(0, self.reserved - quantity)

    def set_total(self, new_total: int) -> None:
        """Staff edit of the nominal stock for this batch.

        The reserved part is committed to orders and cannot be taken away,
        so the new total must be at least ``reserved``.  Whatever is left
        over becomes ``available``.
        """
        if isinstance(new_total, bool) or not isinstance(new_total, int):
            raise ValidationError("Stock quantity must be an integer")
        if new_total < self.reserved:
            raise InvalidStockEdit(self.product_name, new_total, self.reserved)
        self.available = new_total - self.reserved


def _require_positive(quantity: int, action: str) -> None:
    if quantity <= 0:
        raise ValidationError(f"{action} quantity must be positive")
