"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer (or any other caller) can catch them uniformly and display
user-friendly messages.  None of them are raised after a partial write: the
unit of work rolls back whatever the failing operation had started.
"""

from __future__ import annotations

from dataclasses import dataclass


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


@dataclass(frozen=True)
class StockShortfall:
    """One line of a checkout that the stock pool cannot cover."""

    product_id: int
    product_name: str
    requested: int
    available: int

    @property
    def missing(self) -> int:
        return self.requested - self.available

    def __str__(self) -> str:
        return (
            f"{self.product_name} (requested {self.requested}, "
            f"available {self.available})"
        )


class InsufficientStock(DomainException):
    """One or more requested lines exceed the available stock."""

    def __init__(self, shortfalls: list[StockShortfall]) -> None:
        self.shortfalls = list(shortfalls)
        details = ", ".join(str(s) for s in self.shortfalls)
        super().__init__(f"Insufficient stock: {details}")

    # Convenience accessors for the common single-product case.

    @property
    def product_id(self) -> int:
        return self.shortfalls[0].product_id

    @property
    def requested(self) -> int:
        return self.shortfalls[0].requested

    @property
    def available(self) -> int:
        return self.shortfalls[0].available


class BatchNotOpen(DomainException):
    """The batch is not (or no longer) accepting orders."""

    def __init__(self, batch_id: int) -> None:
        self.batch_id = batch_id
        super().__init__(
            "Pre-order for this batch is closed, please return to the menu"
        )


class InvalidStockEdit(ValidationError):
    """A staff stock edit would shrink stock already committed to orders."""

    def __init__(self, product_name: str, requested_total: int, current_reserved: int) -> None:
        self.product_name = product_name
        self.requested_total = requested_total
        self.current_reserved = current_reserved
        super().__init__(
            f"Cannot set stock of {product_name} to {requested_total}: "
            f"{current_reserved} already reserved by orders"
        )


class CannotDelete(DomainException):
    """An entity is still referenced and cannot be removed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class IllegalStatusTransition(DomainException):
    """A lifecycle transition outside the allowed adjacency list."""

    def __init__(self, current: str, target: str, detail: str | None = None) -> None:
        self.current = current
        self.target = target
        message = f"Action not available: cannot move from {current} to {target}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PaymentProofRequired(IllegalStatusTransition):
    """Payment cannot be verified before the customer uploads a proof."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(current, target, "no payment proof uploaded yet")


class PersistenceError(DomainException):
    """Transient storage failure (lock timeout, lost connection, write race).

    Raised instead of the driver's own exception so storage details never
    reach the caller.  Read-only operations may be retried; mutating
    operations are surfaced as-is.
    """
