"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from preorder.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors.  Prices in this
    shop are whole Rupiah, but the type does not forbid fractions.
    """

    amount: Decimal
    currency: str = "IDR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        # Rupiah uses '.' as the thousands separator: Rp15.000
        whole = f"{self.amount:,.0f}".replace(",", ".")
        return f"Rp{whole}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


# Indonesian mobile numbers: 08xx, 628xx or +628xx followed by 8-11 digits.
_PHONE_PATTERN = re.compile(r"^(?:\+62|62|0)?8[0-9]{8,11}$")


@dataclass(frozen=True)
class PhoneNumber:
    """Customer phone number, always stored in E.164 form (``+628...``)."""

    value: str

    def __str__(self) -> str:
        return self.value

    @staticmethod
    def parse(raw: str) -> PhoneNumber:
        cleaned = (raw or "").strip().replace(" ", "").replace("-", "")
        if not cleaned:
            raise ValidationError("Phone number is required")
        if not _PHONE_PATTERN.match(cleaned):
            raise ValidationError(
                f"Invalid phone number {raw!r}: use 08... or +628..."
            )

        digits = re.sub(r"\D", "", cleaned)
        if digits.startswith("0"):
            digits = digits[1:]
        if not digits.startswith("62"):
            digits = "62" + digits
        return PhoneNumber("+" + digits)
