"""Product aggregate.

Products live independently of batches and orders.  Staff edit prices and
descriptions freely; orders are unaffected because each order item keeps
its own price snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from preorder.domain.exceptions import ValidationError
from preorder.domain.model.value_objects import Money


@dataclass
class Product:
    """A menu item in the catalog."""

    id: int | None
    name: str
    price: Money
    size: str | None = None
    description: str | None = None
    image_urls: list[str] = field(default_factory=list)

    @staticmethod
    def create(
        name: str,
        price: Money,
        size: str | None = None,
        description: str | None = None,
        image_urls: list[str] | None = None,
    ) -> Product:
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if price.is_zero:
            raise ValidationError("Product price must be greater than zero")
        return Product(
            id=None,
            name=name.strip(),
            price=price,
            size=(size or "").strip() or None,
            description=(description or "").strip() or None,
            image_urls=list(image_urls or []),
        )

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.is_zero:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def update_details(self, size: str | None = None, description: str | None = None) -> None:
        if size is not None:
            self.size = size.strip() or None
        if description is not None:
            self.description = description.strip() or None
