"""Application service: Update Product use case."""

from __future__ import annotations

from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.model.product import Product
from preorder.domain.model.value_objects import Money
from preorder.domain.repository.unit_of_work import UnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: int,
        new_price: str | None = None,
        size: str | None = None,
        description: str | None = None,
    ) -> Product:
        """Update a product's price and/or details.

        This does NOT affect any existing orders: they captured a
        price snapshot at creation time.
        """
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            if new_price is not None:
                product.update_price(Money.of(new_price))
            product.update_details(size=size, description=description)
            uow.products.save(product)
            uow.commit()
        return product
