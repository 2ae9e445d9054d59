"""Application service: Add Product use case."""

from __future__ import annotations

from preorder.domain.exceptions import ValidationError
from preorder.domain.model.product import Product
from preorder.domain.model.value_objects import Money
from preorder.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        price: str,
        size: str | None = None,
        description: str | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        product = Product.create(name, Money.of(price), size=size, description=description)

        with self._uow as uow:
            if uow.products.get_by_name(product.name) is not None:
                raise ValidationError(f"Product '{product.name}' already exists")
            uow.products.add(product)
            uow.commit()
        return product
