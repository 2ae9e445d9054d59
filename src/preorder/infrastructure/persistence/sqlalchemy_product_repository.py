"""SQLAlchemy implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from preorder.domain.model.product import Product
from preorder.domain.model.value_objects import Money
from preorder.domain.repository.product_repository import ProductRepository
from preorder.infrastructure.persistence.orm import ProductRecord


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: int) -> Product | None:
        record = self._session.get(ProductRecord, product_id)
        return self._to_domain(record) if record is not None else None

    def get_by_name(self, name: str) -> Product | None:
        stmt = select(ProductRecord).where(
            func.lower(ProductRecord.name) == name.strip().lower()
        )
        record = self._session.scalars(stmt).first()
        return self._to_domain(record) if record is not None else None

    def list_all(self) -> list[Product]:
        stmt = select(ProductRecord).order_by(ProductRecord.name)
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def add(self, product: Product) -> None:
        record = ProductRecord()
        self._apply(record, product)
        self._session.add(record)
        self._session.flush()
        product.id = record.id

    def save(self, product: Product) -> None:
        record = self._session.get(ProductRecord, product.id)
        self._apply(record, product)
        self._session.flush()

    def delete(self, product_id: int) -> None:
        record = self._session.get(ProductRecord, product_id)
        if record is not None:
            self._session.delete(record)
            self._session.flush()

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _apply(record: ProductRecord, product: Product) -> None:
        record.name = product.name
        record.price = product.price.amount
        record.size = product.size
        record.description = product.description
        record.image_urls = "\n".join(product.image_urls)

    @staticmethod
    def _to_domain(record: ProductRecord) -> Product:
        return Product(
            id=record.id,
            name=record.name,
            price=Money(Decimal(record.price)),
            size=record.size,
            description=record.description,
            image_urls=[u for u in (record.image_urls or "").split("\n") if u],
        )
