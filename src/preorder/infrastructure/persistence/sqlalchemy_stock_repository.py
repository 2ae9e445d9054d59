"""SQLAlchemy implementation of StockRepository.

``for_update`` reads become ``SELECT ... FOR UPDATE OF batch_stocks`` on
PostgreSQL.  The lock lasts until the session's transaction ends.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from preorder.domain.model.stock import StockEntry
from preorder.domain.repository.stock_repository import StockRepository
from preorder.infrastructure.persistence.orm import ProductRecord, StockEntryRecord


class SqlAlchemyStockRepository(StockRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- StockRepository interface --------------------------------------------

    def get(self, batch_id: int, product_id: int, for_update: bool = False) -> StockEntry | None:
        record = self._get_record(batch_id, product_id, for_update)
        return self._to_domain(record) if record is not None else None

    def list_for_batch(self, batch_id: int) -> list[StockEntry]:
        stmt = (
            select(StockEntryRecord)
            .join(ProductRecord, StockEntryRecord.product_id == ProductRecord.id)
            .where(StockEntryRecord.batch_id == batch_id)
            .order_by(ProductRecord.name)
        )
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def list_for_product(self, product_id: int) -> list[StockEntry]:
        stmt = (
            select(StockEntryRecord)
            .where(StockEntryRecord.product_id == product_id)
            .order_by(StockEntryRecord.batch_id)
        )
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def add(self, entry: StockEntry) -> None:
        self._session.add(
            StockEntryRecord(
                batch_id=entry.batch_id,
                product_id=entry.product_id,
                quantity_available=entry.available,
                quantity_reserved=entry.reserved,
            )
        )
        self._session.flush()

    def save(self, entry: StockEntry) -> None:
        record = self._get_record(entry.batch_id, entry.product_id, for_update=False)
        record.quantity_available = entry.available
        record.quantity_reserved = entry.reserved
        self._session.flush()

    def delete_for_product(self, product_id: int) -> None:
        self._session.execute(
            delete(StockEntryRecord).where(StockEntryRecord.product_id == product_id)
        )

    # --- Internal helpers -----------------------------------------------------

    def _get_record(self, batch_id: int, product_id: int, for_update: bool) -> StockEntryRecord | None:
        stmt = select(StockEntryRecord).where(
            StockEntryRecord.batch_id == batch_id,
            StockEntryRecord.product_id == product_id,
        )
        if for_update:
            stmt = stmt.with_for_update(of=StockEntryRecord)
        return self._session.scalars(stmt).first()

    @staticmethod
    def _to_domain(record: StockEntryRecord) -> StockEntry:
        return StockEntry(
            batch_id=record.batch_id,
            product_id=record.product_id,
            product_name=record.product.name,
            available=record.quantity_available,
            reserved=record.quantity_reserved,
        )
