"""SQLAlchemy implementation of BatchRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from preorder.domain.model.batch import Batch, BatchStatus
from preorder.domain.repository.batch_repository import BatchRepository
from preorder.infrastructure.persistence.orm import BatchRecord, as_utc


class SqlAlchemyBatchRepository(BatchRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- BatchRepository interface --------------------------------------------

    def get_by_id(
        self, batch_id: int, for_update: bool = False, for_share: bool = False
    ) -> Batch | None:
        stmt = select(BatchRecord).where(BatchRecord.id == batch_id)
        if for_update:
            stmt = stmt.with_for_update()
        elif for_share:
            stmt = stmt.with_for_update(read=True)
        record = self._session.scalars(stmt).first()
        return self._to_domain(record) if record is not None else None

    def list_by_status(self, status: BatchStatus, for_update: bool = False) -> list[Batch]:
        stmt = (
            select(BatchRecord)
            .where(BatchRecord.status == status.value)
            .order_by(BatchRecord.id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def list_all(self) -> list[Batch]:
        stmt = select(BatchRecord).order_by(
            BatchRecord.delivery_date.desc(), BatchRecord.id.desc()
        )
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def add(self, batch: Batch) -> None:
        record = BatchRecord(
            title=batch.title,
            delivery_date=batch.delivery_date,
            status=batch.status.value,
            created_at=batch.created_at,
        )
        self._session.add(record)
        self._session.flush()
        batch.id = record.id

    def save(self, batch: Batch) -> None:
        record = self._session.get(BatchRecord, batch.id)
        record.title = batch.title
        record.delivery_date = batch.delivery_date
        record.status = batch.status.value
        # Flushed one by one: closing the old open batch must reach the
        # database before the new one is opened.
        self._session.flush()

    def delete(self, batch_id: int) -> None:
        record = self._session.get(BatchRecord, batch_id)
        if record is not None:
            self._session.delete(record)
            self._session.flush()

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(record: BatchRecord) -> Batch:
        return Batch(
            id=record.id,
            title=record.title,
            delivery_date=record.delivery_date,
            status=BatchStatus(record.status),
            created_at=as_utc(record.created_at),
        )
