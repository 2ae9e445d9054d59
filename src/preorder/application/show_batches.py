"""Application services: batch queries (query side, no writes)."""

from __future__ import annotations

from preorder.application.dto import (
    BatchDTO,
    BatchSummaryDTO,
    MenuLineDTO,
    OpenBatchDTO,
    StockLineDTO,
)
from preorder.application.retry import retry_read
from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.model.batch import Batch, BatchStatus
from preorder.domain.repository.unit_of_work import UnitOfWork


class ShowOpenBatchHandler:
    """What the storefront shows: the open batch and what is left of it."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> OpenBatchDTO | None:
        return retry_read(self._load)

    def _load(self) -> OpenBatchDTO | None:
        with self._uow as uow:
            open_batches = uow.batches.list_by_status(BatchStatus.OPEN)
            if not open_batches:
                return None
            batch = open_batches[0]

            menu: list[MenuLineDTO] = []
            for entry in uow.stock.list_for_batch(batch.id):  # type: ignore[arg-type]
                product = uow.products.get_by_id(entry.product_id)
                if product is None:
                    continue
                menu.append(
                    MenuLineDTO(
                        product_id=product.id,  # type: ignore[arg-type]
                        product_name=product.name,
                        price=str(product.price),
                        size=product.size,
                        available=entry.available,
                    )
                )
            return OpenBatchDTO(batch=BatchDTO.from_batch(batch), menu=menu)


class ListBatchesHandler:
    """Every batch with its order count, revenue and stock totals."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[BatchSummaryDTO]:
        return retry_read(self._load)

    def _load(self) -> list[BatchSummaryDTO]:
        with self._uow as uow:
            return [_summarize(uow, b) for b in uow.batches.list_all()]


class ShowBatchStockHandler:
    """Staff view of a batch: total, reserved and available per product."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int) -> tuple[BatchSummaryDTO, list[StockLineDTO]]:
        return retry_read(lambda: self._load(batch_id))

    def _load(self, batch_id: int) -> tuple[BatchSummaryDTO, list[StockLineDTO]]:
        with self._uow as uow:
            batch = uow.batches.get_by_id(batch_id)
            if batch is None:
                raise EntityNotFoundError(f"Batch #{batch_id} not found")
            entries = uow.stock.list_for_batch(batch_id)
            summary = BatchSummaryDTO.from_batch(
                batch, uow.orders.list_for_batch(batch_id), entries
            )
            return summary, [StockLineDTO.from_entry(e) for e in entries]


def _summarize(uow: UnitOfWork, batch: Batch) -> BatchSummaryDTO:
    return BatchSummaryDTO.from_batch(
        batch,
        uow.orders.list_for_batch(batch.id),  # type: ignore[arg-type]
        uow.stock.list_for_batch(batch.id),  # type: ignore[arg-type]
    )
