"""Application service: Duplicate Batch use case.

Copies a batch into a new DRAFT one week later, carrying over each
product's ``available`` count with nothing reserved.
"""

from __future__ import annotations

import logging

from preorder.application.dto import BatchDTO
from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.model.stock import StockEntry
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DuplicateBatchHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int) -> BatchDTO:
        with self._uow as uow:
            source = uow.batches.get_by_id(batch_id)
            if source is None:
                raise EntityNotFoundError(f"Batch #{batch_id} not found")

            copy = source.duplicate()
            uow.batches.add(copy)
            for entry in uow.stock.list_for_batch(batch_id):
                uow.stock.add(
                    StockEntry(
                        batch_id=copy.id,  # type: ignore[arg-type]
                        product_id=entry.product_id,
                        product_name=entry.product_name,
                        available=entry.available,
                    )
                )
            uow.commit()

        logger.info("Batch #%s duplicated as #%s", batch_id, copy.id)
        return BatchDTO.from_batch(copy)
