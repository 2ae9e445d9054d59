"""Application service: Delete Batch use case.

Only batches nobody ordered from can be deleted; their stock entries go
with them.  Batches with orders are closed instead and kept for history.
"""

from __future__ import annotations

import logging

from preorder.domain.exceptions import CannotDelete, EntityNotFoundError
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DeleteBatchHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int) -> None:
        with self._uow as uow:
            batch = uow.batches.get_by_id(batch_id, for_update=True)
            if batch is None:
                raise EntityNotFoundError(f"Batch #{batch_id} not found")

            if uow.orders.exists_for_batch(batch_id):
                raise CannotDelete(
                    f"Batch '{batch.title}' has orders; close it instead"
                )

            uow.batches.delete(batch_id)
            uow.commit()
        logger.info("Batch #%s deleted", batch_id)
