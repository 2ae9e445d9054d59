"""Application service: Edit Stock use case (staff).

Staff set the nominal stock of a product in a batch.  Units already
reserved by orders stay reserved, so the new total may not drop below
them; the rest becomes available.
"""

from __future__ import annotations

import logging

from preorder.application.dto import StockLineDTO
from preorder.domain.exceptions import EntityNotFoundError, ValidationError
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class EditStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int, product_id: int, new_total: int) -> StockLineDTO:
        with self._uow as uow:
            # Shared lock: a concurrent close waits until this edit commits.
            batch = uow.batches.get_by_id(batch_id, for_share=True)
            if batch is None:
                raise EntityNotFoundError(f"Batch #{batch_id} not found")
            if batch.is_closed:
                raise ValidationError(f"Batch '{batch.title}' is closed and read-only")

            entry = uow.stock.get(batch_id, product_id, for_update=True)
            if entry is None:
                raise EntityNotFoundError(
                    f"Product #{product_id} is not on the menu of batch #{batch_id}"
                )

            entry.set_total(new_total)
            uow.stock.save(entry)
            uow.commit()

        logger.info(
            "Stock of %s in batch #%s set to %d (%d reserved)",
            entry.product_name,
            batch_id,
            new_total,
            entry.reserved,
        )
        return StockLineDTO.from_entry(entry)
