"""Application service: Create Batch use case.

A new batch starts as DRAFT with one stock entry per listed product:
``available`` as chosen by staff, nothing reserved.
"""

from __future__ import annotations

import logging
from datetime import date

from preorder.application.dto import BatchDTO, StockSpec
from preorder.domain.exceptions import EntityNotFoundError, ValidationError
from preorder.domain.model.batch import Batch
from preorder.domain.model.stock import StockEntry
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CreateBatchHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, title: str, delivery_date: date, initial_stock: list[StockSpec]) -> BatchDTO:
        batch = Batch.create(title, delivery_date)

        product_ids = [spec.product_id for spec in initial_stock]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once in a batch")

        with self._uow as uow:
            uow.batches.add(batch)

            for spec in initial_stock:
                product = uow.products.get_by_id(spec.product_id)
                if product is None:
                    raise EntityNotFoundError(f"Product #{spec.product_id} not found")
                uow.stock.add(
                    StockEntry(
                        batch_id=batch.id,  # type: ignore[arg-type]
                        product_id=product.id,  # type: ignore[arg-type]
                        product_name=product.name,
                        available=spec.available,
                    )
                )

            uow.commit()

        logger.info("Batch #%s '%s' created with %d products", batch.id, batch.title, len(initial_stock))
        return BatchDTO.from_batch(batch)
