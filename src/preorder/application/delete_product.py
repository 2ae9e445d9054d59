"""Application service: Delete Product use case.

A product cannot disappear while a draft or open batch still offers it,
or while any order (even a cancelled one) refers to it.  Stock rows in
closed batches without orders are removed along with the product.
"""

from __future__ import annotations

import logging

from preorder.domain.exceptions import CannotDelete, EntityNotFoundError
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DeleteProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: int) -> None:
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            if uow.orders.exists_for_product(product_id):
                raise CannotDelete(f"'{product.name}' appears in existing orders")

            active = []
            for entry in uow.stock.list_for_product(product_id):
                batch = uow.batches.get_by_id(entry.batch_id)
                if batch is not None and not batch.is_closed:
                    active.append(batch.title)
            if active:
                raise CannotDelete(
                    f"'{product.name}' is on the menu of active batches: {', '.join(active)}"
                )

            uow.stock.delete_for_product(product_id)
            uow.products.delete(product_id)
            uow.commit()
        logger.info("Product #%s '%s' deleted", product_id, product.name)
