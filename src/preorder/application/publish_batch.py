"""Application services: Publish and Close Batch use cases.

At most one batch may be OPEN.  Publishing closes the currently open
batch and opens the target in the same unit of work, so no reader can
ever see two open batches (the database also carries a partial unique
index on the open status).
"""

from __future__ import annotations

import logging

from preorder.domain.exceptions import EntityNotFoundError
from preorder.domain.model.batch import Batch, BatchStatus
from preorder.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _load_locked(uow: UnitOfWork, batch_id: int) -> Batch:
    batch = uow.batches.get_by_id(batch_id, for_update=True)
    if batch is None:
        raise EntityNotFoundError(f"Batch #{batch_id} not found")
    return batch


class PublishBatchHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int) -> list[int]:
        """Open a DRAFT batch; return the IDs of batches closed to make room."""
        with self._uow as uow:
            target = _load_locked(uow, batch_id)
            # Validate before closing anything.
            target.publish()

            closed: list[int] = []
            for current in uow.batches.list_by_status(BatchStatus.OPEN, for_update=True):
                if current.id == target.id:
                    continue
                current.close()
                uow.batches.save(current)
                closed.append(current.id)  # type: ignore[arg-type]

            uow.batches.save(target)
            uow.commit()

        logger.info("Batch #%s published (closed: %s)", batch_id, closed or "none")
        return closed


class CloseBatchHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, batch_id: int) -> None:
        with self._uow as uow:
            batch = _load_locked(uow, batch_id)
            batch.close()
            uow.batches.save(batch)
            uow.commit()
        logger.info("Batch #%s closed", batch_id)
