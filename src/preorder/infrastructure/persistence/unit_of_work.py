"""SQLAlchemy unit of work: one session, one transaction.

Every ``with uow:`` block opens a fresh session.  Leaving the block
rolls back anything not committed and closes the session, which also
releases the row locks taken by ``for_update`` reads.  Driver errors
raised inside the block, or by that rollback, surface as PersistenceError.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from preorder.domain.exceptions import PersistenceError
from preorder.domain.repository.unit_of_work import UnitOfWork
from preorder.infrastructure.persistence.sqlalchemy_batch_repository import (
    SqlAlchemyBatchRepository,
)
from preorder.infrastructure.persistence.sqlalchemy_order_repository import (
    SqlAlchemyOrderRepository,
)
from preorder.infrastructure.persistence.sqlalchemy_product_repository import (
    SqlAlchemyProductRepository,
)
from preorder.infrastructure.persistence.sqlalchemy_stock_repository import (
    SqlAlchemyStockRepository,
)

logger = logging.getLogger(__name__)

_RETRY_MESSAGE = "The operation could not be completed, please try again"


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self._session_factory()
        self.products = SqlAlchemyProductRepository(self.session)
        self.batches = SqlAlchemyBatchRepository(self.session)
        self.stock = SqlAlchemyStockRepository(self.session)
        self.orders = SqlAlchemyOrderRepository(self.session)
        super().__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            try:
                super().__exit__(exc_type, exc, tb)
            finally:
                self.session.close()
        except SQLAlchemyError as cleanup_exc:
            # A lost connection can fail the rollback too.  An error raised
            # inside the block still wins.
            logger.warning("Rollback failed: %s", cleanup_exc)
            if exc is None:
                raise PersistenceError(_RETRY_MESSAGE) from cleanup_exc
        finally:
            self.session = None

        if isinstance(exc, SQLAlchemyError):
            logger.warning("Transaction aborted by storage error: %s", exc)
            raise PersistenceError(_RETRY_MESSAGE) from exc

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
