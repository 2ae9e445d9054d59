from datetime import date

import pytest

from preorder.application.add_product import AddProductHandler
from preorder.application.create_batch import CreateBatchHandler
from preorder.application.dto import StockSpec
from preorder.application.publish_batch import PublishBatchHandler
from preorder.infrastructure.persistence.database import (
    init_schema,
    make_engine,
    make_session_factory,
)
from preorder.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'preorder-test.db'}")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def make_uow(engine):
    """A fresh unit of work per call; instances must not be shared across threads."""
    factory = make_session_factory(engine)
    return lambda: SqlAlchemyUnitOfWork(factory)


@pytest.fixture
def open_batch(make_uow) -> int:
    """Publish a batch with Orange #1 (5 available) and Apple #2 (10 available)."""
    AddProductHandler(make_uow()).handle("Orange", "15000", size="250ml")
    AddProductHandler(make_uow()).handle("Apple", "20000", size="250ml")
    batch = CreateBatchHandler(make_uow()).handle(
        "Week 12", date(2026, 3, 20), [StockSpec(1, 5), StockSpec(2, 10)]
    )
    PublishBatchHandler(make_uow()).handle(batch.id)
    return batch.id
