from datetime import date

import pytest

from preorder.domain.model.batch import Batch, BatchStatus
from preorder.domain.model.product import Product
from preorder.domain.model.stock import StockEntry
from preorder.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """An open batch #1 with Orange (5 left) and Apple (10 left)."""
    return FakeUnitOfWork(
        products=[
            Product(id=1, name="Orange", price=Money.of("15000"), size="250ml"),
            Product(id=2, name="Apple", price=Money.of("20000"), size="250ml"),
        ],
        batches=[
            Batch(id=1, title="Week 12", delivery_date=date(2026, 3, 20), status=BatchStatus.OPEN),
        ],
        stock=[
            StockEntry(batch_id=1, product_id=1, product_name="Orange", available=5),
            StockEntry(batch_id=1, product_id=2, product_name="Apple", available=10),
        ],
    )
