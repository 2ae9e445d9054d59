"""Row-lock modes taken by the write paths, as PostgreSQL would see them.

SQLite ignores FOR UPDATE / FOR SHARE, so each locking statement is
recompiled for the PostgreSQL dialect and inspected as text.
"""

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Session

from preorder.application.dto import OrderItemSpec
from preorder.application.edit_stock import EditStockHandler
from preorder.application.place_order import PlaceOrderHandler
from preorder.application.publish_batch import CloseBatchHandler


@pytest.fixture
def locking_sql(monkeypatch):
    """Record every locking SELECT issued through Session.scalars."""
    seen: list[str] = []
    real_scalars = Session.scalars

    def spy(self, statement, *args, **kwargs):
        sql = str(statement.compile(dialect=postgresql.dialect()))
        if "FOR UPDATE" in sql or "FOR SHARE" in sql:
            seen.append(" ".join(sql.split()))
        return real_scalars(self, statement, *args, **kwargs)

    monkeypatch.setattr(Session, "scalars", spy)
    return seen


def _on_batches(statements: list[str]) -> list[str]:
    return [s for s in statements if "FROM batches" in s]


class TestCheckoutLocks:

    def test_batch_row_share_locked_stock_rows_exclusive(self, make_uow, open_batch, locking_sql):
        PlaceOrderHandler(make_uow()).handle(
            open_batch, "Budi", "081234567890", [OrderItemSpec(1, 1), OrderItemSpec(2, 1)]
        )

        batch_locks = _on_batches(locking_sql)
        assert batch_locks and all(s.endswith("FOR SHARE") for s in batch_locks)
        stock_locks = [s for s in locking_sql if "FROM batch_stocks" in s]
        assert stock_locks and all("FOR UPDATE" in s for s in stock_locks)

    def test_stock_edit_share_locks_batch(self, make_uow, open_batch, locking_sql):
        EditStockHandler(make_uow()).handle(open_batch, 1, 8)

        batch_locks = _on_batches(locking_sql)
        assert batch_locks and all(s.endswith("FOR SHARE") for s in batch_locks)

    def test_close_takes_exclusive_batch_lock(self, make_uow, open_batch, locking_sql):
        CloseBatchHandler(make_uow()).handle(open_batch)

        assert any(s.endswith("FOR UPDATE") for s in _on_batches(locking_sql))
