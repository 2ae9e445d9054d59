"""SQLAlchemy table mappings.

These records are persistence details only; repositories translate them
to and from the domain dataclasses.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to datetimes read back from backends that drop tzinfo."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ProductRecord(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, unique=True)
    price = Column(Numeric(12, 2), nullable=False)
    size = Column(String(40))
    description = Column(Text)
    image_urls = Column(Text, nullable=False, default="")  # newline separated
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class BatchRecord(Base):
    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'open', 'closed')", name="ck_batches_status"),
        # At most one open batch.
        Index(
            "uq_batches_single_open",
            "status",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(120), nullable=False)
    delivery_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="draft")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    stocks = relationship(
        "StockEntryRecord", back_populates="batch", cascade="all, delete-orphan"
    )


class StockEntryRecord(Base):
    __tablename__ = "batch_stocks"
    __table_args__ = (
        UniqueConstraint("batch_id", "product_id", name="uq_batch_stocks_batch_product"),
        CheckConstraint("quantity_available >= 0", name="ck_batch_stocks_available"),
        CheckConstraint("quantity_reserved >= 0", name="ck_batch_stocks_reserved"),
    )

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity_available = Column(Integer, nullable=False, default=0)
    quantity_reserved = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    batch = relationship("BatchRecord", back_populates="stocks")
    product = relationship("ProductRecord")


class OrderRecord(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_status_payment_started", "status", "payment_started_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=False, index=True)
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False, index=True)
    customer_address = Column(Text)
    status = Column(String(20), nullable=False, default="pending_payment")
    payment_method = Column(String(16), nullable=False, default="pending")
    total_amount = Column(Numeric(12, 2))
    payment_started_at = Column(DateTime(timezone=True))
    request_token = Column(String(64), unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItemRecord",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRecord.id",
    )
    payment_proof = relationship(
        "PaymentProofRecord",
        back_populates="order",
        cascade="all, delete-orphan",
        uselist=False,
    )


class OrderItemRecord(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_name = Column(String(120), nullable=False)
    quantity = Column(Integer, nullable=False)
    price_per_item = Column(Numeric(12, 2), nullable=False)

    order = relationship("OrderRecord", back_populates="items")


class PaymentProofRecord(Base):
    __tablename__ = "payment_proofs"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    file_url = Column(Text)
    file_type = Column(String(40), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow)

    order = relationship("OrderRecord", back_populates="payment_proof")
