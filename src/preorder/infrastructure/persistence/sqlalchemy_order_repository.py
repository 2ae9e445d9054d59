"""SQLAlchemy implementation of OrderRepository.

Items are written once, when the order is added; afterwards only the
order row (status, payment fields) and its payment proof change.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from preorder.domain.model.order import (
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentProof,
)
from preorder.domain.model.value_objects import Money, PhoneNumber, Quantity
from preorder.domain.repository.order_repository import OrderRepository
from preorder.infrastructure.persistence.orm import (
    OrderItemRecord,
    OrderRecord,
    PaymentProofRecord,
    as_utc,
)


class SqlAlchemyOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        stmt = select(OrderRecord).where(OrderRecord.id == order_id)
        if for_update:
            stmt = stmt.with_for_update(of=OrderRecord)
        record = self._session.scalars(stmt).first()
        return self._to_domain(record) if record is not None else None

    def get_by_request_token(self, token: str) -> Order | None:
        stmt = select(OrderRecord).where(OrderRecord.request_token == token)
        record = self._session.scalars(stmt).first()
        return self._to_domain(record) if record is not None else None

    def list_by_phone(self, phone: str) -> list[Order]:
        stmt = (
            select(OrderRecord)
            .where(OrderRecord.customer_phone == phone)
            .order_by(OrderRecord.created_at.desc(), OrderRecord.id.desc())
        )
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def list_for_batch(self, batch_id: int, status: OrderStatus | None = None) -> list[Order]:
        stmt = select(OrderRecord).where(OrderRecord.batch_id == batch_id)
        if status is not None:
            stmt = stmt.where(OrderRecord.status == status.value)
        stmt = stmt.order_by(OrderRecord.id)
        return [self._to_domain(r) for r in self._session.scalars(stmt)]

    def list_expired_payment_ids(self, started_before: datetime) -> list[int]:
        stmt = (
            select(OrderRecord.id)
            .outerjoin(PaymentProofRecord, PaymentProofRecord.order_id == OrderRecord.id)
            .where(
                OrderRecord.status == OrderStatus.PENDING_PAYMENT.value,
                OrderRecord.payment_started_at.is_not(None),
                OrderRecord.payment_started_at < as_utc(started_before),
                PaymentProofRecord.id.is_(None),
            )
            .order_by(OrderRecord.id)
        )
        return list(self._session.scalars(stmt))

    def exists_for_batch(self, batch_id: int) -> bool:
        stmt = select(OrderRecord.id).where(OrderRecord.batch_id == batch_id).limit(1)
        return self._session.scalars(stmt).first() is not None

    def exists_for_product(self, product_id: int) -> bool:
        stmt = (
            select(OrderItemRecord.id)
            .where(OrderItemRecord.product_id == product_id)
            .limit(1)
        )
        return self._session.scalars(stmt).first() is not None

    def add(self, order: Order) -> None:
        record = OrderRecord(
            batch_id=order.batch_id,
            customer_name=order.customer.name,
            customer_phone=str(order.customer.phone),
            customer_address=order.customer.address,
            request_token=order.request_token,
            created_at=as_utc(order.created_at),
            items=[
                OrderItemRecord(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    price_per_item=item.price_per_item.amount,
                )
                for item in order.items
            ],
        )
        self._apply(record, order)
        self._session.add(record)
        self._session.flush()

        order.id = record.id
        for item, item_record in zip(order.items, record.items):
            item.id = item_record.id

    def save(self, order: Order) -> None:
        record = self._session.get(OrderRecord, order.id)
        self._apply(record, order)
        self._session.flush()

    def delete(self, order_id: int) -> None:
        record = self._session.get(OrderRecord, order_id)
        if record is not None:
            self._session.delete(record)
            self._session.flush()

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _apply(record: OrderRecord, order: Order) -> None:
        record.status = order.status.value
        record.payment_method = order.payment_method.value
        record.total_amount = order.total_amount.amount if order.total_amount else None
        record.payment_started_at = as_utc(order.payment_started_at)
        record.updated_at = as_utc(order.updated_at)

        proof = order.payment_proof
        if proof is None:
            record.payment_proof = None
        elif record.payment_proof is None:
            record.payment_proof = PaymentProofRecord(
                file_url=proof.file_ref,
                file_type=proof.file_type,
                uploaded_at=as_utc(proof.uploaded_at),
            )
        else:
            # Updated in place: order_id is unique, a delete + insert pair
            # could be flushed in the wrong order.
            record.payment_proof.file_url = proof.file_ref
            record.payment_proof.file_type = proof.file_type
            record.payment_proof.uploaded_at = as_utc(proof.uploaded_at)

    @staticmethod
    def _to_domain(record: OrderRecord) -> Order:
        items = [
            OrderItem(
                id=i.id,
                product_id=i.product_id,
                product_name=i.product_name,
                quantity=Quantity(i.quantity),
                price_per_item=Money(Decimal(i.price_per_item)),
            )
            for i in record.items
        ]
        proof = None
        if record.payment_proof is not None:
            proof = PaymentProof(
                file_type=record.payment_proof.file_type,
                file_ref=record.payment_proof.file_url,
                uploaded_at=as_utc(record.payment_proof.uploaded_at),
            )
        return Order(
            id=record.id,
            batch_id=record.batch_id,
            customer=Customer(
                name=record.customer_name,
                phone=PhoneNumber(record.customer_phone),
                address=record.customer_address,
            ),
            items=items,
            status=OrderStatus(record.status),
            payment_method=PaymentMethod(record.payment_method),
            total_amount=(
                Money(Decimal(record.total_amount))
                if record.total_amount is not None
                else None
            ),
            payment_started_at=as_utc(record.payment_started_at),
            payment_proof=proof,
            request_token=record.request_token,
            created_at=as_utc(record.created_at),
            updated_at=as_utc(record.updated_at),
        )
