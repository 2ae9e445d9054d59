"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI (or any other UI) and the application
layer without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from preorder.domain.model.batch import Batch
from preorder.domain.model.order import Order, OrderStatus
from preorder.domain.model.stock import StockEntry
from preorder.domain.model.value_objects import Money


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one cart line as the customer saw it at checkout."""

    product_id: int
    quantity: int
    unit_price: str | None = None  # price shown at checkout, e.g. "15000"; None = catalog price


@dataclass(frozen=True)
class StockSpec:
    """Input: initial stock of a product when a batch is created."""

    product_id: int
    available: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "Rp15.000"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to staff or the customer."""

    id: int
    batch_id: int
    customer_name: str
    customer_phone: str
    customer_address: str | None
    status: str
    payment_method: str
    has_payment_proof: bool
    payment_started_at: str | None
    items: list[OrderLineItemDTO]
    total: str
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        started = order.payment_started_at
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            batch_id=order.batch_id,
            customer_name=order.customer.name,
            customer_phone=str(order.customer.phone),
            customer_address=order.customer.address,
            status=order.status.value,
            payment_method=order.payment_method.value,
            has_payment_proof=order.has_payment_proof,
            payment_started_at=started.strftime("%Y-%m-%d %H:%M UTC") if started else None,
            items=[
                OrderLineItemDTO(
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    unit_price=str(item.price_per_item),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            total=str(order.display_total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class OrderSummaryDTO:
    id: int
    customer_name: str
    status: str
    total: str
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderSummaryDTO:
        return OrderSummaryDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_name=order.customer.name,
            status=order.status.value,
            total=str(order.display_total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class BatchDTO:
    id: int
    title: str
    delivery_date: str
    status: str

    @staticmethod
    def from_batch(batch: Batch) -> BatchDTO:
        return BatchDTO(
            id=batch.id,  # type: ignore[arg-type]
            title=batch.title,
            delivery_date=batch.delivery_date.isoformat(),
            status=batch.status.value,
        )


@dataclass(frozen=True)
class BatchSummaryDTO:
    """A batch with the figures staff track: orders, revenue and stock.

    Revenue counts every order that was not cancelled, at its displayed
    total.
    """

    id: int
    title: str
    delivery_date: str
    status: str
    order_count: int
    pending_payment_count: int
    revenue: str
    available: int
    reserved: int

    @staticmethod
    def from_batch(
        batch: Batch, orders: list[Order], entries: list[StockEntry]
    ) -> BatchSummaryDTO:
        revenue = Money.zero()
        for order in orders:
            if order.status is not OrderStatus.CANCELLED:
                revenue = revenue + order.display_total
        return BatchSummaryDTO(
            id=batch.id,  # type: ignore[arg-type]
            title=batch.title,
            delivery_date=batch.delivery_date.isoformat(),
            status=batch.status.value,
            order_count=len(orders),
            pending_payment_count=sum(
                1 for o in orders if o.status is OrderStatus.PENDING_PAYMENT
            ),
            revenue=str(revenue),
            available=sum(e.available for e in entries),
            reserved=sum(e.reserved for e in entries),
        )


@dataclass(frozen=True)
class StockLineDTO:
    """One product row of a batch's stock table."""

    product_id: int
    product_name: str
    total: int
    reserved: int
    available: int

    @staticmethod
    def from_entry(entry: StockEntry) -> StockLineDTO:
        return StockLineDTO(
            product_id=entry.product_id,
            product_name=entry.product_name,
            total=entry.total,
            reserved=entry.reserved,
            available=entry.available,
        )


@dataclass(frozen=True)
class MenuLineDTO:
    """What a customer sees for one product of the open batch."""

    product_id: int
    product_name: str
    price: str
    size: str | None
    available: int

    @property
    def sold_out(self) -> bool:
        return self.available == 0


@dataclass(frozen=True)
class OpenBatchDTO:
    batch: BatchDTO
    menu: list[MenuLineDTO]


@dataclass(frozen=True)
class BulkUpdateResult:
    """Outcome of a bulk status change, one transaction per order."""

    updated: list[int]
    skipped: list[int]  # already in the target state
    failed: dict[int, str]  # order id -> error message
