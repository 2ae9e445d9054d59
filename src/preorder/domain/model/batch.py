"""Batch aggregate: one pre-order run with its own stock pool.

Lifecycle is strictly linear: DRAFT -> OPEN -> CLOSED.  Only the OPEN
batch is visible to customers, and at most one batch is OPEN at a time.
The second rule spans several rows, so it is enforced by the publish use
case (close-then-open in one transaction), not here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from preorder.domain.exceptions import IllegalStatusTransition, ValidationError


class BatchStatus(Enum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"


MAX_TITLE_LENGTH = 120


@dataclass
class Batch:

    id: int | None
    title: str
    delivery_date: date
    status: BatchStatus = BatchStatus.DRAFT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(title: str, delivery_date: date) -> Batch:
        if not title or not title.strip():
            raise ValidationError("Batch title is required")
        if len(title.strip()) > MAX_TITLE_LENGTH:
            raise ValidationError(f"Batch title is limited to {MAX_TITLE_LENGTH} characters")
        return Batch(id=None, title=title.strip(), delivery_date=delivery_date)

    def duplicate(self) -> Batch:
        """A fresh DRAFT copy scheduled one week after this batch."""
        return Batch(
            id=None,
            title=f"{self.title} (Copy)",
            delivery_date=self.delivery_date + timedelta(days=7),
        )

    # --- State transitions ----------------------------------------------------

    def publish(self) -> None:
        if self.status != BatchStatus.DRAFT:
            raise IllegalStatusTransition(self.status.value, BatchStatus.OPEN.value)
        self.status = BatchStatus.OPEN

    def close(self) -> None:
        if self.status != BatchStatus.OPEN:
            raise IllegalStatusTransition(self.status.value, BatchStatus.CLOSED.value)
        self.status = BatchStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.status == BatchStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status == BatchStatus.CLOSED
