"""Abstract repository for Batch aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from preorder.domain.model.batch import Batch, BatchStatus


class BatchRepository(ABC):

    @abstractmethod
    def get_by_id(
        self, batch_id: int, for_update: bool = False, for_share: bool = False
    ) -> Batch | None:
        """Return a batch by its ID, or None.

        With ``for_update`` the row stays exclusively locked until the unit
        of work ends.  ``for_share`` takes a shared lock instead: holders do
        not block each other, only a writer holding ``for_update``.
        """

    @abstractmethod
    def list_by_status(self, status: BatchStatus, for_update: bool = False) -> list[Batch]:
        """Return every batch in the given status."""

    @abstractmethod
    def list_all(self) -> list[Batch]:
        """Return every batch, newest delivery date first."""

    @abstractmethod
    def add(self, batch: Batch) -> None:
        """Persist a new batch and assign its ID."""

    @abstractmethod
    def save(self, batch: Batch) -> None:
        """Persist changes to an existing batch."""

    @abstractmethod
    def delete(self, batch_id: int) -> None:
        """Remove a batch together with its stock entries."""
