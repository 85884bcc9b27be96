"""
Ports (interfaces) for mastery persistence and remote sync.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ItemId, MasteryRecord, SRSResult


class StoreError(Exception):
    """Raised when the mastery store cannot be read or written."""


class SyncError(Exception):
    """Raised when a record could not be delivered to the remote backend."""


class SyncUnauthorizedError(SyncError):
    """The remote backend rejected our credentials."""


class MasteryStore(ABC):
    """
    Port for durable per-item mastery records.

    Implementations:
        - JsonFileMasteryStore: One JSON document on local disk.
        - InMemoryMasteryStore: Process-local dict.
    """

    @abstractmethod
    def get(self, item_id: ItemId) -> MasteryRecord | None:
        """
        Fetch the record for an item.

        Returns:
            The stored MasteryRecord, or None if the item was never reviewed.
        """
        pass

    @abstractmethod
    def put(self, record: MasteryRecord) -> None:
        """Insert or replace the record keyed by `record.item_id`."""
        pass

    @abstractmethod
    def all(self) -> list[MasteryRecord]:
        """Return every stored record."""
        pass


class RemoteSync(ABC):
    """
    Port for forwarding updated records to a remote backend.

    Delivery is best effort: callers catch SyncError and keep local progress.
    """

    @abstractmethod
    async def push(self, record: MasteryRecord, result: SRSResult, reviewed_at: int) -> None:
        """
        Send an updated record to the backend.

        Args:
            record: The record after the scheduling step was applied.
            result: The scheduling result that produced it.
            reviewed_at: Epoch seconds of the review.

        Raises:
            SyncError: If the backend could not be reached or refused the update.
        """
        pass
