"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from ledger.domain import (
    Aggregate,
    AggregateId,
    AggregateKind,
    AggregateStatus,
    CapacityHolder,
    HolderId,
    HolderKind,
    HumanId,
    Money,
    PendingItem,
    PendingItemId,
    Reservation,
)


class TransactionalStore(ABC):
    """A store able to group several calls into one atomic unit."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager; an exception inside rolls back every write."""
        ...


class HolderStore(TransactionalStore):
    """Interface for capacity holder persistence and the capacity counter."""

    @abstractmethod
    def list_holders(
        self,
        kind: HolderKind | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[CapacityHolder]:
        """Return holders ordered by created_at descending.

        ``search`` matches a case-insensitive substring of the name. Without
        ``limit`` every row from ``offset`` on is returned.
        """
        ...

    @abstractmethod
    def get_holder(
        self, holder_id: HolderId, for_update: bool = False
    ) -> CapacityHolder | None:
        """Return a holder by ID, or None if not found.

        With ``for_update`` the holder row stays locked until the enclosing
        transaction ends.
        """
        ...

    @abstractmethod
    def create_holder(
        self, kind: HolderKind, name: str, total_capacity: int, price: Money | None
    ) -> CapacityHolder:
        """Persist a new holder with available capacity equal to total."""
        ...

    @abstractmethod
    def apply_delta(self, holder_id: HolderId, delta: int) -> bool:
        """Atomically add ``delta`` to available capacity.

        Returns False, leaving the row untouched, when the holder does not
        exist or the result would fall outside ``[0, total_capacity]``.
        """
        ...

    @abstractmethod
    def set_capacity(
        self, holder_id: HolderId, total_capacity: int, available_capacity: int
    ) -> CapacityHolder:
        """Overwrite both counters. Callers must hold the row lock."""
        ...

    @abstractmethod
    def set_price(self, holder_id: HolderId, price: Money | None) -> CapacityHolder:
        ...

    @abstractmethod
    def set_name(self, holder_id: HolderId, name: str) -> CapacityHolder:
        ...

    @abstractmethod
    def delete_holder(self, holder_id: HolderId) -> None:
        ...


class AggregateStore(TransactionalStore):
    """Interface for order/booking persistence."""

    @abstractmethod
    def create_aggregate(
        self,
        kind: AggregateKind,
        owner_id: str,
        human_id: HumanId,
        status: AggregateStatus,
        total_amount: Money,
        line_items: list[Reservation],
    ) -> Aggregate:
        """Persist an aggregate and its reservations, keeping line item order."""
        ...

    @abstractmethod
    def get_aggregate(
        self, aggregate_id: AggregateId, for_update: bool = False
    ) -> Aggregate | None:
        ...

    @abstractmethod
    def get_aggregate_by_human_id(self, human_id: str) -> Aggregate | None:
        ...

    @abstractmethod
    def list_aggregates(
        self, owner_id: str, kind: AggregateKind | None, offset: int, limit: int
    ) -> list[Aggregate]:
        """Return the owner's aggregates ordered by created_at descending."""
        ...

    @abstractmethod
    def set_status(
        self, aggregate_id: AggregateId, status: AggregateStatus
    ) -> Aggregate:
        ...

    @abstractmethod
    def has_reservations(self, holder_id: HolderId) -> bool:
        """Check if any aggregate, cancelled or not, references the holder."""
        ...


class PendingItemStore(TransactionalStore):
    """Interface for cart persistence. Rows are scoped per owner."""

    @abstractmethod
    def list_pending(self, owner_id: str) -> list[PendingItem]:
        """Return the owner's pending items ordered by created_at ascending."""
        ...

    @abstractmethod
    def get_pending(self, item_id: PendingItemId) -> PendingItem | None:
        ...

    @abstractmethod
    def find_pending(self, owner_id: str, holder_id: HolderId) -> PendingItem | None:
        ...

    @abstractmethod
    def add_pending(
        self, owner_id: str, holder_id: HolderId, quantity: int
    ) -> PendingItem:
        ...

    @abstractmethod
    def set_pending_quantity(self, item_id: PendingItemId, quantity: int) -> PendingItem:
        ...

    @abstractmethod
    def delete_pending(self, item_ids: list[PendingItemId]) -> None:
        ...
