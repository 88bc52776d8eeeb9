from ledger.domain.models import (
    Aggregate,
    AggregateKind,
    AggregateStatus,
    CapacityHolder,
    HolderKind,
    LineItemRequest,
    PendingItem,
    Reservation,
)
from ledger.domain.value_objects import (
    AggregateId,
    Capacity,
    HolderId,
    HumanId,
    Money,
    PendingItemId,
    Quantity,
    ReservationId,
)

__all__ = [
    "Aggregate",
    "AggregateKind",
    "AggregateStatus",
    "CapacityHolder",
    "HolderKind",
    "LineItemRequest",
    "PendingItem",
    "Reservation",
    "AggregateId",
    "HolderId",
    "ReservationId",
    "PendingItemId",
    "HumanId",
    "Money",
    "Capacity",
    "Quantity",
]
