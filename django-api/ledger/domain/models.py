"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ledger/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

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


class HolderKind(Enum):
    PRODUCT = "PRODUCT"
    EVENT = "EVENT"
    MENU_ITEM = "MENU_ITEM"


class AggregateKind(Enum):
    ORDER = "ORDER"
    BOOKING = "BOOKING"

    @property
    def human_id_prefix(self) -> str:
        return "ORD" if self is AggregateKind.ORDER else "EVT"

    @property
    def holder_kinds(self) -> frozenset[HolderKind]:
        """Holder kinds that may be committed into this kind of aggregate."""
        if self is AggregateKind.BOOKING:
            return frozenset({HolderKind.EVENT})
        return frozenset({HolderKind.PRODUCT, HolderKind.MENU_ITEM})


class AggregateStatus(Enum):
    CREATED = "CREATED"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


INITIAL_STATUS: dict[AggregateKind, AggregateStatus] = {
    AggregateKind.ORDER: AggregateStatus.CREATED,
    AggregateKind.BOOKING: AggregateStatus.CONFIRMED,
}

# Terminal states have no entry.
STATUS_TRANSITIONS: dict[AggregateKind, dict[AggregateStatus, frozenset[AggregateStatus]]] = {
    AggregateKind.ORDER: {
        AggregateStatus.CREATED: frozenset(
            {AggregateStatus.CONFIRMED, AggregateStatus.CANCELLED}
        ),
        AggregateStatus.CONFIRMED: frozenset(
            {AggregateStatus.PREPARING, AggregateStatus.CANCELLED}
        ),
        AggregateStatus.PREPARING: frozenset(
            {AggregateStatus.READY, AggregateStatus.CANCELLED}
        ),
        AggregateStatus.READY: frozenset({AggregateStatus.DELIVERED}),
    },
    AggregateKind.BOOKING: {
        AggregateStatus.CONFIRMED: frozenset({AggregateStatus.CANCELLED}),
    },
}


@dataclass(frozen=True)
class CapacityHolder:
    """Domain representation of a product, event or menu item with finite capacity."""

    id: HolderId
    kind: HolderKind
    name: str
    total_capacity: Capacity
    available_capacity: Capacity
    price: Money | None
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        if self.available_capacity.value > self.total_capacity.value:
            raise ValueError("Available capacity cannot exceed total capacity")

    @property
    def booked(self) -> int:
        return self.total_capacity.value - self.available_capacity.value

    @property
    def unit_price(self) -> Money:
        return self.price if self.price is not None else Money.zero()


@dataclass(frozen=True)
class LineItemRequest:
    """A requested commitment of quantity against a holder."""

    holder_id: HolderId
    quantity: Quantity


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a single commitment of quantity.

    ``aggregate_id`` is None until the reservation is attached to a persisted
    aggregate.
    """

    id: ReservationId
    holder_id: HolderId
    holder_name: str
    quantity: Quantity
    unit_price_snapshot: Money
    aggregate_id: AggregateId | None = None

    @property
    def subtotal(self) -> Money:
        return self.unit_price_snapshot * self.quantity.value


@dataclass(frozen=True)
class Aggregate:
    """Domain representation of an order or booking."""

    id: AggregateId
    human_id: HumanId
    kind: AggregateKind
    owner_id: str
    status: AggregateStatus
    total_amount: Money
    created_at: datetime
    line_items: tuple[Reservation, ...] = ()

    def can_transition_to(self, status: AggregateStatus) -> bool:
        return status in STATUS_TRANSITIONS[self.kind].get(self.status, frozenset())


@dataclass(frozen=True)
class PendingItem:
    """Domain representation of a cart row awaiting checkout."""

    id: PendingItemId
    owner_id: str
    holder_id: HolderId
    holder_name: str
    holder_kind: HolderKind
    quantity: Quantity
    unit_price: Money
    created_at: datetime

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


def total_of(line_items: tuple[Reservation, ...] | list[Reservation]) -> Money:
    total = Money.zero()
    for item in line_items:
        total = total + item.subtotal
    return total
