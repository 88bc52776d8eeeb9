"""Capacity service - the ledger counter and holder administration.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from decimal import Decimal

from ledger.domain import (
    CapacityHolder,
    HolderId,
    HolderKind,
    Money,
    Quantity,
    Reservation,
    ReservationId,
)
from ledger.domain.errors import (
    HolderKindMismatchError,
    HolderNotFoundError,
    InsufficientCapacityError,
    InvalidCapacityError,
    InvalidIdError,
    InvalidKindError,
    InvalidQuantityError,
)
from ledger.stores.interfaces import AggregateStore, HolderStore

logger = logging.getLogger(__name__)


def parse_holder_id(holder_id: str) -> HolderId:
    try:
        return HolderId.from_string(holder_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError() from None


def parse_holder_kind(kind: str) -> HolderKind:
    try:
        return HolderKind(kind)
    except ValueError:
        raise InvalidKindError(str(kind)) from None


def parse_quantity(quantity: int) -> Quantity:
    try:
        return Quantity(value=int(quantity))
    except (TypeError, ValueError):
        raise InvalidQuantityError() from None


class ReservationValidator:
    """Checks a requested quantity against a holder's available capacity."""

    def validate(self, holder: CapacityHolder, quantity: Quantity) -> None:
        """Raise InsufficientCapacityError if ``quantity`` cannot be reserved.

        Pure read. Run it inside the transaction that performs the decrement.
        """
        available = holder.available_capacity.value
        if quantity.value > available:
            raise InsufficientCapacityError(
                holder_id=str(holder.id), requested=quantity.value, available=available
            )


class LedgerMutator:
    """Applies signed deltas to a holder's available capacity."""

    def __init__(self, store: HolderStore) -> None:
        self._store = store

    def apply(self, holder_id: HolderId, delta: int) -> CapacityHolder:
        """Add ``delta`` to the holder's available capacity and persist it.

        Raises:
            HolderNotFoundError: If the holder does not exist.
            InsufficientCapacityError: If the result would be negative.
            InvalidCapacityError: If the result would exceed total capacity.
        """
        with self._store.atomic():
            if self._store.apply_delta(holder_id, delta):
                return self._store.get_holder(holder_id)

            holder = self._store.get_holder(holder_id)
            if holder is None:
                raise HolderNotFoundError(str(holder_id))
            if delta < 0:
                raise InsufficientCapacityError(
                    holder_id=str(holder_id),
                    requested=-delta,
                    available=holder.available_capacity.value,
                )
            raise InvalidCapacityError(
                str(holder_id), "Release would exceed total capacity"
            )


class CapacityService:
    """Service for capacity holders and single reservations."""

    def __init__(
        self,
        store: HolderStore,
        aggregates: AggregateStore,
        validator: ReservationValidator | None = None,
        mutator: LedgerMutator | None = None,
    ) -> None:
        self._store = store
        self._aggregates = aggregates
        self._validator = validator or ReservationValidator()
        self._mutator = mutator or LedgerMutator(store)

    def list_holders(
        self,
        kind: str | None = None,
        search: str | None = None,
        page: int = 0,
        size: int | None = None,
    ) -> list[CapacityHolder]:
        """Return holders newest first, optionally filtered and paged.

        Raises:
            InvalidKindError: If kind is not a known holder kind.
            InvalidQuantityError: If page is negative or size is below 1.
        """
        if page < 0 or (size is not None and size < 1):
            raise InvalidQuantityError()
        return self._store.list_holders(
            parse_holder_kind(kind) if kind else None,
            search=search.strip() if search else None,
            offset=page * size if size is not None else 0,
            limit=size,
        )

    def get_holder(self, holder_id: str) -> CapacityHolder:
        """Return a holder by ID.

        Raises:
            InvalidIdError: If the holder_id is not a valid UUID.
            HolderNotFoundError: If the holder does not exist.
        """
        holder = self._store.get_holder(parse_holder_id(holder_id))
        if holder is None:
            raise HolderNotFoundError(holder_id)
        return holder

    def create_holder(
        self, kind: str, name: str, total_capacity: int, price: Decimal | None = None
    ) -> CapacityHolder:
        if total_capacity < 0:
            raise InvalidCapacityError("", "Total capacity cannot be negative")
        holder = self._store.create_holder(
            parse_holder_kind(kind),
            name,
            total_capacity,
            Money(amount=price) if price is not None else None,
        )
        logger.info(
            "Created %s holder %s with capacity %d", kind, holder.id, total_capacity
        )
        return holder

    def validate_and_reserve(
        self,
        holder_id: HolderId | str,
        quantity: int,
        allowed_kinds: frozenset[HolderKind] | None = None,
    ) -> Reservation:
        """Validate and decrement capacity for one line item.

        Returns an unattached Reservation holding the price snapshot. When
        called inside an enclosing ``atomic()`` block the decrement is undone
        if that block fails.

        Raises:
            InvalidIdError: If the holder_id is not a valid UUID.
            InvalidQuantityError: If quantity is not positive.
            HolderNotFoundError: If the holder does not exist.
            InsufficientCapacityError: If quantity exceeds available capacity.
            HolderKindMismatchError: If the holder kind is not in allowed_kinds.
        """
        if not isinstance(holder_id, HolderId):
            holder_id = parse_holder_id(holder_id)
        requested = parse_quantity(quantity)

        with self._store.atomic():
            holder = self._store.get_holder(holder_id, for_update=True)
            if holder is None:
                raise HolderNotFoundError(str(holder_id))
            if allowed_kinds is not None and holder.kind not in allowed_kinds:
                raise HolderKindMismatchError(str(holder_id), holder.kind.value)
            try:
                self._validator.validate(holder, requested)
            except InsufficientCapacityError as exc:
                logger.warning(
                    "Rejected reservation of %d on holder %s (%d available)",
                    exc.requested,
                    exc.holder_id,
                    exc.available,
                )
                raise
            self._mutator.apply(holder_id, -requested.value)

        return Reservation(
            id=ReservationId.new(),
            holder_id=holder.id,
            holder_name=holder.name,
            quantity=requested,
            unit_price_snapshot=holder.unit_price,
        )

    def adjust_total_capacity(self, holder_id: str, new_total: int) -> CapacityHolder:
        """Change total capacity, keeping the booked amount.

        Raises:
            InvalidIdError: If the holder_id is not a valid UUID.
            HolderNotFoundError: If the holder does not exist.
            InvalidCapacityError: If new_total is below the booked amount.
        """
        parsed = parse_holder_id(holder_id)
        with self._store.atomic():
            holder = self._store.get_holder(parsed, for_update=True)
            if holder is None:
                raise HolderNotFoundError(holder_id)
            booked = holder.booked
            if new_total < booked:
                raise InvalidCapacityError(
                    holder_id, "Cannot set total capacity below already booked"
                )
            updated = self._store.set_capacity(parsed, new_total, new_total - booked)
        logger.info(
            "Adjusted holder %s total capacity %d -> %d (%d booked)",
            holder_id,
            holder.total_capacity.value,
            new_total,
            booked,
        )
        return updated

    def update_holder(self, holder_id: str, name: str) -> CapacityHolder:
        """Rename a holder. Capacity and price are left as they are."""
        parsed = parse_holder_id(holder_id)
        with self._store.atomic():
            holder = self._store.get_holder(parsed, for_update=True)
            if holder is None:
                raise HolderNotFoundError(holder_id)
            updated = self._store.set_name(parsed, name.strip())
        logger.info("Renamed holder %s to %r", holder_id, updated.name)
        return updated

    def update_price(self, holder_id: str, price: Decimal | None) -> CapacityHolder:
        """Change the current price. Existing reservations keep their snapshot."""
        parsed = parse_holder_id(holder_id)
        if self._store.get_holder(parsed) is None:
            raise HolderNotFoundError(holder_id)
        return self._store.set_price(
            parsed, Money(amount=price) if price is not None else None
        )

    def delete_holder(self, holder_id: str) -> None:
        parsed = parse_holder_id(holder_id)
        with self._store.atomic():
            holder = self._store.get_holder(parsed, for_update=True)
            if holder is None:
                raise HolderNotFoundError(holder_id)
            if holder.booked > 0 or self._aggregates.has_reservations(parsed):
                raise InvalidCapacityError(
                    holder_id, "Cannot delete a holder with reservations"
                )
            self._store.delete_holder(parsed)
        logger.info("Deleted holder %s", holder_id)
