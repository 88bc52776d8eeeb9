"""Aggregate service - orders and bookings built on the capacity ledger.

Every commit is all-or-nothing: line items are reserved in input order inside
one transaction, and the first failure rolls back every decrement already
applied for that commit.
"""

import logging

from ledger.domain import (
    Aggregate,
    AggregateId,
    AggregateKind,
    AggregateStatus,
    HumanId,
    LineItemRequest,
)
from ledger.domain.errors import (
    AggregateNotFoundError,
    EmptyInputError,
    ForbiddenError,
    InvalidIdError,
    InvalidQuantityError,
    InvalidStatusTransitionError,
)
from ledger.domain.models import INITIAL_STATUS, total_of
from ledger.services.capacity_service import (
    CapacityService,
    LedgerMutator,
    parse_holder_id,
    parse_quantity,
)
from ledger.stores.interfaces import AggregateStore, HolderStore, PendingItemStore

logger = logging.getLogger(__name__)


def parse_aggregate_id(aggregate_id: str) -> AggregateId:
    try:
        return AggregateId.from_string(aggregate_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError() from None


def line_item(holder_id: str, quantity: int) -> LineItemRequest:
    """Build a typed line item request from raw input."""
    return LineItemRequest(
        holder_id=parse_holder_id(holder_id), quantity=parse_quantity(quantity)
    )


class AggregateService:
    """Service for committing, reading and progressing orders and bookings."""

    def __init__(
        self,
        holders: HolderStore,
        aggregates: AggregateStore,
        pending: PendingItemStore,
        capacity: CapacityService | None = None,
    ) -> None:
        self._holders = holders
        self._aggregates = aggregates
        self._pending = pending
        self._capacity = capacity or CapacityService(holders, aggregates)
        self._mutator = LedgerMutator(holders)

    def create_aggregate(
        self, owner_id: str, kind: AggregateKind, line_items: list[LineItemRequest]
    ) -> Aggregate:
        """Reserve every line item and persist the aggregate atomically.

        Raises:
            EmptyInputError: If line_items is empty.
            HolderNotFoundError: If a referenced holder does not exist.
            HolderKindMismatchError: If a holder does not belong in this kind.
            InsufficientCapacityError: If any line item exceeds availability.
        """
        if not line_items:
            raise EmptyInputError()

        with self._aggregates.atomic():
            reservations = [
                self._capacity.validate_and_reserve(
                    item.holder_id, item.quantity.value, kind.holder_kinds
                )
                for item in line_items
            ]
            aggregate = self._aggregates.create_aggregate(
                kind=kind,
                owner_id=owner_id,
                human_id=HumanId.generate(kind.human_id_prefix),
                status=INITIAL_STATUS[kind],
                total_amount=total_of(reservations),
                line_items=reservations,
            )

        logger.info(
            "Committed %s %s for owner %s: %d line item(s), total %s",
            kind.value.lower(),
            aggregate.human_id,
            owner_id,
            len(aggregate.line_items),
            aggregate.total_amount,
        )
        return aggregate

    def checkout(self, owner_id: str, kind: AggregateKind = AggregateKind.ORDER) -> Aggregate:
        """Commit the owner's pending items and clear them from the cart.

        Only pending items whose holder kind belongs to ``kind`` are consumed.

        Raises:
            EmptyInputError: If the cart holds nothing for this kind.
        """
        with self._pending.atomic():
            items = [
                item
                for item in self._pending.list_pending(owner_id)
                if item.holder_kind in kind.holder_kinds
            ]
            if not items:
                raise EmptyInputError()
            aggregate = self.create_aggregate(
                owner_id,
                kind,
                [
                    LineItemRequest(holder_id=item.holder_id, quantity=item.quantity)
                    for item in items
                ],
            )
            self._pending.delete_pending([item.id for item in items])
        return aggregate

    def book(self, owner_id: str, holder_id: str, seats: int) -> Aggregate:
        """Book seats for a single event directly, without a cart."""
        return self.create_aggregate(
            owner_id, AggregateKind.BOOKING, [line_item(holder_id, seats)]
        )

    def get_aggregate(self, aggregate_id: str, requesting_owner_id: str) -> Aggregate:
        """Return an aggregate owned by the requester.

        Raises:
            InvalidIdError: If the aggregate_id is not a valid UUID.
            AggregateNotFoundError: If the aggregate does not exist.
            ForbiddenError: If the requester is not the owner.
        """
        aggregate = self._aggregates.get_aggregate(parse_aggregate_id(aggregate_id))
        return self._owned(aggregate, aggregate_id, requesting_owner_id)

    def get_aggregate_by_human_id(
        self, human_id: str, requesting_owner_id: str
    ) -> Aggregate:
        aggregate = self._aggregates.get_aggregate_by_human_id(human_id)
        return self._owned(aggregate, human_id, requesting_owner_id)

    def list_aggregates(
        self,
        owner_id: str,
        kind: AggregateKind | None = None,
        page: int = 0,
        size: int = 10,
    ) -> list[Aggregate]:
        """Return one page of the owner's aggregates, newest first."""
        if page < 0 or size < 1:
            raise InvalidQuantityError()
        return self._aggregates.list_aggregates(owner_id, kind, page * size, size)

    def update_status(self, aggregate_id: str, new_status: str) -> Aggregate:
        """Move an aggregate to a new status. Never touches capacity.

        Cancellation goes through ``cancel_aggregate`` so that capacity is
        released.

        Raises:
            AggregateNotFoundError: If the aggregate does not exist.
            InvalidStatusTransitionError: If the transition is not allowed.
        """
        parsed = parse_aggregate_id(aggregate_id)
        with self._aggregates.atomic():
            aggregate = self._aggregates.get_aggregate(parsed, for_update=True)
            if aggregate is None:
                raise AggregateNotFoundError(aggregate_id)
            try:
                status = AggregateStatus(new_status)
            except ValueError:
                raise InvalidStatusTransitionError(
                    aggregate.status.value, str(new_status)
                ) from None
            if status == aggregate.status:
                return aggregate
            if status is AggregateStatus.CANCELLED or not aggregate.can_transition_to(
                status
            ):
                raise InvalidStatusTransitionError(aggregate.status.value, status.value)
            updated = self._aggregates.set_status(parsed, status)

        logger.info(
            "Aggregate %s status %s -> %s",
            aggregate.human_id,
            aggregate.status.value,
            status.value,
        )
        return updated

    def cancel_aggregate(self, aggregate_id: str, requesting_owner_id: str) -> Aggregate:
        """Cancel an aggregate and release its reserved capacity.

        Raises:
            AggregateNotFoundError: If the aggregate does not exist.
            ForbiddenError: If the requester is not the owner.
            InvalidStatusTransitionError: If the aggregate can no longer be cancelled.
        """
        parsed = parse_aggregate_id(aggregate_id)
        with self._aggregates.atomic():
            aggregate = self._owned(
                self._aggregates.get_aggregate(parsed, for_update=True),
                aggregate_id,
                requesting_owner_id,
            )
            if not aggregate.can_transition_to(AggregateStatus.CANCELLED):
                raise InvalidStatusTransitionError(
                    aggregate.status.value, AggregateStatus.CANCELLED.value
                )
            for item in aggregate.line_items:
                self._mutator.apply(item.holder_id, item.quantity.value)
            cancelled = self._aggregates.set_status(parsed, AggregateStatus.CANCELLED)

        logger.info(
            "Cancelled %s, released %d line item(s)",
            aggregate.human_id,
            len(aggregate.line_items),
        )
        return cancelled

    def _owned(
        self, aggregate: Aggregate | None, reference: str, requesting_owner_id: str
    ) -> Aggregate:
        if aggregate is None:
            raise AggregateNotFoundError(reference)
        if aggregate.owner_id != str(requesting_owner_id):
            raise ForbiddenError()
        return aggregate
