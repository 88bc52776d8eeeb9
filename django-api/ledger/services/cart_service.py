"""Cart service - the per-owner pending collection consumed by checkout.

Availability checks here are advisory: capacity is only decremented at
checkout, which validates again inside its own transaction.
"""

from ledger.domain import AggregateKind, PendingItem, PendingItemId
from ledger.domain.errors import (
    ForbiddenError,
    HolderKindMismatchError,
    HolderNotFoundError,
    InsufficientCapacityError,
    InvalidIdError,
    PendingItemNotFoundError,
)
from ledger.services.capacity_service import parse_holder_id, parse_quantity
from ledger.stores.interfaces import HolderStore, PendingItemStore


def parse_item_id(item_id: str) -> PendingItemId:
    try:
        return PendingItemId.from_string(item_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError() from None


class CartService:
    """Service for cart operations."""

    def __init__(self, holders: HolderStore, pending: PendingItemStore) -> None:
        self._holders = holders
        self._pending = pending

    def get_cart(self, owner_id: str) -> list[PendingItem]:
        return self._pending.list_pending(owner_id)

    def add_to_cart(self, owner_id: str, holder_id: str, quantity: int) -> PendingItem:
        """Add a holder to the cart, merging with an existing row.

        Only holders that can be checked out into an order are accepted.
        The holder row is locked while merging so that concurrent adds for
        the same holder end up in one row.

        Raises:
            InvalidIdError: If the holder_id is not a valid UUID.
            InvalidQuantityError: If quantity is not positive.
            HolderNotFoundError: If the holder does not exist.
            HolderKindMismatchError: If the holder cannot be checked out.
            InsufficientCapacityError: If the merged quantity exceeds availability.
        """
        parsed = parse_holder_id(holder_id)
        requested = parse_quantity(quantity)
        with self._pending.atomic():
            holder = self._holders.get_holder(parsed, for_update=True)
            if holder is None:
                raise HolderNotFoundError(holder_id)
            if holder.kind not in AggregateKind.ORDER.holder_kinds:
                raise HolderKindMismatchError(holder_id, holder.kind.value)

            existing = self._pending.find_pending(owner_id, parsed)
            new_quantity = requested.value + (existing.quantity.value if existing else 0)
            if new_quantity > holder.available_capacity.value:
                raise InsufficientCapacityError(
                    holder_id=holder_id,
                    requested=new_quantity,
                    available=holder.available_capacity.value,
                )
            if existing is not None:
                return self._pending.set_pending_quantity(existing.id, new_quantity)
            return self._pending.add_pending(owner_id, parsed, new_quantity)

    def update_quantity(
        self, owner_id: str, item_id: str, quantity: int
    ) -> PendingItem | None:
        """Set a cart row's quantity. A quantity below 1 removes the row."""
        item = self._owned_item(owner_id, item_id)
        if quantity < 1:
            self._pending.delete_pending([item.id])
            return None
        with self._pending.atomic():
            holder = self._holders.get_holder(item.holder_id, for_update=True)
            if holder is None:
                raise HolderNotFoundError(str(item.holder_id))
            if quantity > holder.available_capacity.value:
                raise InsufficientCapacityError(
                    holder_id=str(item.holder_id),
                    requested=quantity,
                    available=holder.available_capacity.value,
                )
            return self._pending.set_pending_quantity(item.id, quantity)

    def remove_from_cart(self, owner_id: str, item_id: str) -> None:
        item = self._owned_item(owner_id, item_id)
        self._pending.delete_pending([item.id])

    def _owned_item(self, owner_id: str, item_id: str) -> PendingItem:
        item = self._pending.get_pending(parse_item_id(item_id))
        if item is None:
            raise PendingItemNotFoundError(item_id)
        if item.owner_id != str(owner_id):
            raise ForbiddenError()
        return item
