"""Unit tests for the ledger services.

These run against the in-memory store and cover domain error mapping,
all-or-nothing commits and the capacity invariants.
Run with: pytest tests/test_services.py -v
"""

from decimal import Decimal

import pytest

from ledger.domain import AggregateKind, AggregateStatus, HolderKind, Money
from ledger.domain.errors import (
    AggregateNotFoundError,
    EmptyInputError,
    ForbiddenError,
    HolderKindMismatchError,
    HolderNotFoundError,
    InsufficientCapacityError,
    InvalidCapacityError,
    InvalidIdError,
    InvalidKindError,
    InvalidQuantityError,
    InvalidStatusTransitionError,
    PendingItemNotFoundError,
)
from ledger.services import LedgerMutator
from ledger.services.aggregate_service import line_item

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def available(store, holder) -> int:
    return store.holders[holder.id].available_capacity.value


def active_reserved(store, holder) -> int:
    return sum(
        item.quantity.value
        for aggregate in store.aggregates.values()
        if aggregate.status is not AggregateStatus.CANCELLED
        for item in aggregate.line_items
        if item.holder_id == holder.id
    )


class TestValidateAndReserve:
    """Tests for CapacityService.validate_and_reserve."""

    def test_reserve_decrements_available(self, store, capacity):
        """Reserving 3 of 10 leaves 7 available."""
        holder = store.add_holder(total=10)

        reservation = capacity.validate_and_reserve(str(holder.id.value), 3)

        assert reservation.quantity.value == 3
        assert reservation.unit_price_snapshot == holder.price
        assert available(store, holder) == 7

    def test_reserve_more_than_available_fails_and_keeps_capacity(self, store, capacity):
        """Reserving 8 with 7 available is rejected; capacity stays 7."""
        holder = store.add_holder(total=10, available=7)

        with pytest.raises(InsufficientCapacityError) as exc:
            capacity.validate_and_reserve(str(holder.id.value), 8)

        assert exc.value.requested == 8
        assert exc.value.available == 7
        assert available(store, holder) == 7

    def test_reserve_unknown_holder(self, capacity):
        with pytest.raises(HolderNotFoundError):
            capacity.validate_and_reserve(MISSING_ID, 1)

    def test_reserve_invalid_holder_id(self, capacity):
        with pytest.raises(InvalidIdError):
            capacity.validate_and_reserve("nope", 1)

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_reserve_non_positive_quantity(self, store, capacity, quantity):
        holder = store.add_holder(total=10)
        with pytest.raises(InvalidQuantityError):
            capacity.validate_and_reserve(str(holder.id.value), quantity)
        assert available(store, holder) == 10

    def test_reserve_exactly_all_capacity(self, store, capacity):
        holder = store.add_holder(total=4)
        capacity.validate_and_reserve(holder.id, 4)
        assert available(store, holder) == 0


class TestLedgerMutator:
    """Tests for LedgerMutator.apply."""

    def test_release_restores_capacity(self, store):
        holder = store.add_holder(total=10, available=4)
        updated = LedgerMutator(store).apply(holder.id, 3)
        assert updated.available_capacity.value == 7

    def test_release_beyond_total_is_rejected(self, store):
        holder = store.add_holder(total=10, available=9)
        with pytest.raises(InvalidCapacityError):
            LedgerMutator(store).apply(holder.id, 2)
        assert available(store, holder) == 9

    def test_consume_beyond_available_is_rejected(self, store):
        holder = store.add_holder(total=10, available=1)
        with pytest.raises(InsufficientCapacityError):
            LedgerMutator(store).apply(holder.id, -2)


class TestHolderAdministration:
    """Tests for holder creation, capacity adjustment and deletion."""

    def test_create_holder_starts_fully_available(self, capacity):
        holder = capacity.create_holder("EVENT", "Keynote", 120, Decimal("0"))
        assert holder.kind is HolderKind.EVENT
        assert holder.available_capacity.value == 120

    def test_create_holder_rejects_negative_capacity(self, capacity):
        with pytest.raises(InvalidCapacityError):
            capacity.create_holder("EVENT", "Keynote", -1)

    def test_get_holder_not_found(self, capacity):
        with pytest.raises(HolderNotFoundError):
            capacity.get_holder(MISSING_ID)

    def test_list_holders_filters_by_kind(self, store, capacity):
        store.add_holder(total=1, kind=HolderKind.PRODUCT)
        event = store.add_holder(total=1, kind=HolderKind.EVENT)
        assert [h.id for h in capacity.list_holders("EVENT")] == [event.id]

    def test_list_holders_unknown_kind(self, capacity):
        with pytest.raises(InvalidKindError):
            capacity.list_holders("SPACESHIP")

    def test_list_holders_search_is_case_insensitive_and_paged(self, store, capacity):
        for name in ("Green Tea", "Black tea", "Coffee", "Mint TEA"):
            store.add_holder(total=1, name=name)

        first = capacity.list_holders(search="tea", page=0, size=2)
        second = capacity.list_holders(search="tea", page=1, size=2)

        assert [h.name for h in first] == ["Mint TEA", "Black tea"]
        assert [h.name for h in second] == ["Green Tea"]

    def test_list_holders_rejects_bad_page(self, capacity):
        with pytest.raises(InvalidQuantityError):
            capacity.list_holders(page=-1, size=10)

    def test_update_holder_renames_only(self, store, capacity):
        holder = store.add_holder(total=10, available=6, price="3.00", name="Old")

        updated = capacity.update_holder(str(holder.id.value), "  New name ")

        assert updated.name == "New name"
        assert updated.available_capacity.value == 6
        assert updated.price == holder.price

    def test_update_missing_holder(self, capacity):
        with pytest.raises(HolderNotFoundError):
            capacity.update_holder(MISSING_ID, "Anything")

    def test_adjust_below_booked_fails(self, store, capacity):
        """Total 10 with 4 available (6 booked) cannot drop to 3."""
        holder = store.add_holder(total=10, available=4)

        with pytest.raises(InvalidCapacityError):
            capacity.adjust_total_capacity(str(holder.id.value), 3)

        assert store.holders[holder.id].total_capacity.value == 10

    def test_adjust_keeps_booked_amount(self, store, capacity):
        holder = store.add_holder(total=10, available=4)

        updated = capacity.adjust_total_capacity(str(holder.id.value), 6)

        assert updated.total_capacity.value == 6
        assert updated.available_capacity.value == 0
        assert updated.booked == 6

    def test_adjust_upwards(self, store, capacity):
        holder = store.add_holder(total=10, available=4)
        updated = capacity.adjust_total_capacity(str(holder.id.value), 20)
        assert updated.available_capacity.value == 14

    def test_delete_holder_with_reservations_fails(self, store, capacity, aggregates):
        holder = store.add_holder(total=5)
        aggregates.create_aggregate(
            "1", AggregateKind.ORDER, [line_item(str(holder.id.value), 1)]
        )
        with pytest.raises(InvalidCapacityError):
            capacity.delete_holder(str(holder.id.value))

    def test_delete_unused_holder(self, store, capacity):
        holder = store.add_holder(total=5)
        capacity.delete_holder(str(holder.id.value))
        assert holder.id not in store.holders


class TestCreateAggregate:
    """Tests for AggregateService.create_aggregate."""

    def test_order_total_uses_price_snapshot(self, store, aggregates):
        a = store.add_holder(total=10, price="2.50")
        b = store.add_holder(total=10, price="4.00")

        order = aggregates.create_aggregate(
            "1",
            AggregateKind.ORDER,
            [line_item(str(a.id.value), 2), line_item(str(b.id.value), 3)],
        )

        assert order.total_amount == Money(amount=Decimal("17.00"))
        assert order.status is AggregateStatus.CREATED
        assert order.human_id.value.startswith("ORD-")
        assert [item.holder_id for item in order.line_items] == [a.id, b.id]

    def test_empty_input_fails(self, aggregates):
        with pytest.raises(EmptyInputError):
            aggregates.create_aggregate("1", AggregateKind.ORDER, [])

    def test_all_or_nothing(self, store, aggregates):
        """A failing second line leaves the first holder untouched."""
        a = store.add_holder(total=10)
        b = store.add_holder(total=5)

        with pytest.raises(InsufficientCapacityError) as exc:
            aggregates.create_aggregate(
                "1",
                AggregateKind.ORDER,
                [line_item(str(a.id.value), 2), line_item(str(b.id.value), 999)],
            )

        assert exc.value.holder_id == str(b.id)
        assert available(store, a) == 10
        assert available(store, b) == 5
        assert store.aggregates == {}

    def test_unknown_holder_rolls_back(self, store, aggregates):
        a = store.add_holder(total=10)
        with pytest.raises(HolderNotFoundError):
            aggregates.create_aggregate(
                "1",
                AggregateKind.ORDER,
                [line_item(str(a.id.value), 2), line_item(MISSING_ID, 1)],
            )
        assert available(store, a) == 10

    def test_booking_rejects_products(self, store, aggregates):
        product = store.add_holder(total=10, kind=HolderKind.PRODUCT)
        with pytest.raises(HolderKindMismatchError):
            aggregates.book("1", str(product.id.value), 1)
        assert available(store, product) == 10

    def test_book_event(self, store, aggregates):
        event = store.add_holder(total=50, kind=HolderKind.EVENT, price=None)

        booking = aggregates.book("1", str(event.id.value), 4)

        assert booking.kind is AggregateKind.BOOKING
        assert booking.status is AggregateStatus.CONFIRMED
        assert booking.human_id.value.startswith("EVT-")
        assert booking.total_amount == Money.zero()
        assert available(store, event) == 46

    def test_price_change_does_not_touch_existing_orders(self, store, capacity, aggregates):
        holder = store.add_holder(total=10, price="5.00")
        order = aggregates.create_aggregate(
            "1", AggregateKind.ORDER, [line_item(str(holder.id.value), 2)]
        )

        capacity.update_price(str(holder.id.value), Decimal("99.00"))

        stored = aggregates.get_aggregate(str(order.id.value), "1")
        assert stored.total_amount == Money(amount=Decimal("10.00"))
        assert stored.line_items[0].unit_price_snapshot == Money(amount=Decimal("5.00"))

    def test_booked_matches_active_reservations(self, store, aggregates):
        holder = store.add_holder(total=20)
        for quantity in (3, 5, 2):
            aggregates.create_aggregate(
                "1", AggregateKind.ORDER, [line_item(str(holder.id.value), quantity)]
            )
        current = store.holders[holder.id]
        assert current.booked == active_reserved(store, holder) == 10


class TestCheckout:
    """Tests for committing the cart."""

    def test_checkout_consumes_and_clears_cart(self, store, cart, aggregates):
        a = store.add_holder(total=10, price="1.00")
        b = store.add_holder(total=10, price="2.00", kind=HolderKind.MENU_ITEM)
        cart.add_to_cart("1", str(a.id.value), 2)
        cart.add_to_cart("1", str(b.id.value), 1)

        order = aggregates.checkout("1")

        assert order.total_amount == Money(amount=Decimal("4.00"))
        assert available(store, a) == 8
        assert available(store, b) == 9
        assert cart.get_cart("1") == []

    def test_checkout_empty_cart(self, aggregates):
        with pytest.raises(EmptyInputError):
            aggregates.checkout("1")

    def test_failed_checkout_keeps_cart(self, store, cart, aggregates):
        a = store.add_holder(total=10)
        b = store.add_holder(total=10)
        cart.add_to_cart("1", str(a.id.value), 2)
        cart.add_to_cart("1", str(b.id.value), 5)
        store.set_capacity(b.id, 10, 1)

        with pytest.raises(InsufficientCapacityError):
            aggregates.checkout("1")

        assert available(store, a) == 10
        assert len(cart.get_cart("1")) == 2

    def test_checkout_only_touches_own_cart(self, store, cart, aggregates):
        holder = store.add_holder(total=10)
        cart.add_to_cart("1", str(holder.id.value), 1)
        cart.add_to_cart("2", str(holder.id.value), 1)

        aggregates.checkout("1")

        assert len(cart.get_cart("2")) == 1


class TestReadAggregate:
    """Tests for ownership-checked reads and listing."""

    def test_get_is_idempotent(self, store, aggregates):
        holder = store.add_holder(total=10)
        order = aggregates.create_aggregate(
            "1", AggregateKind.ORDER, [line_item(str(holder.id.value), 1)]
        )

        first = aggregates.get_aggregate(str(order.id.value), "1")
        second = aggregates.get_aggregate(str(order.id.value), "1")

        assert first == second == order

    def test_get_by_other_owner_is_forbidden(self, store, aggregates):
        holder = store.add_holder(total=10)
        order = aggregates.create_aggregate(
            "owner-y", AggregateKind.ORDER, [line_item(str(holder.id.value), 1)]
        )
        with pytest.raises(ForbiddenError):
            aggregates.get_aggregate(str(order.id.value), "owner-x")

    def test_get_missing(self, aggregates):
        with pytest.raises(AggregateNotFoundError):
            aggregates.get_aggregate(MISSING_ID, "1")

    def test_get_by_human_id(self, store, aggregates):
        event = store.add_holder(total=10, kind=HolderKind.EVENT)
        booking = aggregates.book("1", str(event.id.value), 2)
        assert aggregates.get_aggregate_by_human_id(booking.human_id.value, "1") == booking

    def test_list_is_newest_first_and_paged(self, store, aggregates):
        holder = store.add_holder(total=10)
        created = [
            aggregates.create_aggregate(
                "1", AggregateKind.ORDER, [line_item(str(holder.id.value), 1)]
            )
            for _ in range(3)
        ]

        first_page = aggregates.list_aggregates("1", AggregateKind.ORDER, page=0, size=2)
        second_page = aggregates.list_aggregates("1", AggregateKind.ORDER, page=1, size=2)

        assert [a.id for a in first_page] == [created[2].id, created[1].id]
        assert [a.id for a in second_page] == [created[0].id]
        assert aggregates.list_aggregates("2") == []


class TestStatusAndCancellation:
    """Tests for update_status and cancel_aggregate."""

    def _order(self, store, aggregates, quantity=2):
        holder = store.add_holder(total=10)
        order = aggregates.create_aggregate(
            "1", AggregateKind.ORDER, [line_item(str(holder.id.value), quantity)]
        )
        return holder, order

    def test_status_moves_forward_without_touching_capacity(self, store, aggregates):
        holder, order = self._order(store, aggregates)

        updated = aggregates.update_status(str(order.id.value), "CONFIRMED")

        assert updated.status is AggregateStatus.CONFIRMED
        assert available(store, holder) == 8

    def test_status_cannot_skip_steps(self, store, aggregates):
        _, order = self._order(store, aggregates)
        with pytest.raises(InvalidStatusTransitionError):
            aggregates.update_status(str(order.id.value), "DELIVERED")

    def test_status_cannot_cancel(self, store, aggregates):
        _, order = self._order(store, aggregates)
        with pytest.raises(InvalidStatusTransitionError):
            aggregates.update_status(str(order.id.value), "CANCELLED")

    def test_status_unknown_aggregate(self, aggregates):
        with pytest.raises(AggregateNotFoundError):
            aggregates.update_status(MISSING_ID, "CONFIRMED")

    def test_terminal_status_has_no_transitions(self, store, aggregates):
        _, order = self._order(store, aggregates)
        for status in ("CONFIRMED", "PREPARING", "READY", "DELIVERED"):
            aggregates.update_status(str(order.id.value), status)
        with pytest.raises(InvalidStatusTransitionError):
            aggregates.update_status(str(order.id.value), "READY")

    def test_cancel_releases_capacity(self, store, aggregates):
        holder, order = self._order(store, aggregates, quantity=3)

        cancelled = aggregates.cancel_aggregate(str(order.id.value), "1")

        assert cancelled.status is AggregateStatus.CANCELLED
        assert available(store, holder) == 10
        assert store.holders[holder.id].booked == active_reserved(store, holder) == 0

    def test_cancel_twice_fails(self, store, aggregates):
        holder, order = self._order(store, aggregates)
        aggregates.cancel_aggregate(str(order.id.value), "1")
        with pytest.raises(InvalidStatusTransitionError):
            aggregates.cancel_aggregate(str(order.id.value), "1")
        assert available(store, holder) == 10

    def test_cancel_by_other_owner_is_forbidden(self, store, aggregates):
        holder, order = self._order(store, aggregates)
        with pytest.raises(ForbiddenError):
            aggregates.cancel_aggregate(str(order.id.value), "2")
        assert available(store, holder) == 8


class TestCart:
    """Tests for CartService."""

    def test_add_merges_quantities(self, store, cart):
        holder = store.add_holder(total=10)
        cart.add_to_cart("1", str(holder.id.value), 2)
        item = cart.add_to_cart("1", str(holder.id.value), 3)
        assert item.quantity.value == 5
        assert len(cart.get_cart("1")) == 1

    def test_add_beyond_availability(self, store, cart):
        holder = store.add_holder(total=3)
        cart.add_to_cart("1", str(holder.id.value), 2)
        with pytest.raises(InsufficientCapacityError):
            cart.add_to_cart("1", str(holder.id.value), 2)

    def test_add_event_is_rejected(self, store, cart, aggregates):
        """Events are booked directly; a cart row for one could never be checked out."""
        event = store.add_holder(total=10, kind=HolderKind.EVENT)

        with pytest.raises(HolderKindMismatchError):
            cart.add_to_cart("1", str(event.id.value), 1)

        assert cart.get_cart("1") == []
        with pytest.raises(EmptyInputError):
            aggregates.checkout("1")

    def test_add_does_not_reserve(self, store, cart):
        holder = store.add_holder(total=3)
        cart.add_to_cart("1", str(holder.id.value), 2)
        assert available(store, holder) == 3

    def test_update_to_zero_removes(self, store, cart):
        holder = store.add_holder(total=3)
        item = cart.add_to_cart("1", str(holder.id.value), 2)
        assert cart.update_quantity("1", str(item.id.value), 0) is None
        assert cart.get_cart("1") == []

    def test_update_other_owner_is_forbidden(self, store, cart):
        holder = store.add_holder(total=3)
        item = cart.add_to_cart("1", str(holder.id.value), 2)
        with pytest.raises(ForbiddenError):
            cart.update_quantity("2", str(item.id.value), 1)

    def test_remove_missing_item(self, cart):
        with pytest.raises(PendingItemNotFoundError):
            cart.remove_from_cart("1", MISSING_ID)

    def test_cart_shows_current_price(self, store, cart, capacity):
        holder = store.add_holder(total=3, price="1.00")
        cart.add_to_cart("1", str(holder.id.value), 2)
        capacity.update_price(str(holder.id.value), Decimal("2.00"))
        assert cart.get_cart("1")[0].subtotal == Money(amount=Decimal("4.00"))
