"""Django ORM implementation of the ledger stores.

Capacity changes go through a single conditional UPDATE so that the counter
can never leave ``[0, total_capacity]``, whatever the isolation level of the
database. ``get_holder(..., for_update=True)`` additionally takes the row
lock (``SELECT ... FOR UPDATE``) on backends that support it.
"""

from contextlib import AbstractContextManager

from django.db import transaction
from django.db.models import F, Prefetch
from django.utils import timezone

from ledger import models
from ledger.domain import (
    Aggregate,
    AggregateId,
    AggregateKind,
    AggregateStatus,
    Capacity,
    CapacityHolder,
    HolderId,
    HolderKind,
    HumanId,
    Money,
    PendingItem,
    PendingItemId,
    Quantity,
    Reservation,
    ReservationId,
)
from ledger.stores.interfaces import AggregateStore, HolderStore, PendingItemStore


def _money(amount) -> Money | None:
    return Money(amount=amount) if amount is not None else None


def _to_holder(row: models.CapacityHolder) -> CapacityHolder:
    return CapacityHolder(
        id=HolderId(value=row.id),
        kind=HolderKind(row.kind),
        name=row.name,
        total_capacity=Capacity(value=row.total_capacity),
        available_capacity=Capacity(value=row.available_capacity),
        price=_money(row.price),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_reservation(row: models.Reservation) -> Reservation:
    return Reservation(
        id=ReservationId(value=row.id),
        aggregate_id=AggregateId(value=row.aggregate_id),
        holder_id=HolderId(value=row.holder_id),
        holder_name=row.holder.name,
        quantity=Quantity(value=row.quantity),
        unit_price_snapshot=Money(amount=row.unit_price_snapshot),
    )


def _to_aggregate(row: models.Aggregate) -> Aggregate:
    return Aggregate(
        id=AggregateId(value=row.id),
        human_id=HumanId(value=row.human_id),
        kind=AggregateKind(row.kind),
        owner_id=row.owner_id,
        status=AggregateStatus(row.status),
        total_amount=Money(amount=row.total_amount),
        created_at=row.created_at,
        line_items=tuple(_to_reservation(r) for r in row.reservations.all()),
    )


def _to_pending(row: models.PendingItem) -> PendingItem:
    return PendingItem(
        id=PendingItemId(value=row.id),
        owner_id=row.owner_id,
        holder_id=HolderId(value=row.holder_id),
        holder_name=row.holder.name,
        holder_kind=HolderKind(row.holder.kind),
        quantity=Quantity(value=row.quantity),
        unit_price=_money(row.holder.price) or Money.zero(),
        created_at=row.created_at,
    )


class DjangoLedgerStore(HolderStore, AggregateStore, PendingItemStore):
    """PostgreSQL-backed ledger store using Django ORM."""

    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()

    # Holders

    def list_holders(
        self,
        kind: HolderKind | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[CapacityHolder]:
        rows = models.CapacityHolder.objects.order_by("-created_at")
        if kind is not None:
            rows = rows.filter(kind=kind.value)
        if search:
            rows = rows.filter(name__icontains=search)
        rows = rows[offset:] if limit is None else rows[offset : offset + limit]
        return [_to_holder(row) for row in rows]

    def get_holder(
        self, holder_id: HolderId, for_update: bool = False
    ) -> CapacityHolder | None:
        rows = models.CapacityHolder.objects.all()
        if for_update:
            rows = rows.select_for_update()
        row = rows.filter(pk=holder_id.value).first()
        return _to_holder(row) if row is not None else None

    def create_holder(
        self, kind: HolderKind, name: str, total_capacity: int, price: Money | None
    ) -> CapacityHolder:
        row = models.CapacityHolder.objects.create(
            kind=kind.value,
            name=name,
            total_capacity=total_capacity,
            available_capacity=total_capacity,
            price=price.amount if price is not None else None,
        )
        return _to_holder(row)

    def apply_delta(self, holder_id: HolderId, delta: int) -> bool:
        updated = models.CapacityHolder.objects.filter(
            pk=holder_id.value,
            available_capacity__gte=-delta,
            available_capacity__lte=F("total_capacity") - delta,
        ).update(
            available_capacity=F("available_capacity") + delta,
            updated_at=timezone.now(),
        )
        return updated == 1

    def set_capacity(
        self, holder_id: HolderId, total_capacity: int, available_capacity: int
    ) -> CapacityHolder:
        models.CapacityHolder.objects.filter(pk=holder_id.value).update(
            total_capacity=total_capacity,
            available_capacity=available_capacity,
            updated_at=timezone.now(),
        )
        return _to_holder(models.CapacityHolder.objects.get(pk=holder_id.value))

    def set_price(self, holder_id: HolderId, price: Money | None) -> CapacityHolder:
        models.CapacityHolder.objects.filter(pk=holder_id.value).update(
            price=price.amount if price is not None else None,
            updated_at=timezone.now(),
        )
        return _to_holder(models.CapacityHolder.objects.get(pk=holder_id.value))

    def set_name(self, holder_id: HolderId, name: str) -> CapacityHolder:
        models.CapacityHolder.objects.filter(pk=holder_id.value).update(
            name=name, updated_at=timezone.now()
        )
        return _to_holder(models.CapacityHolder.objects.get(pk=holder_id.value))

    def delete_holder(self, holder_id: HolderId) -> None:
        models.CapacityHolder.objects.filter(pk=holder_id.value).delete()

    # Aggregates

    def _aggregates(self):
        return models.Aggregate.objects.prefetch_related(
            Prefetch(
                "reservations",
                queryset=models.Reservation.objects.select_related("holder").order_by(
                    "position"
                ),
            )
        )

    def create_aggregate(
        self,
        kind: AggregateKind,
        owner_id: str,
        human_id: HumanId,
        status: AggregateStatus,
        total_amount: Money,
        line_items: list[Reservation],
    ) -> Aggregate:
        with transaction.atomic():
            row = models.Aggregate.objects.create(
                human_id=human_id.value,
                kind=kind.value,
                owner_id=owner_id,
                status=status.value,
                total_amount=total_amount.amount,
            )
            models.Reservation.objects.bulk_create(
                [
                    models.Reservation(
                        id=item.id.value,
                        aggregate=row,
                        holder_id=item.holder_id.value,
                        position=position,
                        quantity=item.quantity.value,
                        unit_price_snapshot=item.unit_price_snapshot.amount,
                    )
                    for position, item in enumerate(line_items)
                ]
            )
        return _to_aggregate(self._aggregates().get(pk=row.pk))

    def get_aggregate(
        self, aggregate_id: AggregateId, for_update: bool = False
    ) -> Aggregate | None:
        rows = self._aggregates()
        if for_update:
            rows = rows.select_for_update()
        row = rows.filter(pk=aggregate_id.value).first()
        return _to_aggregate(row) if row is not None else None

    def get_aggregate_by_human_id(self, human_id: str) -> Aggregate | None:
        row = self._aggregates().filter(human_id=human_id).first()
        return _to_aggregate(row) if row is not None else None

    def list_aggregates(
        self, owner_id: str, kind: AggregateKind | None, offset: int, limit: int
    ) -> list[Aggregate]:
        rows = self._aggregates().filter(owner_id=owner_id)
        if kind is not None:
            rows = rows.filter(kind=kind.value)
        rows = rows.order_by("-created_at")[offset : offset + limit]
        return [_to_aggregate(row) for row in rows]

    def set_status(
        self, aggregate_id: AggregateId, status: AggregateStatus
    ) -> Aggregate:
        models.Aggregate.objects.filter(pk=aggregate_id.value).update(
            status=status.value, updated_at=timezone.now()
        )
        return _to_aggregate(self._aggregates().get(pk=aggregate_id.value))

    def has_reservations(self, holder_id: HolderId) -> bool:
        return models.Reservation.objects.filter(holder_id=holder_id.value).exists()

    # Pending items

    def list_pending(self, owner_id: str) -> list[PendingItem]:
        rows = (
            models.PendingItem.objects.select_related("holder")
            .filter(owner_id=owner_id)
            .order_by("created_at")
        )
        return [_to_pending(row) for row in rows]

    def get_pending(self, item_id: PendingItemId) -> PendingItem | None:
        row = (
            models.PendingItem.objects.select_related("holder")
            .filter(pk=item_id.value)
            .first()
        )
        return _to_pending(row) if row is not None else None

    def find_pending(self, owner_id: str, holder_id: HolderId) -> PendingItem | None:
        row = (
            models.PendingItem.objects.select_related("holder")
            .filter(owner_id=owner_id, holder_id=holder_id.value)
            .first()
        )
        return _to_pending(row) if row is not None else None

    def add_pending(
        self, owner_id: str, holder_id: HolderId, quantity: int
    ) -> PendingItem:
        row = models.PendingItem.objects.create(
            owner_id=owner_id, holder_id=holder_id.value, quantity=quantity
        )
        return self.get_pending(PendingItemId(value=row.pk))

    def set_pending_quantity(self, item_id: PendingItemId, quantity: int) -> PendingItem:
        models.PendingItem.objects.filter(pk=item_id.value).update(quantity=quantity)
        return self.get_pending(item_id)

    def delete_pending(self, item_ids: list[PendingItemId]) -> None:
        models.PendingItem.objects.filter(
            pk__in=[item_id.value for item_id in item_ids]
        ).delete()
