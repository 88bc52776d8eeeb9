"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import F, Q


class HolderKind(models.TextChoices):
    PRODUCT = "PRODUCT", "Product"
    EVENT = "EVENT", "Event"
    MENU_ITEM = "MENU_ITEM", "Menu item"


class AggregateKind(models.TextChoices):
    ORDER = "ORDER", "Order"
    BOOKING = "BOOKING", "Booking"


class AggregateStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    CONFIRMED = "CONFIRMED", "Confirmed"
    PREPARING = "PREPARING", "Preparing"
    READY = "READY", "Ready"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class CapacityHolder(models.Model):
    """Persistence model for products, events and menu items."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=20, choices=HolderKind.choices)
    name = models.CharField(max_length=255)
    total_capacity = models.PositiveIntegerField()
    available_capacity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["kind", "-created_at"], name="holder_kind_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(available_capacity__gte=0)
                & Q(available_capacity__lte=F("total_capacity")),
                name="holder_available_within_total",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.available_capacity}/{self.total_capacity})"


class Aggregate(models.Model):
    """Persistence model for orders and bookings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    human_id = models.CharField(max_length=64, unique=True, editable=False)
    kind = models.CharField(max_length=20, choices=AggregateKind.choices)
    owner_id = models.CharField(max_length=64)
    status = models.CharField(max_length=20, choices=AggregateStatus.choices)
    total_amount = models.DecimalField(max_digits=18, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["owner_id", "kind", "-created_at"], name="aggregate_owner_kind_idx"
            ),
        ]

    def __str__(self) -> str:
        return self.human_id


class Reservation(models.Model):
    """Persistence model for order lines and booked seats."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    aggregate = models.ForeignKey(
        Aggregate, on_delete=models.CASCADE, related_name="reservations"
    )
    holder = models.ForeignKey(
        CapacityHolder, on_delete=models.PROTECT, related_name="reservations"
    )
    position = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField()
    unit_price_snapshot = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["aggregate", "position"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0), name="reservation_quantity_positive"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.holder_id}"


class PendingItem(models.Model):
    """Persistence model for cart rows."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64)
    holder = models.ForeignKey(
        CapacityHolder, on_delete=models.CASCADE, related_name="pending_items"
    )
    quantity = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner_id", "holder"], name="pending_item_unique_per_owner"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.owner_id}: {self.quantity} x {self.holder_id}"
