"""Serializers for request input and for domain models in API responses.

Output serializers read straight from the frozen domain dataclasses, so one
projection serves every holder and aggregate kind.
"""

from django.conf import settings
from rest_framework import serializers

from ledger.domain import AggregateStatus, HolderKind

MAX_QUANTITY = settings.LEDGER["MAX_QUANTITY"]


def _money(value) -> str | None:
    return str(value) if value is not None else None


class HolderSerializer(serializers.Serializer):
    """Serializer for CapacityHolder domain model."""

    id = serializers.UUIDField(source="id.value")
    kind = serializers.CharField(source="kind.value")
    name = serializers.CharField()
    total_capacity = serializers.IntegerField(source="total_capacity.value")
    available_capacity = serializers.IntegerField(source="available_capacity.value")
    price = serializers.SerializerMethodField()
    updated_at = serializers.DateTimeField()

    def get_price(self, holder) -> str | None:
        return _money(holder.price)


class ReservationSerializer(serializers.Serializer):
    """Serializer for Reservation domain model."""

    holder_id = serializers.UUIDField(source="holder_id.value")
    holder_name = serializers.CharField()
    quantity = serializers.IntegerField(source="quantity.value")
    unit_price = serializers.SerializerMethodField()
    subtotal = serializers.SerializerMethodField()

    def get_unit_price(self, reservation) -> str:
        return _money(reservation.unit_price_snapshot)

    def get_subtotal(self, reservation) -> str:
        return _money(reservation.subtotal)


class AggregateSerializer(serializers.Serializer):
    """Serializer for Aggregate domain model."""

    id = serializers.UUIDField(source="id.value")
    human_id = serializers.CharField(source="human_id.value")
    kind = serializers.CharField(source="kind.value")
    status = serializers.CharField(source="status.value")
    total_amount = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField()
    items = ReservationSerializer(source="line_items", many=True)

    def get_total_amount(self, aggregate) -> str:
        return _money(aggregate.total_amount)


class PendingItemSerializer(serializers.Serializer):
    """Serializer for PendingItem domain model."""

    id = serializers.UUIDField(source="id.value")
    holder_id = serializers.UUIDField(source="holder_id.value")
    holder_name = serializers.CharField()
    quantity = serializers.IntegerField(source="quantity.value")
    unit_price = serializers.SerializerMethodField()
    subtotal = serializers.SerializerMethodField()

    def get_unit_price(self, item) -> str:
        return _money(item.unit_price)

    def get_subtotal(self, item) -> str:
        return _money(item.subtotal)


class HolderCreateSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=[kind.value for kind in HolderKind])
    name = serializers.CharField(max_length=255)
    total_capacity = serializers.IntegerField(min_value=0)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class CapacitySerializer(serializers.Serializer):
    total_capacity = serializers.IntegerField(min_value=0)


class HolderUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class PriceSerializer(serializers.Serializer):
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, allow_null=True
    )


class LineItemSerializer(serializers.Serializer):
    holder_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)


class OrderCreateSerializer(serializers.Serializer):
    """Without ``items`` the order is checked out from the cart."""

    items = LineItemSerializer(
        many=True, required=False, max_length=settings.LEDGER["MAX_LINE_ITEMS"]
    )


class BookingCreateSerializer(serializers.Serializer):
    holder_id = serializers.UUIDField()
    seats = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)


class CartUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(max_value=MAX_QUANTITY)


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[status.value for status in AggregateStatus])


class PageSerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=0, default=0)
    size = serializers.IntegerField(min_value=1, required=False)

    def validate_size(self, value: int) -> int:
        return min(value, settings.LEDGER["MAX_PAGE_SIZE"])

    def validate(self, attrs: dict) -> dict:
        attrs.setdefault("size", settings.LEDGER["DEFAULT_PAGE_SIZE"])
        return attrs


class HolderQuerySerializer(PageSerializer):
    """Query parameters for the holder catalog. The kind is checked by the service."""

    kind = serializers.CharField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)
