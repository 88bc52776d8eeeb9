from django.contrib import admin

from ledger.models import Aggregate, CapacityHolder, PendingItem, Reservation


class ReservationInline(admin.TabularInline):
    model = Reservation
    extra = 0
    can_delete = False
    readonly_fields = ["holder", "position", "quantity", "unit_price_snapshot"]

    def has_add_permission(self, request, obj=None) -> bool:
        return False


@admin.register(CapacityHolder)
class CapacityHolderAdmin(admin.ModelAdmin):
    list_display = ["name", "kind", "price", "available_capacity", "total_capacity"]
    list_filter = ["kind"]
    search_fields = ["name"]

    def get_readonly_fields(self, request, obj=None):
        # Counters only move through the ledger services once created.
        if obj is not None:
            return ["available_capacity", "total_capacity"]
        return ["available_capacity"]

    def save_model(self, request, obj, form, change):
        if not change:
            obj.available_capacity = obj.total_capacity
        super().save_model(request, obj, form, change)


@admin.register(Aggregate)
class AggregateAdmin(admin.ModelAdmin):
    list_display = ["human_id", "kind", "owner_id", "status", "total_amount", "created_at"]
    list_filter = ["kind", "status"]
    search_fields = ["human_id", "owner_id"]
    readonly_fields = ["human_id", "kind", "owner_id", "status", "total_amount"]
    inlines = [ReservationInline]


@admin.register(PendingItem)
class PendingItemAdmin(admin.ModelAdmin):
    list_display = ["owner_id", "holder", "quantity", "created_at"]
    search_fields = ["owner_id"]
