from django.urls import path

from ledger.handlers import (
    AggregateCancelView,
    AggregateStatusView,
    BookingDetailView,
    BookingListView,
    CartItemView,
    CartView,
    HolderCapacityView,
    HolderDetailView,
    HolderListView,
    HolderPriceView,
    OrderDetailView,
    OrderListView,
)

urlpatterns = [
    path("holders", HolderListView.as_view(), name="holder-list"),
    path("holders/<str:holder_id>", HolderDetailView.as_view(), name="holder-detail"),
    path(
        "holders/<str:holder_id>/capacity",
        HolderCapacityView.as_view(),
        name="holder-capacity",
    ),
    path(
        "holders/<str:holder_id>/price",
        HolderPriceView.as_view(),
        name="holder-price",
    ),
    path("cart", CartView.as_view(), name="cart"),
    path("cart/<str:item_id>", CartItemView.as_view(), name="cart-item"),
    path("orders", OrderListView.as_view(), name="order-list"),
    path("orders/<str:order_id>", OrderDetailView.as_view(), name="order-detail"),
    path("bookings", BookingListView.as_view(), name="booking-list"),
    path(
        "bookings/<str:human_id>", BookingDetailView.as_view(), name="booking-detail"
    ),
    path(
        "aggregates/<str:aggregate_id>/status",
        AggregateStatusView.as_view(),
        name="aggregate-status",
    ),
    path(
        "aggregates/<str:aggregate_id>/cancel",
        AggregateCancelView.as_view(),
        name="aggregate-cancel",
    ),
]
