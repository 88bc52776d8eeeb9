from ledger.handlers.views import (
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

__all__ = [
    "AggregateCancelView",
    "AggregateStatusView",
    "BookingDetailView",
    "BookingListView",
    "CartItemView",
    "CartView",
    "HolderCapacityView",
    "HolderDetailView",
    "HolderListView",
    "HolderPriceView",
    "OrderDetailView",
    "OrderListView",
]
