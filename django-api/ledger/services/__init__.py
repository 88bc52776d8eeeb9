from ledger.services.aggregate_service import AggregateService
from ledger.services.capacity_service import (
    CapacityService,
    LedgerMutator,
    ReservationValidator,
)
from ledger.services.cart_service import CartService

__all__ = [
    "AggregateService",
    "CapacityService",
    "CartService",
    "LedgerMutator",
    "ReservationValidator",
]
