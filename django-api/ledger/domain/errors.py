"""Domain error codes for the ledger module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    HOLDER_NOT_FOUND = "HOLDER_NOT_FOUND"
    AGGREGATE_NOT_FOUND = "AGGREGATE_NOT_FOUND"
    PENDING_ITEM_NOT_FOUND = "PENDING_ITEM_NOT_FOUND"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    EMPTY_INPUT = "EMPTY_INPUT"
    FORBIDDEN = "FORBIDDEN"
    INVALID_CAPACITY = "INVALID_CAPACITY"
    INVALID_ID = "INVALID_ID"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    HOLDER_KIND_MISMATCH = "HOLDER_KIND_MISMATCH"
    INVALID_KIND = "INVALID_KIND"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class HolderNotFoundError(DomainError):
    """Raised when a capacity holder is not found."""

    def __init__(self, holder_id: str) -> None:
        super().__init__(
            code=ErrorCode.HOLDER_NOT_FOUND,
            message="Holder not found",
        )
        self.holder_id = holder_id


class AggregateNotFoundError(DomainError):
    """Raised when an order or booking is not found."""

    def __init__(self, aggregate_id: str) -> None:
        super().__init__(
            code=ErrorCode.AGGREGATE_NOT_FOUND,
            message="Order or booking not found",
        )
        self.aggregate_id = aggregate_id


class PendingItemNotFoundError(DomainError):
    """Raised when a cart item is not found."""

    def __init__(self, item_id: str) -> None:
        super().__init__(
            code=ErrorCode.PENDING_ITEM_NOT_FOUND,
            message="Cart item not found",
        )
        self.item_id = item_id


class InsufficientCapacityError(DomainError):
    """Raised when a requested quantity exceeds the available capacity."""

    def __init__(self, holder_id: str, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_CAPACITY,
            message=f"Insufficient capacity for holder {holder_id}",
        )
        self.holder_id = holder_id
        self.requested = requested
        self.available = available


class EmptyInputError(DomainError):
    """Raised when a commit is attempted with no line items."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMPTY_INPUT,
            message="Nothing to commit",
        )


class ForbiddenError(DomainError):
    """Raised when the requester does not own the resource."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FORBIDDEN,
            message="Not permitted",
        )


class InvalidCapacityError(DomainError):
    """Raised when a capacity change would conflict with committed reservations."""

    def __init__(self, holder_id: str, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_CAPACITY, message=message)
        self.holder_id = holder_id


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid ID format",
        )


class InvalidQuantityError(DomainError):
    """Raised when a requested quantity is not positive."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message="Quantity must be positive",
        )


class InvalidStatusTransitionError(DomainError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change status from {current} to {requested}",
        )
        self.current = current
        self.requested = requested


class HolderKindMismatchError(DomainError):
    """Raised when a holder cannot be committed into the requested aggregate kind."""

    def __init__(self, holder_id: str, holder_kind: str) -> None:
        super().__init__(
            code=ErrorCode.HOLDER_KIND_MISMATCH,
            message=f"{holder_kind} holders cannot be used here",
        )
        self.holder_id = holder_id


class InvalidKindError(DomainError):
    """Raised when a holder kind is not one of the known kinds."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_KIND,
            message="Unknown holder kind",
        )
        self.kind = kind
