"""Domain primitives that enforce validity at creation time."""

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Self
from uuid import UUID, uuid4


@dataclass(frozen=True)
class HolderId:
    """Unique identifier for a CapacityHolder."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class AggregateId:
    """Unique identifier for an Aggregate."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ReservationId:
    """Unique identifier for a Reservation."""

    value: UUID

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class PendingItemId:
    """Unique identifier for a PendingItem."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0.00"))

    def __add__(self, other: "Money") -> "Money":
        return Money(amount=self.amount + other.amount)

    def __mul__(self, quantity: int) -> "Money":
        return Money(amount=self.amount * quantity)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class Quantity:
    """Strictly positive integer requested against a holder."""

    value: int

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise ValueError("Quantity must be positive")


@dataclass(frozen=True)
class HumanId:
    """User-facing aggregate reference, e.g. ``ORD-20240105103000-3F9A0C12BE77``."""

    value: str

    @classmethod
    def generate(cls, prefix: str) -> Self:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        return cls(value=f"{prefix}-{stamp}-{secrets.token_hex(6).upper()}")

    def __str__(self) -> str:
        return self.value
