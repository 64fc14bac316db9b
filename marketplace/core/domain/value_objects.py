"""
Immutable domain primitives compared by value.
"""

from abc import ABC
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self

CENT = Decimal("0.01")


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen dataclass whose subclasses check themselves in ``_validate``."""

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        pass


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Currency amount for prices, subtotals and order totals.

    The amount is normalized to a two-place Decimal on construction, so
    ``unit_price * quantity`` and sums of subtotals stay exact.
    """

    amount: Decimal
    currency: str = "IDR"

    def _validate(self) -> None:
        amount = self.amount if isinstance(self.amount, Decimal) else Decimal(str(self.amount))
        object.__setattr__(self, "amount", amount.quantize(CENT, ROUND_HALF_UP))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        if not self.currency or len(self.currency) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")

    def add(self, other: "Money") -> "Money":
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} to {other.currency}")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def multiply(self, factor: int | Decimal) -> "Money":
        return Money(amount=self.amount * Decimal(str(factor)), currency=self.currency)

    def to_minor_int(self) -> int:
        """Whole-unit integer amount, as the payment gateway expects for IDR."""
        return int(self.amount.quantize(Decimal("1"), ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:,.2f}"

    @classmethod
    def zero(cls, currency: str = "IDR") -> "Money":
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def sum(cls, values: "list[Money]", currency: str = "IDR") -> "Money":
        """Total of ``values``; zero when the list is empty."""
        total = cls.zero(currency)
        for value in values:
            total = total.add(value)
        return total


class StatusEnum(str, Enum):
    """String enum that parses client input without regard to case."""

    @classmethod
    def from_string(cls, value: str) -> Self:
        """
        Match ``value`` against member values, ignoring case and padding.

        Raises:
            ValueError: if nothing matches
        """
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")


__all__ = [
    "ValueObject",
    "Money",
    "StatusEnum",
]
