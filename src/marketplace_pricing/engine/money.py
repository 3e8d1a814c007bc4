"""
Money value type and the rounding rule shared by every calculator.

Amounts are integer minor units (cents). All rounding goes through
round_half_up so the results match the backend's Math.round behaviour.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def to_decimal(value) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_minor_units(value) -> int:
    """
    Read a whole number of minor units from JSON input.

    Floats are accepted only when they hold a whole number (8000.0); a
    fractional amount raises ValueError instead of being truncated.
    """
    if isinstance(value, bool):
        raise ValueError(f"{value!r} is not an amount of minor units")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} is not a whole amount of minor units")
        return int(value)
    if isinstance(value, str):
        return int(value)
    raise ValueError(f"{value!r} is not an amount of minor units")


@dataclass(frozen=True)
class Money:
    """An integer amount in minor units plus an ISO 4217 currency code."""
    amount: int
    currency: str

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"Money amount must be an integer of minor units, got {self.amount!r}")

    def __neg__(self) -> 'Money':
        return Money(-self.amount, self.currency)

    def to_dict(self) -> dict:
        return {"amount": self.amount, "currency": self.currency}

    @classmethod
    def from_value(cls, value: Any, default_currency: Optional[str] = None) -> Optional['Money']:
        """
        Build Money from a {"amount", "currency"} mapping, a Money, or a bare amount.

        Returns None when the value is not money-shaped. An amount that is
        present but not a whole number of minor units raises ValueError.
        """
        if value is None:
            return None
        if isinstance(value, Money):
            return value
        if isinstance(value, dict):
            amount = value.get("amount")
            currency = value.get("currency") or default_currency
            if amount is None or not currency:
                return None
            return cls(to_minor_units(amount), str(currency))
        if isinstance(value, (int, float)) and not isinstance(value, bool) and default_currency:
            return cls(to_minor_units(value), default_currency)
        return None
