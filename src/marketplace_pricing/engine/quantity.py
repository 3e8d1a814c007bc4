"""
Quantity resolution per unit type.

Each unit type maps to a QuantityResolver that reads the order data and
returns either a quantity or units + seats, plus any line items tied to
that unit type (shipping for physical items).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union

import pandas as pd

from .errors import OrderDataError
from .fees import LINE_ITEM_SHIPPING_FEE, calculate_shipping_fee
from .models import LineItem, OrderData, PublicData, UnitType

Number = Union[int, float]

LINE_ITEM_DAY = "line-item/day"
LINE_ITEM_NIGHT = "line-item/night"


@dataclass
class QuantityResult:
    """Resolved quantity (or units and seats) and the unit type's extra line items."""
    quantity: Optional[Number] = None
    units: Optional[Number] = None
    seats: Optional[int] = None
    extra_line_items: list[LineItem] = field(default_factory=list)

    def missing_fields(self) -> list[str]:
        """Fields that are missing, empty when the result can price an order."""
        if self.quantity or (self.units and self.seats):
            return []
        missing = []
        if not self.quantity:
            missing.append("quantity")
        if not self.units:
            missing.append("units")
        if not self.seats:
            missing.append("seats")
        return missing


def _to_utc(value) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def calculate_quantity_from_dates(start, end, code: str) -> int:
    """
    Count whole 24-hour periods between two booking timestamps.

    Partial days are truncated. For line-item/day the caller passes an
    exclusive end date, so days and nights are both the plain difference.
    """
    if code not in (LINE_ITEM_DAY, LINE_ITEM_NIGHT):
        raise ValueError(f"Can't calculate quantity from dates to unit type: {code}")

    start_ts, end_ts = _to_utc(start), _to_utc(end)
    span = end_ts - start_ts
    if span < pd.Timedelta(0):
        raise OrderDataError("End date cannot be before start date")
    return span.days


def calculate_quantity_from_hours(start, end) -> Number:
    """Hours between start and end, fractional when not a whole number of hours."""
    start_ts, end_ts = _to_utc(start), _to_utc(end)
    minutes = int((end_ts - start_ts).total_seconds() // 60)
    if minutes < 0:
        raise OrderDataError("End date cannot be before start date")
    if minutes % 60 == 0:
        return minutes // 60
    return minutes / 60


def _split_by_seats(units: Optional[Number], seats: Optional[int]) -> QuantityResult:
    # With seats the quantity is kept as two factors, e.g. 3 hours x 2 seats
    if seats:
        return QuantityResult(units=units, seats=seats)
    return QuantityResult(quantity=units)


class QuantityResolver(ABC):
    """Derives the quantity of the base order line item for one unit type."""

    @abstractmethod
    def resolve(self, order_data: OrderData, public_data: PublicData, currency: Optional[str]) -> QuantityResult:
        ...


class ItemQuantityResolver(QuantityResolver):
    """Stock-based purchases; adds a shipping fee when the item is shipped."""

    def resolve(self, order_data, public_data, currency):
        quantity = order_data.stock_reservation_quantity

        # Pickup is free, so only shipping adds a line item
        shipping_fee = None
        if order_data.delivery_method == "shipping":
            shipping_fee = calculate_shipping_fee(
                public_data.shipping_price_in_subunits_one_item,
                public_data.shipping_price_in_subunits_additional_items,
                currency,
                quantity,
            )

        extra = []
        if shipping_fee is not None:
            extra.append(LineItem(code=LINE_ITEM_SHIPPING_FEE, unit_price=shipping_fee, quantity=1))
        return QuantityResult(quantity=quantity, extra_line_items=extra)


class FixedQuantityResolver(QuantityResolver):
    """One session per booking."""

    def resolve(self, order_data, public_data, currency):
        return _split_by_seats(1, order_data.seats)


class HourQuantityResolver(QuantityResolver):
    """Time-based bookings priced per hour."""

    def resolve(self, order_data, public_data, currency):
        units = None
        if order_data.booking_start and order_data.booking_end:
            units = calculate_quantity_from_hours(order_data.booking_start, order_data.booking_end)
        return _split_by_seats(units, order_data.seats)


class DateRangeQuantityResolver(QuantityResolver):
    """Day or night bookings."""

    def __init__(self, code: str):
        self.code = code

    def resolve(self, order_data, public_data, currency):
        units = None
        if order_data.booking_start and order_data.booking_end:
            units = calculate_quantity_from_dates(order_data.booking_start, order_data.booking_end, self.code)
        return _split_by_seats(units, order_data.seats)


class NegotiationQuantityResolver(QuantityResolver):
    """Offers and requests are always a single unit."""

    def resolve(self, order_data, public_data, currency):
        return QuantityResult(quantity=1)


QUANTITY_RESOLVERS: dict[UnitType, QuantityResolver] = {
    UnitType.ITEM: ItemQuantityResolver(),
    UnitType.FIXED: FixedQuantityResolver(),
    UnitType.HOUR: HourQuantityResolver(),
    UnitType.DAY: DateRangeQuantityResolver(LINE_ITEM_DAY),
    UnitType.NIGHT: DateRangeQuantityResolver(LINE_ITEM_NIGHT),
    UnitType.OFFER: NegotiationQuantityResolver(),
    UnitType.REQUEST: NegotiationQuantityResolver(),
}


def resolve_quantity(
    unit_type: Optional[UnitType],
    order_data: OrderData,
    public_data: PublicData,
    currency: Optional[str],
) -> QuantityResult:
    """Dispatch to the unit type's resolver; unknown unit types resolve to nothing."""
    resolver = QUANTITY_RESOLVERS.get(unit_type) if unit_type else None
    if resolver is None:
        return QuantityResult()
    return resolver.resolve(order_data, public_data, currency)
