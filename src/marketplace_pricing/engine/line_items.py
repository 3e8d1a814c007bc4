"""
Line-item assembly.

compute_line_items turns a listing, an order request and the commission
configuration into the ordered list of line items the marketplace backend
expects. The list always starts with the base order line item and ends
with the commissions:

    [order, *unit-type extras, *booking extras, *provider commission, *customer commission]

Booking extras are shipping, insurance and coupon, in that order.
"""
import logging
import math
from typing import Optional, Union

from .errors import OrderDataError
from .fees import (
    CouponValidator,
    InsuranceCalculator,
    ShippingQuote,
    get_coupon_discount_maybe,
    get_customer_commission_maybe,
    get_insurance_fee_maybe,
    get_provider_commission_maybe,
    get_shipping_fee_for_booking,
)
from .models import (
    BOOKABLE_UNIT_TYPES,
    NEGOTIATION_UNIT_TYPES,
    Commission,
    LineItem,
    Listing,
    OrderData,
    UnitType,
)
from .money import round_half_up, to_decimal
from .price_variants import resolve_unit_price
from .quantity import resolve_quantity

logger = logging.getLogger(__name__)

ListingLike = Union[Listing, dict]
OrderDataLike = Union[OrderData, dict, None]
CommissionLike = Union[Commission, dict, None]


def as_listing(listing: ListingLike) -> Listing:
    return listing if isinstance(listing, Listing) else Listing.from_dict(listing)


def as_order_data(order_data: OrderDataLike) -> OrderData:
    return order_data if isinstance(order_data, OrderData) else OrderData.from_dict(order_data)


def as_commission(commission: CommissionLike, currency: Optional[str] = None) -> Optional[Commission]:
    if commission is None or isinstance(commission, Commission):
        return commission
    return Commission.from_dict(commission, currency)


def compute_line_items(
    listing: ListingLike,
    order_data: OrderDataLike,
    provider_commission: CommissionLike = None,
    customer_commission: CommissionLike = None,
    *,
    shipping_quote: Optional[ShippingQuote] = None,
    insurance: Optional[InsuranceCalculator] = None,
    coupons: Optional[CouponValidator] = None,
) -> list[LineItem]:
    """
    Compute the line items for an order.

    Args:
        listing: Listing (or its marketplace JSON)
        order_data: OrderData (or its camelCase JSON)
        provider_commission: Commission deducted from the provider's payout
        customer_commission: Commission added to the customer's payin
        shipping_quote: Delivery fee quote for shipped bookings
        insurance: Insurance fee calculator for bookings
        coupons: Coupon code validator

    Raises:
        OrderDataError: quantity, or units together with seats, can't be resolved
        CommissionExceedsTotalError: a commission falls short of its minimum amount
    """
    listing = as_listing(listing)
    order_data = as_order_data(order_data)
    public_data = listing.public_data

    unit_type = UnitType.parse(public_data.unit_type)
    is_bookable = unit_type in BOOKABLE_UNIT_TYPES

    price = resolve_unit_price(listing, order_data)
    currency = price.currency
    provider_commission = as_commission(provider_commission, currency)
    customer_commission = as_commission(customer_commission, currency)

    resolved = resolve_quantity(unit_type, order_data, public_data, currency)
    missing = resolved.missing_fields()
    if missing:
        raise OrderDataError.missing(missing)

    if price.unit_price is None:
        raise ValueError(f"Listing {listing.id} has no price and no offer was given")

    logger.debug(
        "Pricing %s listing %s at %s %s (variant=%s)",
        public_data.unit_type, listing.id, price.unit_price.amount, currency, price.variant_name,
    )

    code = f"line-item/{public_data.unit_type}"
    if resolved.quantity:
        order = LineItem(
            code=code,
            unit_price=price.unit_price,
            quantity=resolved.quantity,
            original_unit_price=price.original_unit_price,
        )
    else:
        order = LineItem(
            code=code,
            unit_price=price.unit_price,
            units=resolved.units,
            seats=resolved.seats,
            original_unit_price=price.original_unit_price,
        )

    booking_extra_line_items: list[LineItem] = []
    if is_bookable:
        booking_extra_line_items += get_shipping_fee_for_booking(shipping_quote, currency, order_data, public_data)
        booking_extra_line_items += get_insurance_fee_maybe(insurance, order, public_data, currency, order_data)
        booking_extra_line_items += get_coupon_discount_maybe(
            coupons, order_data.coupon_code, order, booking_extra_line_items, currency
        )

    line_items = [
        order,
        *resolved.extra_line_items,
        *booking_extra_line_items,
        *get_provider_commission_maybe(provider_commission, order),
        *get_customer_commission_maybe(customer_commission, order),
    ]
    logger.debug("Computed %d line items for listing %s", len(line_items), listing.id)
    return line_items


def calculate_minimum_booking_units_for_commission(
    listing: ListingLike,
    order_data: OrderDataLike,
    provider_commission: CommissionLike,
) -> Optional[int]:
    """
    Smallest number of units whose provider commission reaches the minimum amount.

    Seats are kept as booked. Returns None when the listing can't be booked
    by units, or when the commission has no percentage or minimum.
    """
    listing = as_listing(listing)
    order_data = as_order_data(order_data)

    unit_type = UnitType.parse(listing.public_data.unit_type)
    if unit_type is None or unit_type in NEGOTIATION_UNIT_TYPES:
        return None

    price = resolve_unit_price(listing, order_data)
    commission = as_commission(provider_commission, price.currency)
    if commission is None or not commission.percentage or commission.minimum_amount is None:
        return None
    if price.unit_price is None or price.unit_price.amount <= 0:
        return None

    seats = order_data.seats or 1
    per_unit = to_decimal(price.unit_price.amount) * seats
    percentage = abs(to_decimal(commission.percentage))
    minimum = commission.minimum_amount.amount

    def commission_for(units: int) -> int:
        return round_half_up(per_unit * units * percentage / 100)

    units = max(1, math.ceil(to_decimal(minimum) * 100 / (per_unit * percentage)))
    # Half-up rounding can reach the minimum one unit earlier
    while units > 1 and commission_for(units - 1) >= minimum:
        units -= 1
    return units
