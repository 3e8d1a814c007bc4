"""
Price-variant resolution for the base order line item.
"""
from dataclasses import dataclass
from typing import Optional

from .models import BOOKABLE_UNIT_TYPES, NEGOTIATION_UNIT_TYPES, Listing, OrderData, UnitType
from .money import Money, round_half_up, to_decimal


@dataclass
class UnitPriceResolution:
    """Effective unit price, plus the undiscounted price when a discount applied."""
    unit_price: Optional[Money]
    currency: Optional[str]
    original_unit_price: Optional[Money] = None
    variant_name: Optional[str] = None


def resolve_currency(listing: Listing, order_data: OrderData) -> Optional[str]:
    """Listing currency, or the order's currency when the listing has no price."""
    if listing.price is not None:
        return listing.price.currency
    return order_data.currency


def _is_valid_subunits(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # JSON numbers like 8000.0 still count as whole subunits
    return value >= 0 and float(value).is_integer()


def resolve_unit_price(listing: Listing, order_data: OrderData) -> UnitPriceResolution:
    """
    Determine the unit price of the base line item.

    Resolution order:
    1. Listing price
    2. Bookable listing with variations enabled and a variant matched by name:
       a. duration variant with percentageDiscount -> discount off the listing price
       b. any variant with a non-negative integer priceInSubunits -> absolute override
    3. Negotiation listing with an offer -> the offer replaces the price
    """
    public_data = listing.public_data
    unit_type = UnitType.parse(public_data.unit_type)
    currency = resolve_currency(listing, order_data)
    base_price = listing.price

    if unit_type in BOOKABLE_UNIT_TYPES and public_data.price_variations_enabled:
        variant = public_data.find_price_variant(order_data.price_variant_name)
        if variant is not None:
            if variant.type == "duration" and variant.percentage_discount is not None and base_price is not None:
                multiplier = 1 - to_decimal(variant.percentage_discount) / 100
                discounted = Money(round_half_up(to_decimal(base_price.amount) * multiplier), currency)
                return UnitPriceResolution(
                    unit_price=discounted,
                    currency=currency,
                    original_unit_price=base_price,
                    variant_name=variant.name,
                )
            # The declared type is not checked here; any valid flat price wins
            if _is_valid_subunits(variant.price_in_subunits):
                return UnitPriceResolution(
                    unit_price=Money(int(variant.price_in_subunits), currency),
                    currency=currency,
                    variant_name=variant.name,
                )
        return UnitPriceResolution(unit_price=base_price, currency=currency)

    if unit_type in NEGOTIATION_UNIT_TYPES and order_data.offer is not None:
        return UnitPriceResolution(unit_price=order_data.offer, currency=currency)

    return UnitPriceResolution(unit_price=base_price, currency=currency)
