"""
Default fee quotes for bookings: delivery and insurance.

Both are plain collaborators of the engine and can be swapped for
real carrier or insurer integrations.
"""
import hashlib
from typing import Optional

from ..config.settings import Settings
from ..engine.models import LineItem, OrderData, PublicData
from ..engine.money import Money, round_half_up, to_decimal, to_minor_units
from ..engine.totals import line_total


class BookingShippingQuote:
    """
    Delivery quote for shipped bookings.

    The amount is picked from a configured range by hashing the booking
    details, so the same order always gets the same quote.
    """

    def __init__(self, min_subunits: int, max_subunits: int):
        if min_subunits < 0 or max_subunits < min_subunits:
            raise ValueError(f"Invalid shipping quote range: {min_subunits}..{max_subunits}")
        self.min_subunits = min_subunits
        self.max_subunits = max_subunits

    @classmethod
    def from_settings(cls, settings: Settings) -> 'BookingShippingQuote':
        return cls(settings.booking_shipping_min_subunits, settings.booking_shipping_max_subunits)

    def __call__(self, currency: str, order_data: OrderData) -> Optional[Money]:
        if not currency:
            return None
        key = "|".join(
            str(v) for v in (currency, order_data.booking_start, order_data.booking_end, order_data.seats)
        )
        digest = hashlib.sha256(key.encode('utf-8')).hexdigest()
        span = self.max_subunits - self.min_subunits + 1
        return Money(self.min_subunits + int(digest[:8], 16) % span, currency)


class ListingInsuranceCalculator:
    """
    Insurance fee for bookings.

    Resolution order:
    1. Flat insuranceFeeInSubunits from the listing
    2. insurancePercentage from the listing, applied to the order total
    3. Default percentage from settings
    """

    def __init__(self, default_percentage: float):
        self.default_percentage = default_percentage

    @classmethod
    def from_settings(cls, settings: Settings) -> 'ListingInsuranceCalculator':
        return cls(settings.default_insurance_percentage)

    def quote(
        self,
        order: LineItem,
        public_data: PublicData,
        currency: str,
        order_data: OrderData,
    ) -> Optional[Money]:
        if public_data.insurance_fee_in_subunits is not None:
            return Money(to_minor_units(public_data.insurance_fee_in_subunits), currency)

        percentage = public_data.insurance_percentage
        if percentage is None:
            percentage = self.default_percentage
        if not percentage:
            return None

        total = line_total(order)
        return Money(round_half_up(to_decimal(total.amount) * to_decimal(percentage) / 100), currency)
