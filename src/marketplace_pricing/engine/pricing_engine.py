"""
Pricing Engine - binds the line-item computation to its collaborators.

compute_line_items is pure; this class wires in the configured shipping
quote, insurance calculator and coupon book so callers only pass the
listing, the order and the commissions.
"""
import logging
from typing import Optional

from ..config.settings import get_settings, Settings
from .fees import CouponValidator, InsuranceCalculator, ShippingQuote
from .line_items import (
    CommissionLike,
    ListingLike,
    OrderDataLike,
    calculate_minimum_booking_units_for_commission,
    compute_line_items,
)
from .models import LineItem

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Computes order line items with the configured collaborators.

    Collaborators not passed in are built from settings:
    - shipping quote: BookingShippingQuote over the configured range
    - insurance: ListingInsuranceCalculator with the default percentage
    - coupons: CouponBook loaded from the coupons CSV
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        shipping_quote: Optional[ShippingQuote] = None,
        insurance: Optional[InsuranceCalculator] = None,
        coupons: Optional[CouponValidator] = None,
    ):
        """Initialize engine with collaborators from settings unless given."""
        # Services import the engine models, so load them here
        from ..services.coupon_service import CouponBook
        from ..services.fee_quotes import BookingShippingQuote, ListingInsuranceCalculator

        self.settings = settings or get_settings()
        self.shipping_quote = shipping_quote if shipping_quote is not None else BookingShippingQuote.from_settings(self.settings)
        self.insurance = insurance if insurance is not None else ListingInsuranceCalculator.from_settings(self.settings)
        self.coupons = coupons if coupons is not None else CouponBook.from_csv(self.settings.coupons_csv)

    def reload_data(self):
        """Reload the coupon book from disk."""
        from ..services.coupon_service import CouponBook

        self.coupons = CouponBook.from_csv(self.settings.coupons_csv)
        logger.info("Coupon book reloaded (%d coupons)", len(self.coupons))

    def transaction_line_items(
        self,
        listing: ListingLike,
        order_data: OrderDataLike,
        provider_commission: CommissionLike = None,
        customer_commission: CommissionLike = None,
    ) -> list[LineItem]:
        """Line items for an order; see compute_line_items."""
        return compute_line_items(
            listing,
            order_data,
            provider_commission,
            customer_commission,
            shipping_quote=self.shipping_quote,
            insurance=self.insurance,
            coupons=self.coupons,
        )

    def minimum_booking_units(
        self,
        listing: ListingLike,
        order_data: OrderDataLike,
        provider_commission: CommissionLike,
    ) -> Optional[int]:
        return calculate_minimum_booking_units_for_commission(listing, order_data, provider_commission)
