"""Engine subpackage - line-item pricing logic."""
from .errors import COMMISSION_EXCEEDS_TOTAL_MSG, CommissionExceedsTotalError, OrderDataError, PricingError
from .line_items import calculate_minimum_booking_units_for_commission, compute_line_items
from .models import Commission, LineItem, Listing, OrderData, PriceVariant, PublicData, UnitType
from .money import Money, round_half_up
from .pricing_engine import PricingEngine
from .totals import construct_valid_line_items, line_total, payin_total, payout_total

__all__ = [
    'PricingEngine', 'compute_line_items', 'calculate_minimum_booking_units_for_commission',
    'Listing', 'PublicData', 'PriceVariant', 'OrderData', 'Commission', 'LineItem', 'UnitType',
    'Money', 'round_half_up',
    'construct_valid_line_items', 'line_total', 'payin_total', 'payout_total',
    'PricingError', 'OrderDataError', 'CommissionExceedsTotalError', 'COMMISSION_EXCEEDS_TOTAL_MSG',
]
