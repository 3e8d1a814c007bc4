"""
Fee, coupon and commission calculators.

Each calculator takes the base order line item (and sometimes earlier
extras) and returns zero or more additional line items. Quotes that come
from outside the engine are injected through the protocols below.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .errors import CommissionExceedsTotalError
from .models import CUSTOMER, PROVIDER, Commission, LineItem, OrderData, PublicData
from .money import Money, round_half_up, to_decimal
from .totals import line_total, total_from_line_items

logger = logging.getLogger(__name__)

LINE_ITEM_SHIPPING_FEE = "line-item/shipping-fee"
LINE_ITEM_INSURANCE_FEE = "line-item/insurance-fee"
LINE_ITEM_COUPON_DISCOUNT = "line-item/coupon-discount"
LINE_ITEM_PROVIDER_COMMISSION = "line-item/provider-commission"
LINE_ITEM_CUSTOMER_COMMISSION = "line-item/customer-commission"

# (currency, order_data) -> quoted fee
ShippingQuote = Callable[[str, OrderData], Optional[Money]]


class InsuranceCalculator(Protocol):
    def quote(
        self,
        order: LineItem,
        public_data: PublicData,
        currency: str,
        order_data: OrderData,
    ) -> Optional[Money]:
        ...


@dataclass
class CouponValidation:
    """Outcome of validating a coupon code."""
    valid: bool
    type: Optional[str] = None  # "percentage" or "fixed"
    value: Optional[float] = None


class CouponValidator(Protocol):
    def validate(self, code: str) -> CouponValidation:
        ...


def calculate_shipping_fee(
    one_item: Optional[int],
    additional_items: Optional[int],
    currency: Optional[str],
    quantity: Optional[int],
) -> Optional[Money]:
    """
    Shipping for physical items: first item at one price, every other item at another.

    Returns None when the listing has no one-item shipping price.
    """
    if not one_item or not currency or not quantity:
        return None
    if quantity == 1:
        return Money(round_half_up(one_item), currency)

    additional = to_decimal(additional_items or 0) * (quantity - 1)
    return Money(round_half_up(to_decimal(one_item) + additional), currency)


def get_shipping_fee_for_booking(
    shipping_quote: Optional[ShippingQuote],
    currency: str,
    order_data: OrderData,
    public_data: PublicData,
) -> list[LineItem]:
    """Delivery fee for bookable listings shipped to the customer."""
    if shipping_quote is None:
        return []
    if order_data.delivery_method != "shipping" or not public_data.shipping_enabled:
        return []

    fee = shipping_quote(currency, order_data)
    if fee is None or fee.amount == 0:
        return []
    return [LineItem(code=LINE_ITEM_SHIPPING_FEE, unit_price=fee, quantity=1)]


def get_insurance_fee_maybe(
    insurance: Optional[InsuranceCalculator],
    order: LineItem,
    public_data: PublicData,
    currency: str,
    order_data: OrderData,
) -> list[LineItem]:
    if insurance is None:
        return []
    fee = insurance.quote(order, public_data, currency, order_data)
    if fee is None or fee.amount <= 0:
        return []
    return [LineItem(code=LINE_ITEM_INSURANCE_FEE, unit_price=fee, quantity=1)]


def get_coupon_discount_maybe(
    coupons: Optional[CouponValidator],
    coupon_code: Optional[str],
    order: LineItem,
    extra_line_items: list[LineItem],
    currency: str,
) -> list[LineItem]:
    """
    Negative line item discounting the order plus booking extras.

    Commissions are never part of the discount base.
    """
    if not coupon_code or coupons is None:
        return []

    validation = coupons.validate(coupon_code)
    if not validation.valid:
        logger.info("Coupon %s rejected", coupon_code)
        return []

    base = total_from_line_items([order, *extra_line_items])
    if validation.type == "percentage":
        discount = round_half_up(to_decimal(base.amount) * to_decimal(validation.value) / 100)
    elif validation.type == "fixed":
        discount = round_half_up(validation.value)
    else:
        logger.warning("Coupon %s has unknown discount type %r", coupon_code, validation.type)
        return []

    discount = min(discount, base.amount)
    if discount <= 0:
        return []
    return [LineItem(code=LINE_ITEM_COUPON_DISCOUNT, unit_price=Money(-discount, currency), quantity=1)]


def commission_amount(order: LineItem, percentage: float) -> Money:
    """Commission the order produces at the given percentage, before sign."""
    total = line_total(order)
    return Money(round_half_up(to_decimal(total.amount) * to_decimal(percentage) / 100), total.currency)


def _commission_maybe(
    commission: Optional[Commission],
    order: LineItem,
    code: str,
    party: str,
) -> list[LineItem]:
    if commission is None or commission.percentage is None:
        return []

    percentage = commission.percentage
    if isinstance(percentage, bool) or not isinstance(percentage, (int, float)):
        raise ValueError(f"{percentage} is not a number.")

    computed = commission_amount(order, percentage)
    minimum = commission.minimum_amount
    if minimum is not None and minimum.currency != computed.currency:
        raise ValueError(
            f"Commission minimum is in {minimum.currency} but the order is priced in {computed.currency}"
        )
    if minimum is not None and computed.amount < minimum.amount:
        raise CommissionExceedsTotalError(computed, minimum, party)

    if percentage == 0:
        return []

    # Provider commission is deducted from the payout
    signed = -percentage if party == PROVIDER else percentage
    return [
        LineItem(
            code=code,
            unit_price=line_total(order),
            percentage=signed,
            include_for=(party,),
        )
    ]


def get_provider_commission_maybe(commission: Optional[Commission], order: LineItem) -> list[LineItem]:
    return _commission_maybe(commission, order, LINE_ITEM_PROVIDER_COMMISSION, PROVIDER)


def get_customer_commission_maybe(commission: Optional[Commission], order: LineItem) -> list[LineItem]:
    return _commission_maybe(commission, order, LINE_ITEM_CUSTOMER_COMMISSION, CUSTOMER)
