"""
Line totals, payin/payout sums and the API-shaped line item output.
"""
import re
from typing import Iterable

from .models import CUSTOMER, PROVIDER, LineItem
from .money import Money, round_half_up, to_decimal

_CODE_PATTERN = re.compile(r"^line-item/.+")


def line_total(item: LineItem) -> Money:
    """
    Total of a single line item.

    quantity: unit price x quantity
    percentage: unit price x percentage / 100 (sign kept)
    units + seats: unit price x units x seats
    """
    amount = to_decimal(item.unit_price.amount)
    if item.quantity is not None:
        total = amount * to_decimal(item.quantity)
    elif item.percentage is not None:
        total = amount * to_decimal(item.percentage) / 100
    elif item.units is not None and item.seats is not None:
        total = amount * to_decimal(item.units) * to_decimal(item.seats)
    else:
        raise ValueError(
            f"Can't calculate the lineTotal of lineItem {item.code}. "
            "Make sure the lineItem has quantity, percentage or both seats and units"
        )
    return Money(round_half_up(total), item.unit_price.currency)


def total_from_line_items(items: Iterable[LineItem]) -> Money:
    """Sum of line totals. All items must share a currency."""
    items = list(items)
    if not items:
        raise ValueError("Can't total an empty list of line items")

    currency = items[0].unit_price.currency
    amount = 0
    for item in items:
        total = line_total(item)
        if total.currency != currency:
            raise ValueError(f"Currency mismatch in line items: {total.currency} != {currency}")
        amount += total.amount
    return Money(amount, currency)


def payin_total(items: Iterable[LineItem]) -> Money:
    """What the customer pays."""
    return total_from_line_items(i for i in items if CUSTOMER in i.include_for)


def payout_total(items: Iterable[LineItem]) -> Money:
    """What the provider receives."""
    return total_from_line_items(i for i in items if PROVIDER in i.include_for)


def construct_valid_line_items(items: Iterable[LineItem]) -> list[dict]:
    """
    Serialize line items the way the marketplace API returns them.

    Adds lineTotal and reversal so previews and API responses share one shape.
    """
    valid = []
    for item in items:
        if not _CODE_PATTERN.match(item.code):
            raise ValueError(f"Invalid line item code: {item.code}")
        data = item.to_dict()
        data["lineTotal"] = line_total(item).to_dict()
        data["reversal"] = False
        valid.append(data)
    return valid
