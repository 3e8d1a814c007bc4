"""
Pricing errors.

Each error carries an HTTP-style status so callers can map it to a response
without inspecting the message.
"""
from typing import Optional

from .money import Money

COMMISSION_EXCEEDS_TOTAL_MSG = (
    "Minimum commission amount is greater than the amount of money paid in"
)


class PricingError(Exception):
    """Base class for errors raised while computing line items."""
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderDataError(PricingError):
    """Order data lacks quantity, or units together with seats."""
    status = 400

    def __init__(self, message: str, missing_fields: Optional[list[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []

    @classmethod
    def missing(cls, missing_fields: list[str]) -> 'OrderDataError':
        message = (
            f"Error: orderData is missing the following information: {', '.join(missing_fields)}. "
            "Quantity or either units & seats is required."
        )
        return cls(message, missing_fields)


class CommissionExceedsTotalError(PricingError):
    """
    The configured minimum commission is above the commission the order produces.

    The message text is fixed; external systems parse it.
    """
    status = 400

    def __init__(self, computed: Money, minimum: Money, party: str = "provider"):
        super().__init__(COMMISSION_EXCEEDS_TOTAL_MSG)
        self.computed = computed
        self.minimum = minimum
        self.party = party
