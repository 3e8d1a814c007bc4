"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
Inputs are built from the marketplace's camelCase JSON with from_dict;
line items serialise back to that shape with to_dict.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .money import Money

MAX_CODE_LENGTH = 64
MAX_LINE_ITEMS = 50

CUSTOMER = "customer"
PROVIDER = "provider"
BOTH_PARTIES = (CUSTOMER, PROVIDER)


class UnitType(str, Enum):
    """Billing granularity of a listing."""
    DAY = "day"
    NIGHT = "night"
    HOUR = "hour"
    FIXED = "fixed"
    ITEM = "item"
    OFFER = "offer"
    REQUEST = "request"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['UnitType']:
        try:
            return cls(value)
        except ValueError:
            return None


BOOKABLE_UNIT_TYPES = frozenset({UnitType.DAY, UnitType.NIGHT, UnitType.HOUR, UnitType.FIXED})
NEGOTIATION_UNIT_TYPES = frozenset({UnitType.OFFER, UnitType.REQUEST})


@dataclass
class PriceVariant:
    """An alternate price selected by name."""
    name: str
    type: Optional[str] = None  # "duration" or "period"
    price_in_subunits: Optional[Union[int, float]] = None
    percentage_discount: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'PriceVariant':
        return cls(
            name=data.get("name"),
            type=data.get("type"),
            price_in_subunits=data.get("priceInSubunits"),
            percentage_discount=data.get("percentageDiscount"),
        )


@dataclass
class PublicData:
    """Pricing-relevant part of a listing's public data."""
    unit_type: Optional[str] = None
    price_variations_enabled: bool = False
    price_variants: list[PriceVariant] = field(default_factory=list)
    shipping_enabled: bool = True
    shipping_price_in_subunits_one_item: Optional[int] = None
    shipping_price_in_subunits_additional_items: Optional[int] = None

    # Per-listing insurance configuration (optional)
    insurance_fee_in_subunits: Optional[int] = None
    insurance_percentage: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'PublicData':
        data = data or {}
        shipping_enabled = data.get("shippingEnabled")
        return cls(
            unit_type=data.get("unitType"),
            price_variations_enabled=bool(data.get("priceVariationsEnabled", False)),
            price_variants=[PriceVariant.from_dict(pv) for pv in data.get("priceVariants") or []],
            shipping_enabled=True if shipping_enabled is None else bool(shipping_enabled),
            shipping_price_in_subunits_one_item=data.get("shippingPriceInSubunitsOneItem"),
            shipping_price_in_subunits_additional_items=data.get("shippingPriceInSubunitsAdditionalItems"),
            insurance_fee_in_subunits=data.get("insuranceFeeInSubunits"),
            insurance_percentage=data.get("insurancePercentage"),
        )

    def find_price_variant(self, name: Optional[str]) -> Optional[PriceVariant]:
        """First variant whose name matches, if any."""
        for variant in self.price_variants:
            if variant.name == name:
                return variant
        return None


@dataclass
class Listing:
    """A marketplace listing, read-only input to the engine."""
    public_data: PublicData
    price: Optional[Money] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Listing':
        """Build from the marketplace shape {"id", "attributes": {"price", "publicData"}}."""
        attributes = data.get("attributes") or {}
        listing_id = data.get("id")
        if isinstance(listing_id, dict):
            listing_id = listing_id.get("uuid")
        return cls(
            id=listing_id,
            price=Money.from_value(attributes.get("price")),
            public_data=PublicData.from_dict(attributes.get("publicData")),
        )


@dataclass
class OrderData:
    """Caller-supplied order request. Every field is optional."""
    stock_reservation_quantity: Optional[int] = None
    delivery_method: Optional[str] = None  # "shipping" or "pickup"
    seats: Optional[int] = None
    booking_start: Optional[str] = None  # ISO datetime
    booking_end: Optional[str] = None
    price_variant_name: Optional[str] = None
    offer: Optional[Money] = None
    coupon_code: Optional[str] = None
    currency: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'OrderData':
        data = data or {}
        return cls(
            stock_reservation_quantity=data.get("stockReservationQuantity"),
            delivery_method=data.get("deliveryMethod"),
            seats=data.get("seats"),
            booking_start=data.get("bookingStart"),
            booking_end=data.get("bookingEnd"),
            price_variant_name=data.get("priceVariantName"),
            # Only a complete {amount, currency} pair counts as an offer
            offer=Money.from_value(data.get("offer")),
            coupon_code=data.get("couponCode"),
            currency=data.get("currency"),
        )


@dataclass
class Commission:
    """Commission configuration from the marketplace commission asset."""
    percentage: Optional[float] = None
    minimum_amount: Optional[Money] = None

    @classmethod
    def from_dict(cls, data: Optional[dict], currency: Optional[str] = None) -> Optional['Commission']:
        if not data:
            return None
        return cls(
            percentage=data.get("percentage"),
            minimum_amount=Money.from_value(data.get("minimum_amount"), default_currency=currency),
        )


@dataclass
class LineItem:
    """
    A single priced entry in an order breakdown.

    Carries exactly one of: quantity, percentage, or units together with seats.
    """
    code: str
    unit_price: Money
    include_for: tuple[str, ...] = BOTH_PARTIES
    quantity: Optional[Union[int, float]] = None
    percentage: Optional[float] = None
    units: Optional[Union[int, float]] = None
    seats: Optional[int] = None
    original_unit_price: Optional[Money] = None

    def __post_init__(self):
        if not self.code.startswith("line-item/") or len(self.code) > MAX_CODE_LENGTH:
            raise ValueError(f"Invalid line item code: {self.code}")
        self.include_for = tuple(self.include_for)
        if not self.include_for or not set(self.include_for) <= set(BOTH_PARTIES):
            raise ValueError(f"includeFor must be a non-empty subset of {BOTH_PARTIES}, got {self.include_for}")

    @property
    def effective_quantity(self):
        """Quantity multiplier for quantity- and seats-based items."""
        if self.quantity is not None:
            return self.quantity
        if self.units is not None and self.seats is not None:
            return self.units * self.seats
        return None

    def to_dict(self) -> dict:
        """Serialize to the marketplace's camelCase shape, omitting absent fields."""
        data = {
            "code": self.code,
            "unitPrice": self.unit_price.to_dict(),
        }
        if self.quantity is not None:
            data["quantity"] = self.quantity
        if self.percentage is not None:
            data["percentage"] = self.percentage
        if self.units is not None and self.seats is not None:
            data["units"] = self.units
            data["seats"] = self.seats
        data["includeFor"] = list(self.include_for)
        if self.original_unit_price is not None:
            data["originalUnitPrice"] = self.original_unit_price.to_dict()
        return data
