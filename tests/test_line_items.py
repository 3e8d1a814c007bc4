import pytest

from marketplace_pricing.engine import (
    COMMISSION_EXCEEDS_TOTAL_MSG,
    Commission,
    CommissionExceedsTotalError,
    Money,
    OrderData,
    OrderDataError,
    compute_line_items,
    payin_total,
    payout_total,
)

from conftest import make_listing

THREE_DAYS = {"bookingStart": "2026-07-01T00:00:00.000Z", "bookingEnd": "2026-07-04T00:00:00.000Z"}
COMMISSION_CODES = {"line-item/provider-commission", "line-item/customer-commission"}


def codes(line_items):
    return [item.code for item in line_items]


def test_base_order_item_is_first(listing_factory):
    """The base order item comes first and carries the unit type in its code."""
    listing = listing_factory("day")
    items = compute_line_items(listing, THREE_DAYS, {"percentage": 10}, {"percentage": 5})

    assert items[0].code == "line-item/day"
    assert items[0].quantity == 3
    assert items[0].unit_price == Money(10000, "USD")
    assert items[0].include_for == ("customer", "provider")


def test_full_booking_order(listing_factory, collaborators):
    """Shipping, insurance and coupon land between the order and the commissions."""
    listing = listing_factory("day")
    order_data = {**THREE_DAYS, "deliveryMethod": "shipping", "couponCode": "TEN"}

    items = compute_line_items(
        listing, order_data, {"percentage": 10}, {"percentage": 5}, **collaborators
    )

    assert codes(items) == [
        "line-item/day",
        "line-item/shipping-fee",
        "line-item/insurance-fee",
        "line-item/coupon-discount",
        "line-item/provider-commission",
        "line-item/customer-commission",
    ]
    # Coupon covers order + shipping + insurance: 10% of 31500
    assert items[3].unit_price == Money(-3150, "USD")
    assert items[3].quantity == 1

    provider, customer = items[4], items[5]
    assert provider.percentage == -10
    assert provider.unit_price == Money(30000, "USD")
    assert provider.include_for == ("provider",)
    assert customer.percentage == 5
    assert customer.include_for == ("customer",)

    assert payin_total(items) == Money(30000 + 1000 + 500 - 3150 + 1500, "USD")
    assert payout_total(items) == Money(30000 + 1000 + 500 - 3150 - 3000, "USD")


def test_commissions_never_precede_other_items(listing_factory, collaborators):
    listing = listing_factory("night")
    items = compute_line_items(
        listing, {**THREE_DAYS, "couponCode": "FIVER"}, {"percentage": 12}, {"percentage": 3}, **collaborators
    )

    first_commission = next(i for i, item in enumerate(items) if item.code in COMMISSION_CODES)
    assert all(item.code in COMMISSION_CODES for item in items[first_commission:])
    assert len(items) <= 50


def test_payin_payout_independent_of_order(listing_factory, collaborators):
    listing = listing_factory("day")
    items = compute_line_items(
        listing, {**THREE_DAYS, "deliveryMethod": "shipping"}, {"percentage": 10}, {"percentage": 5}, **collaborators
    )

    assert payin_total(list(reversed(items))) == payin_total(items)
    assert payout_total(list(reversed(items))) == payout_total(items)


def test_hour_seats_are_not_multiplied(listing_factory):
    listing = listing_factory("hour", amount=2500)
    order_data = {"bookingStart": "2026-07-01T10:00:00Z", "bookingEnd": "2026-07-01T14:00:00Z", "seats": 3}

    order = compute_line_items(listing, order_data)[0]

    assert order.units == 4
    assert order.seats == 3
    assert order.quantity is None
    assert "quantity" not in order.to_dict()


def test_fixed_with_and_without_seats(listing_factory):
    listing = listing_factory("fixed")

    assert compute_line_items(listing, {})[0].quantity == 1

    order = compute_line_items(listing, {"seats": 2})[0]
    assert (order.units, order.seats, order.quantity) == (1, 2, None)


def test_percentage_price_variant(listing_factory):
    listing = listing_factory("day", public_data={
        "priceVariationsEnabled": True,
        "priceVariants": [{"name": "week", "type": "duration", "percentageDiscount": 20}],
    })

    order = compute_line_items(listing, {**THREE_DAYS, "priceVariantName": "week"})[0]

    assert order.unit_price.amount == 8000
    assert order.original_unit_price.amount == 10000
    assert order.to_dict()["originalUnitPrice"] == {"amount": 10000, "currency": "USD"}


def test_item_shipping_fee(listing_factory):
    listing = listing_factory("item", public_data={
        "shippingPriceInSubunitsOneItem": 500,
        "shippingPriceInSubunitsAdditionalItems": 100,
    })

    items = compute_line_items(listing, {"stockReservationQuantity": 3, "deliveryMethod": "shipping"})

    assert codes(items) == ["line-item/item", "line-item/shipping-fee"]
    assert items[0].quantity == 3
    assert items[1].unit_price.amount == 700
    assert items[1].quantity == 1
    assert items[1].include_for == ("customer", "provider")


def test_item_pickup_is_free(listing_factory):
    listing = listing_factory("item", public_data={"shippingPriceInSubunitsOneItem": 500})

    items = compute_line_items(listing, {"stockReservationQuantity": 2, "deliveryMethod": "pickup"})

    assert codes(items) == ["line-item/item"]


def test_item_skips_booking_extras(listing_factory, collaborators):
    listing = listing_factory("item")

    items = compute_line_items(listing, {"stockReservationQuantity": 1, "couponCode": "TEN"}, **collaborators)

    assert codes(items) == ["line-item/item"]
    assert collaborators["shipping_quote"].calls == 0


def test_booking_shipping_respects_shipping_enabled(listing_factory, collaborators):
    listing = listing_factory("day", public_data={"shippingEnabled": False})

    items = compute_line_items(listing, {**THREE_DAYS, "deliveryMethod": "shipping"}, **collaborators)

    assert "line-item/shipping-fee" not in codes(items)
    assert "line-item/insurance-fee" in codes(items)


def test_missing_quantity_raises(listing_factory):
    listing = listing_factory("day")

    with pytest.raises(OrderDataError) as exc:
        compute_line_items(listing, {})

    assert "quantity" in str(exc.value)
    assert exc.value.missing_fields == ["quantity", "units", "seats"]
    assert exc.value.status == 400


def test_seats_without_dates_reports_units(listing_factory):
    listing = listing_factory("night")

    with pytest.raises(OrderDataError) as exc:
        compute_line_items(listing, {"seats": 2})

    assert exc.value.missing_fields == ["quantity", "units"]


def test_unknown_unit_type_raises_order_data_error(listing_factory):
    listing = listing_factory("weekly")

    with pytest.raises(OrderDataError):
        compute_line_items(listing, THREE_DAYS)


def test_commission_shortfall_raises(listing_factory):
    listing = listing_factory("day")
    provider = {"percentage": 5, "minimum_amount": {"amount": 100000, "currency": "USD"}}

    with pytest.raises(CommissionExceedsTotalError) as exc:
        compute_line_items(listing, THREE_DAYS, provider)

    assert str(exc.value) == "Minimum commission amount is greater than the amount of money paid in"
    assert exc.value.message == COMMISSION_EXCEEDS_TOTAL_MSG
    assert exc.value.computed == Money(1500, "USD")
    assert exc.value.minimum == Money(100000, "USD")


def test_commission_at_minimum_is_accepted(listing_factory):
    listing = listing_factory("day")
    provider = Commission(percentage=10, minimum_amount=Money(3000, "USD"))

    items = compute_line_items(listing, THREE_DAYS, provider)

    assert codes(items)[-1] == "line-item/provider-commission"


def test_negotiated_offer_replaces_price(listing_factory):
    listing = listing_factory("offer")
    offer = {"offer": {"amount": 7000, "currency": "USD"}}

    items = compute_line_items(listing, offer)

    assert items[0].code == "line-item/offer"
    assert items[0].unit_price == Money(7000, "USD")
    assert items[0].quantity == 1
    assert compute_line_items(listing, {})[0].unit_price == Money(10000, "USD")


def test_request_without_listing_price_uses_order_currency(listing_factory):
    listing = listing_factory("request", amount=None)
    order_data = OrderData(offer=Money(4200, "EUR"), currency="EUR")

    order = compute_line_items(listing, order_data)[0]

    assert order.unit_price == Money(4200, "EUR")


def test_no_price_and_no_offer_raises(listing_factory):
    listing = listing_factory("request", amount=None)

    with pytest.raises(ValueError):
        compute_line_items(listing, {"currency": "EUR"})


def test_idempotent(listing_factory, collaborators):
    listing = listing_factory("hour", amount=2500)
    order_data = {
        "bookingStart": "2026-07-01T10:00:00Z",
        "bookingEnd": "2026-07-01T12:30:00Z",
        "deliveryMethod": "shipping",
        "couponCode": "TEN",
    }

    first = compute_line_items(listing, order_data, {"percentage": 10}, {"percentage": 5}, **collaborators)
    second = compute_line_items(listing, order_data, {"percentage": 10}, {"percentage": 5}, **collaborators)

    assert [i.to_dict() for i in first] == [i.to_dict() for i in second]


def test_accepts_raw_marketplace_json():
    items = compute_line_items(make_listing("night", 9000, "EUR"), THREE_DAYS)

    assert items[0].to_dict() == {
        "code": "line-item/night",
        "unitPrice": {"amount": 9000, "currency": "EUR"},
        "quantity": 3,
        "includeFor": ["customer", "provider"],
    }
