"""Shared fixtures: listing builders and fixed-output collaborators."""
import json
from pathlib import Path
from typing import Optional

import pytest

from marketplace_pricing.config.settings import Settings
from marketplace_pricing.engine import Listing, Money, OrderData
from marketplace_pricing.engine.fees import CouponValidation


def make_listing(unit_type: str = "day", amount: Optional[int] = 10000, currency: str = "USD",
                 public_data: Optional[dict] = None, listing_id: str = "listing-1", state: str = "published") -> dict:
    """Listing in the marketplace JSON shape."""
    return {
        "id": listing_id,
        "type": "listing",
        "attributes": {
            "state": state,
            "price": {"amount": amount, "currency": currency} if amount is not None else None,
            "publicData": {"unitType": unit_type, **(public_data or {})},
        },
    }


class FixedShippingQuote:
    def __init__(self, amount: int):
        self.amount = amount
        self.calls = 0

    def __call__(self, currency: str, order_data: OrderData) -> Optional[Money]:
        self.calls += 1
        return Money(self.amount, currency)


class FixedInsurance:
    def __init__(self, amount: Optional[int]):
        self.amount = amount

    def quote(self, order, public_data, currency, order_data) -> Optional[Money]:
        if self.amount is None:
            return None
        return Money(self.amount, currency)


class FakeCoupons:
    def __init__(self, coupons: dict[str, CouponValidation]):
        self.coupons = coupons

    def validate(self, code: str) -> CouponValidation:
        return self.coupons.get(code, CouponValidation(valid=False))


@pytest.fixture
def listing_factory():
    def build(*args, **kwargs) -> Listing:
        return Listing.from_dict(make_listing(*args, **kwargs))
    return build


@pytest.fixture
def collaborators():
    return {
        "shipping_quote": FixedShippingQuote(1000),
        "insurance": FixedInsurance(500),
        "coupons": FakeCoupons({
            "TEN": CouponValidation(valid=True, type="percentage", value=10),
            "FIVER": CouponValidation(valid=True, type="fixed", value=500),
        }),
    }


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Marketplace export files for service and API tests."""
    listings = {
        "data": [
            make_listing("day", 1000, "EUR", listing_id="day-listing"),
            make_listing("night", 12000, "EUR", listing_id="draft-cabin", state="draft"),
            make_listing("item", 3900, "EUR", listing_id="chairs", public_data={
                "shippingPriceInSubunitsOneItem": 500,
                "shippingPriceInSubunitsAdditionalItems": 100,
            }),
        ]
    }
    (tmp_path / "listings.json").write_text(json.dumps(listings), encoding="utf-8")

    commission = {
        "type": "jsonAsset",
        "attributes": {
            "data": {
                "providerCommission": {"percentage": 10, "minimum_amount": {"amount": 300, "currency": "EUR"}},
                "customerCommission": {"percentage": 5},
            }
        },
    }
    (tmp_path / "commission.json").write_text(json.dumps(commission), encoding="utf-8")

    (tmp_path / "coupons.csv").write_text(
        "code,type,value,active,start_date,end_date\n"
        "WELCOME10,percentage,10,true,,\n"
        "SUMMER5,fixed,500,true,2026-06-01,2026-09-30\n"
        "OLD20,percentage,20,false,,\n"
        "BROKEN,bogus,10,true,,\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(
        project_root=data_dir,
        listings_json=data_dir / "listings.json",
        commission_asset=data_dir / "commission.json",
        coupons_csv=data_dir / "coupons.csv",
    )
