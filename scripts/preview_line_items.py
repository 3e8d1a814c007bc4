#!/usr/bin/env python
"""
Preview the line-item breakdown for an order.

Usage:
    python scripts/preview_line_items.py <listing_id> '<orderData JSON>' [--own]

Example:
    python scripts/preview_line_items.py 6650b1f2-0c3a-4a8e-9a61-3c2f0d6e1a01 \
        '{"bookingStart": "2026-07-01", "bookingEnd": "2026-07-08", "priceVariantName": "week"}'
"""
import argparse
import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from marketplace_pricing.config.settings import get_settings
from marketplace_pricing.engine import (
    CommissionExceedsTotalError,
    OrderData,
    PricingEngine,
    PricingError,
    construct_valid_line_items,
    payin_total,
    payout_total,
)
from marketplace_pricing.services.marketplace_data import ListingStore, load_commission_asset


def format_money(money: dict) -> str:
    return f"{money['amount'] / 100:,.2f} {money['currency']}"


def main():
    parser = argparse.ArgumentParser(description="Preview transaction line items")
    parser.add_argument("listing_id")
    parser.add_argument("order_data", help="orderData as JSON")
    parser.add_argument("--own", action="store_true", help="Look up own (draft) listings too")
    args = parser.parse_args()

    settings = get_settings()
    engine = PricingEngine(settings)
    listing = ListingStore.from_json(settings.listings_json).show(args.listing_id, own=args.own)
    commission = load_commission_asset(settings.commission_asset)
    order_data = OrderData.from_dict(json.loads(args.order_data))

    currency = listing.price.currency if listing.price else order_data.currency
    provider = commission.provider_commission(currency)
    try:
        line_items = engine.transaction_line_items(
            listing, order_data, provider, commission.customer_commission(currency)
        )
    except CommissionExceedsTotalError as e:
        print(f"❌ {e.message}")
        units = engine.minimum_booking_units(listing, order_data, provider)
        if units is not None:
            print(f"   Book at least {units} units.")
        sys.exit(1)
    except PricingError as e:
        print(f"❌ {e.message}")
        sys.exit(1)

    print("=" * 60)
    print(f"LINE ITEMS - listing {listing.id}")
    print("=" * 60)
    for item in construct_valid_line_items(line_items):
        qty = item.get("quantity")
        if qty is None and "units" in item:
            qty = f"{item['units']} x {item['seats']} seats"
        if qty is None:
            qty = f"{item['percentage']}%"
        print(f"{item['code']:<34} {str(qty):>14} {format_money(item['lineTotal']):>14}  {','.join(item['includeFor'])}")
    print("-" * 60)
    print(f"Payin total:  {format_money(payin_total(line_items).to_dict())}")
    print(f"Payout total: {format_money(payout_total(line_items).to_dict())}")


if __name__ == "__main__":
    main()
