"""
Shared service instances for the API, exposed as FastAPI dependencies.
"""
from functools import partial
from typing import Callable, Optional

from ..config.settings import get_settings
from ..engine import PricingEngine
from ..services.marketplace_data import CommissionConfig, ListingStore, load_commission_asset

_engine: Optional[PricingEngine] = None
_listing_store: Optional[ListingStore] = None


def get_engine() -> PricingEngine:
    global _engine
    if _engine is None:
        _engine = PricingEngine(get_settings())
    return _engine


def get_listing_store() -> ListingStore:
    global _listing_store
    if _listing_store is None:
        _listing_store = ListingStore.from_json(get_settings().listings_json)
    return _listing_store


def get_commission_loader() -> Callable[[], CommissionConfig]:
    """The commission asset is re-read on every request, like an asset fetch."""
    return partial(load_commission_asset, get_settings().commission_asset)


def reset():
    """Drop cached instances so the next request reloads from disk."""
    global _engine, _listing_store
    _engine = None
    _listing_store = None
