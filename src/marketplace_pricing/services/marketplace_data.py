"""
Marketplace data - listings and the commission asset.

Both are read from JSON files exported from the marketplace:
    listings.json    {"data": [<listing>, ...]}  (own listings may carry "state": "draft")
    commission.json  {"type": "jsonAsset", "attributes": {"data": {"providerCommission": ..., "customerCommission": ...}}}
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..engine.models import Commission, Listing

logger = logging.getLogger(__name__)

PUBLISHED = 'published'


class ListingNotFoundError(LookupError):
    """No listing with the requested id."""

    def __init__(self, listing_id: str):
        super().__init__(f"Listing '{listing_id}' not found")
        self.listing_id = listing_id


class ListingStore:
    """Listings keyed by id, loaded from a JSON export."""

    def __init__(self, listings: Optional[dict[str, dict]] = None):
        self.listings = listings or {}

    @classmethod
    def from_json(cls, path: Optional[Path]) -> 'ListingStore':
        if path is None or not path.exists():
            logger.warning("Listings file not found at %s", path)
            return cls()

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        listings = {}
        for raw in data.get('data', []):
            listing_id = raw.get('id')
            if isinstance(listing_id, dict):
                listing_id = listing_id.get('uuid')
            if listing_id:
                listings[str(listing_id)] = raw
        logger.info("Loaded %d listings from %s", len(listings), path)
        return cls(listings)

    def __len__(self) -> int:
        return len(self.listings)

    def show(self, listing_id: str, own: bool = False) -> Listing:
        """
        Fetch a listing.

        Public lookups only see published listings; own lookups see drafts too.
        """
        raw = self.listings.get(str(listing_id))
        if raw is None:
            raise ListingNotFoundError(listing_id)
        state = (raw.get('attributes') or {}).get('state', PUBLISHED)
        if not own and state != PUBLISHED:
            raise ListingNotFoundError(listing_id)
        return Listing.from_dict(raw)


@dataclass
class CommissionConfig:
    """Provider and customer commission from the commission asset."""
    provider: Optional[dict] = None
    customer: Optional[dict] = None

    def provider_commission(self, currency: Optional[str] = None) -> Optional[Commission]:
        return Commission.from_dict(self.provider, currency)

    def customer_commission(self, currency: Optional[str] = None) -> Optional[Commission]:
        return Commission.from_dict(self.customer, currency)


def load_commission_asset(path: Optional[Path]) -> CommissionConfig:
    """Read the commission asset; anything but a jsonAsset means no commission."""
    if path is None or not path.exists():
        logger.warning("Commission asset not found at %s, no commission applied", path)
        return CommissionConfig()

    with open(path, 'r', encoding='utf-8') as f:
        asset = json.load(f)

    if asset.get('type') != 'jsonAsset':
        return CommissionConfig()

    data = (asset.get('attributes') or {}).get('data') or {}
    return CommissionConfig(
        provider=data.get('providerCommission'),
        customer=data.get('customerCommission'),
    )
