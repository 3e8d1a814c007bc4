"""
Marketplace Pricing API.

POST /api/transaction-line-items prices an order for a listing the same way
the marketplace backend will, so the client can show the breakdown before
the transaction is initiated.
"""
import asyncio
import logging
from typing import Any, Callable

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import get_settings
from ..engine import (
    CommissionExceedsTotalError,
    OrderData,
    PricingEngine,
    PricingError,
    construct_valid_line_items,
)
from ..engine.models import PROVIDER
from ..services.marketplace_data import CommissionConfig, ListingNotFoundError, ListingStore
from .state import get_commission_loader, get_engine, get_listing_store

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Marketplace Pricing API",
    description="Transaction line-item pricing for the rental marketplace",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LineItemsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_own_listing: bool = Field(False, alias="isOwnListing")
    listing_id: str = Field(..., alias="listingId")
    order_data: dict[str, Any] = Field(default_factory=dict, alias="orderData")


def local_api_error(status: int, status_text: str, **extra) -> JSONResponse:
    """Error body in the shape the web client already handles."""
    return JSONResponse(
        status_code=status,
        content={
            "name": "LocalAPIError",
            "message": "Local API request failed",
            "status": status,
            "statusText": status_text,
            **extra,
        },
    )


@app.get("/")
async def root():
    return {"status": "online", "message": "Marketplace Pricing API Active"}


@app.post("/api/transaction-line-items")
async def transaction_line_items(
    req: LineItemsRequest,
    engine: PricingEngine = Depends(get_engine),
    listings: ListingStore = Depends(get_listing_store),
    load_commission: Callable[[], CommissionConfig] = Depends(get_commission_loader),
):
    try:
        listing, commission = await asyncio.gather(
            asyncio.to_thread(listings.show, req.listing_id, req.is_own_listing),
            asyncio.to_thread(load_commission),
        )
    except ListingNotFoundError as e:
        return local_api_error(404, str(e))

    try:
        order_data = OrderData.from_dict(req.order_data)
        currency = listing.price.currency if listing.price else order_data.currency
        provider_commission = commission.provider_commission(currency)
        customer_commission = commission.customer_commission(currency)

        line_items = engine.transaction_line_items(
            listing, order_data, provider_commission, customer_commission
        )
        return {"data": construct_valid_line_items(line_items)}
    except CommissionExceedsTotalError as e:
        if e.party == PROVIDER and provider_commission and provider_commission.minimum_amount:
            minimum_units = engine.minimum_booking_units(listing, order_data, provider_commission)
            if minimum_units is not None:
                logger.info(
                    "Commission shortfall on listing %s: %s < %s, minimum units %d",
                    listing.id, e.computed.amount, e.minimum.amount, minimum_units,
                )
                return local_api_error(400, e.message, minimumBookingUnits=minimum_units)
        return local_api_error(e.status, e.message)
    except PricingError as e:
        logger.info("Rejected order for listing %s: %s", listing.id, e.message)
        return local_api_error(e.status, e.message)
    except ValueError as e:
        logger.warning("Invalid pricing input for listing %s: %s", listing.id, e)
        return local_api_error(400, str(e))
    except Exception as e:
        logger.exception("Line-item computation failed for listing %s", listing.id)
        return local_api_error(500, str(e))


@app.get("/system/status")
async def get_status(
    engine: PricingEngine = Depends(get_engine),
    listings: ListingStore = Depends(get_listing_store),
    load_commission: Callable[[], CommissionConfig] = Depends(get_commission_loader),
):
    commission = load_commission()
    return {
        "engine_active": True,
        "listings_count": len(listings),
        "coupons_count": len(engine.coupons) if hasattr(engine.coupons, '__len__') else None,
        "provider_commission": commission.provider,
        "customer_commission": commission.customer,
    }
