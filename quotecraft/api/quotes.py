"""Quote, estimate and distance endpoints"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from quotecraft.core.engine import get_quote_service
from quotecraft.core.enums import TravelMode
from quotecraft.schemas.quote import EstimateCreate, QuoteCreate
from quotecraft.services.quote_service import QuoteService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/")
async def create_quote(
    payload: QuoteCreate,
    service: QuoteService = Depends(get_quote_service),
):
    quote = await service.generate_quote(payload.model_dump(exclude_none=True))
    return {
        "success": True,
        "quote": quote.model_dump(mode="json", by_alias=True),
        "timestamp": _timestamp(),
    }


@router.post("/estimate")
async def create_estimate(
    payload: EstimateCreate,
    service: QuoteService = Depends(get_quote_service),
):
    estimate = await service.estimate(payload.model_dump(exclude_none=True))
    return {
        "success": True,
        "estimate": estimate.model_dump(mode="json", by_alias=True),
        "note": "This is a preliminary estimate. Request a detailed quote for accurate pricing.",
        "timestamp": _timestamp(),
    }


@router.get("/distance")
async def get_distance(
    origin: str = Query(..., min_length=3, max_length=200),
    destination: str = Query(..., min_length=3, max_length=200),
    mode: TravelMode = Query(TravelMode.DRIVING),
    service: QuoteService = Depends(get_quote_service),
):
    result = await service.resolver.resolve(origin, destination, mode.value)
    return {
        "success": True,
        "distance": result.model_dump(mode="json", by_alias=True),
        "timestamp": _timestamp(),
    }


@router.get("/pricing")
async def get_pricing(service: QuoteService = Depends(get_quote_service)):
    config = service.config_store.get().model_dump(mode="json", by_alias=True)
    item_fees = config["itemFees"]
    return {
        "success": True,
        "pricing": {
            "baseFee": config["baseFee"],
            "distanceTiers": config["distanceTiers"],
            "serviceLevels": config["serviceLevels"],
            "itemFees": {size: item_fees[size] for size in ("small", "medium", "large", "extraLarge") if size in item_fees},
            "additionalServices": config["additionalServices"],
            "eventTypes": list(config["eventTypes"]),
        },
        "note": "Base pricing rates. Final quotes may include additional fees and multipliers.",
        "timestamp": _timestamp(),
    }


@router.get("/analytics")
async def get_analytics(service: QuoteService = Depends(get_quote_service)):
    return {
        "success": True,
        "analytics": {
            "quotes": service.analytics.summary().model_dump(mode="json", by_alias=True),
            "maps": service.resolver.stats().model_dump(mode="json", by_alias=True),
        },
        "timestamp": _timestamp(),
    }
