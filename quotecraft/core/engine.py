import logging
from typing import Optional

from quotecraft.core.config import settings
from quotecraft.services.analytics import AnalyticsRing
from quotecraft.services.distance import DistanceCache, DistanceResolver
from quotecraft.services.maps import MapsClient
from quotecraft.services.pricing_config import PricingConfigStore
from quotecraft.services.quote_service import QuoteService

logger = logging.getLogger(__name__)

quote_service: Optional[QuoteService] = None


def build_quote_service() -> QuoteService:
    resolver = DistanceResolver(
        client=MapsClient(),
        cache=DistanceCache(ttl=settings.DISTANCE_CACHE_TTL),
    )
    return QuoteService(
        config_store=PricingConfigStore(settings=settings),
        resolver=resolver,
        analytics=AnalyticsRing(settings.ANALYTICS_CAPACITY, settings.ANALYTICS_RETAIN),
    )


async def init_quote_service() -> QuoteService:
    global quote_service
    quote_service = build_quote_service()
    quote_service.resolver.start_sweeper(settings.DISTANCE_CACHE_SWEEP_INTERVAL)
    logger.info("Quote service initialized")
    return quote_service


async def close_quote_service():
    global quote_service
    if quote_service:
        await quote_service.resolver.stop_sweeper()
        quote_service = None


def get_quote_service() -> QuoteService:
    global quote_service
    if quote_service is None:
        raise RuntimeError("Quote service not initialized. Call init_quote_service() first.")
    return quote_service
