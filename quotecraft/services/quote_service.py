import logging
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Mapping

from quotecraft.core.config import settings
from quotecraft.core.enums import TravelMode
from quotecraft.core.errors import DistanceUnavailable
from quotecraft.core.metrics import quote_processing_duration, quotes_generated
from quotecraft.schemas.distance import DistanceResult
from quotecraft.schemas.quote import Estimate, NormalizedQuoteRequest, PriceRange, Quote, QuoteSummary
from quotecraft.services.analytics import AnalyticsRing
from quotecraft.services.calculator import calculate_estimate_base, calculate_quote, round_money
from quotecraft.services.distance import DistanceResolver
from quotecraft.services.normalizer import normalize_quote_request
from quotecraft.services.pricing_config import PricingConfigStore
from quotecraft.utils.ids import gen_quote_id

logger = logging.getLogger(__name__)

ESTIMATE_LOW = Decimal("0.9")
ESTIMATE_HIGH = Decimal("1.3")
ESTIMATE_FIELDS = ("pickup", "delivery", "origin", "destination", "serviceLevel")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuoteService:
    """normalize -> resolve distance -> calculate -> mint id/expiry -> record.

    Errors pass through untranslated: QuoteInvalid from the normalizer,
    DistanceUnavailable from the resolver (with the normalized request
    attached).
    """

    def __init__(
        self,
        config_store: PricingConfigStore,
        resolver: DistanceResolver,
        analytics: AnalyticsRing,
        clock: Callable[[], datetime] = _utcnow,
        validity_days: int = settings.QUOTE_VALIDITY_DAYS,
    ):
        self.config_store = config_store
        self.resolver = resolver
        self.analytics = analytics
        self._clock = clock
        self.validity = timedelta(days=validity_days)

    async def _resolve_distance(self, request: NormalizedQuoteRequest) -> DistanceResult:
        try:
            return await self.resolver.resolve(request.pickup, request.delivery, TravelMode.DRIVING.value)
        except DistanceUnavailable as e:
            e.request = request.model_dump(mode="json", by_alias=True)
            raise

    async def generate_quote(self, raw: Mapping[str, Any]) -> Quote:
        start = time.perf_counter()
        config = self.config_store.get()

        request = normalize_quote_request(raw, self._clock(), config.event_types.keys())
        distance = await self._resolve_distance(request)

        created_at = self._clock()
        calculation = calculate_quote(request, distance, config, created_at)
        quote_id = gen_quote_id(created_at)

        quote = Quote(
            quote_id=quote_id,
            request=request,
            distance_info=distance,
            components=calculation.components,
            pricing=calculation.pricing,
            valid_until=created_at + self.validity,
            created_at=created_at,
            processing_time_ms=round((time.perf_counter() - start) * 1000, 3),
        )

        self.analytics.record(QuoteSummary(
            quote_id=quote_id,
            total_price=quote.pricing.total,
            distance_miles=distance.distance.miles,
            event_type=request.event_type,
            service_level=request.service_level,
            timestamp=created_at,
        ))
        quotes_generated.labels(event_type=request.event_type, service_level=request.service_level).inc()
        quote_processing_duration.observe(time.perf_counter() - start)

        logger.info(
            f"Quote generated: {quote_id} total={quote.pricing.total} "
            f"miles={distance.distance.miles} estimated={distance.estimated} "
            f"processing_ms={quote.processing_time_ms}"
        )
        return quote

    async def estimate(self, raw: Mapping[str, Any]) -> Estimate:
        """Preliminary price range; no id is minted and nothing is recorded."""
        config = self.config_store.get()
        request = normalize_quote_request(
            {key: raw.get(key) for key in ESTIMATE_FIELDS},
            self._clock(),
            config.event_types.keys(),
        )
        distance = await self._resolve_distance(request)

        base_price = calculate_estimate_base(request.service_level, distance, config)
        return Estimate(
            base_price=round_money(base_price),
            price_range=PriceRange(
                min=round_money(base_price * ESTIMATE_LOW),
                max=round_money(base_price * ESTIMATE_HIGH),
            ),
            distance=distance.distance,
            estimated_time=distance.duration,
            service_level=request.service_level,
            estimated=distance.estimated,
        )
