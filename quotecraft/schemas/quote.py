from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from quotecraft.schemas.distance import DistanceMeasure, DistanceResult, DurationMeasure
from quotecraft.schemas.pricing import Money, Snapshot


class QuoteCreate(BaseModel):
    """Inbound HTTP body; anything beyond the locations is left for the normalizer."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    pickup: str = Field(
        min_length=5,
        max_length=200,
        validation_alias=AliasChoices("pickup", "origin"),
    )
    delivery: str = Field(
        min_length=5,
        max_length=200,
        validation_alias=AliasChoices("delivery", "destination"),
    )
    eventType: Optional[str] = None
    serviceLevel: Optional[str] = None
    eventDate: Optional[Union[datetime, str]] = None
    items: Optional[list[Any]] = None
    additionalServices: Optional[Union[list[str], str]] = None
    specialRequirements: Optional[Union[list[str], str]] = None
    declaredValue: Optional[Union[float, str]] = None
    discount: Optional[Union[float, str]] = None
    urgency: Optional[str] = None
    contactInfo: Optional[Any] = None
    notes: Optional[Any] = None


class EstimateCreate(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    pickup: str = Field(min_length=1, max_length=200, validation_alias=AliasChoices("pickup", "origin"))
    delivery: str = Field(min_length=1, max_length=200, validation_alias=AliasChoices("delivery", "destination"))
    serviceLevel: Optional[str] = None


class QuoteItem(Snapshot):
    description: str = "Item"
    size: str = "medium"
    quantity: int = Field(default=1, ge=1)
    weight: Money = Decimal("0")
    dimensions: dict[str, Any] = Field(default_factory=dict)
    special: tuple[str, ...] = ()
    value: Money = Decimal("0")


class NormalizedQuoteRequest(Snapshot):
    pickup: str
    delivery: str
    event_type: str = "corporateEvent"
    service_level: str = "standard"
    event_date: Optional[datetime] = None
    items: tuple[QuoteItem, ...] = ()
    additional_services: tuple[str, ...] = ()
    special_requirements: tuple[str, ...] = ()
    declared_value: Money = Decimal("0")
    discount: Money = Decimal("0")
    urgency: str = "standard"
    contact_info: Any = Field(default_factory=dict)
    notes: Any = ""


class ItemFee(Snapshot):
    description: str
    size: str
    quantity: int
    base_fee: Money
    special_fees: Money
    total_fee: Money
    details: tuple[str, ...] = ()


class ServiceFee(Snapshot):
    service: str
    fee: Money
    description: str


class ComplexityMultiplier(Snapshot):
    factor: str
    multiplier: Money
    description: str


class QuoteComponents(Snapshot):
    """Unrounded intermediates, kept for auditing a quote after the fact."""

    base_fee: Money
    distance_fee: Money
    item_fees: tuple[ItemFee, ...]
    item_fees_total: Money
    service_level_fee: Money
    additional_service_fees: tuple[ServiceFee, ...]
    additional_services_total: Money
    subtotal_before_multipliers: Money
    event_type_multiplier: Money
    complexity_multipliers: tuple[ComplexityMultiplier, ...]
    urgency_multiplier: Money
    subtotal_after_multipliers: Money
    taxes: Money
    discounts: Money


class PricingMultipliers(Snapshot):
    event_type: Money
    complexity: tuple[ComplexityMultiplier, ...]
    urgency: Money


class PricingBreakdown(Snapshot):
    base_fee: Money
    distance_fee: Money
    item_fees: Money
    service_level_fee: Money
    additional_services: Money
    multipliers: PricingMultipliers


class QuotePricing(Snapshot):
    subtotal: Money
    taxes: Money
    discounts: Money
    total: Money
    breakdown: PricingBreakdown


class QuoteCalculation(Snapshot):
    components: QuoteComponents
    pricing: QuotePricing


class Quote(Snapshot):
    quote_id: str
    request: NormalizedQuoteRequest
    distance_info: DistanceResult
    components: QuoteComponents
    pricing: QuotePricing
    valid_until: datetime
    created_at: datetime
    processing_time_ms: float


class PriceRange(Snapshot):
    min: Money
    max: Money


class Estimate(Snapshot):
    base_price: Money
    price_range: PriceRange
    distance: DistanceMeasure
    estimated_time: DurationMeasure
    service_level: str
    estimated: bool = False


class QuoteSummary(Snapshot):
    quote_id: str
    total_price: Money
    distance_miles: Money
    event_type: str
    service_level: str
    timestamp: datetime


class AnalyticsSummary(Snapshot):
    total_quotes: int = 0
    average_quote: Money = Decimal("0")
    total_value: Money = Decimal("0")
    event_type_breakdown: dict[str, int] = Field(default_factory=dict)
    service_level_breakdown: dict[str, int] = Field(default_factory=dict)
