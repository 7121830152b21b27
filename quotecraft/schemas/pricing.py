from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel

from quotecraft.core.config import Settings

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
NonNegative = Annotated[Money, Field(ge=0)]
Factor = Annotated[Money, Field(ge=1)]


def to_decimal(value: Any) -> Decimal:
    """Decimal from a str/int/float without binary-float noise (0.1 -> Decimal('0.1'))."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def _decimalize(value: Any) -> Any:
    if isinstance(value, float):
        return to_decimal(value)
    if isinstance(value, dict):
        return {k: _decimalize(v) for k, v in value.items()}
    return value


class Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ConfigSnapshot(Snapshot):
    @model_validator(mode="before")
    @classmethod
    def _floats_to_decimal(cls, data: Any) -> Any:
        return _decimalize(data) if isinstance(data, dict) else data


class DistanceTier(ConfigSnapshot):
    max_miles: NonNegative
    rate: NonNegative


class OpenDistanceTier(ConfigSnapshot):
    rate: NonNegative


class DistanceTiers(ConfigSnapshot):
    tier1: DistanceTier
    tier2: DistanceTier
    tier3: OpenDistanceTier

    @model_validator(mode="after")
    def _check_order(self):
        if self.tier1.max_miles >= self.tier2.max_miles:
            raise ValueError("tier1.maxMiles must be lower than tier2.maxMiles")
        return self


class PricingConfig(ConfigSnapshot):
    """Immutable pricing snapshot.

    The mapping fields are plain dicts; treat them as read-only. A new
    configuration is installed by building a new snapshot, never by
    editing one in place.
    """

    base_fee: NonNegative
    distance_tiers: DistanceTiers
    item_fees: dict[str, NonNegative]
    service_levels: dict[str, NonNegative]
    additional_services: dict[str, NonNegative]
    event_types: dict[str, NonNegative]
    complexity_factors: dict[str, Factor]
    tax_rate: Annotated[Money, Field(ge=0, le=1)]
    emergency_urgency_multiplier: Factor

    @classmethod
    def from_settings(cls, settings: Settings) -> "PricingConfig":
        return cls(
            base_fee=settings.BASE_DELIVERY_FEE,
            distance_tiers={
                "tier1": {"maxMiles": settings.DISTANCE_TIER_1_MAX, "rate": settings.DISTANCE_TIER_1_RATE},
                "tier2": {"maxMiles": settings.DISTANCE_TIER_2_MAX, "rate": settings.DISTANCE_TIER_2_RATE},
                "tier3": {"rate": settings.DISTANCE_TIER_3_RATE},
            },
            item_fees={
                "small": settings.SMALL_ITEM_FEE,
                "medium": settings.MEDIUM_ITEM_FEE,
                "large": settings.LARGE_ITEM_FEE,
                "extraLarge": settings.EXTRA_LARGE_ITEM_FEE,
                "delicate": settings.DELICATE_ITEM_FEE,
                "highValue": settings.HIGH_VALUE_ITEM_FEE,
            },
            service_levels={
                "standard": settings.STANDARD_FEE,
                "nextDay": settings.NEXT_DAY_FEE,
                "sameDay": settings.SAME_DAY_FEE,
                "emergency": settings.EMERGENCY_FEE,
            },
            additional_services={
                "venueCoordination": 100.00,
                "onSiteSupport": 75.00,
                "setupAssistance": 125.00,
                "storageDaily": 25.00,
                "customsHandling": 150.00,
                "insurancePremium": settings.INSURANCE_PREMIUM_RATE,
                "weekendDelivery": 50.00,
                "afterHoursDelivery": 75.00,
                "multipleStops": 25.00,
            },
            event_types={
                "conference": 1.0,
                "tradeShow": 1.2,
                "festival": 1.3,
                "corporateEvent": 1.1,
                "wedding": 1.15,
                "exhibition": 1.25,
                "concert": 1.4,
                "sportingEvent": 1.3,
            },
            complexity_factors={
                "multiVenue": 1.5,
                "multiDay": 1.3,
                "international": 2.0,
                "hazardous": 1.8,
                "timeRestricted": 1.4,
                "specialEquipment": 1.6,
            },
            tax_rate=settings.TAX_RATE,
            emergency_urgency_multiplier=settings.EMERGENCY_MULTIPLIER,
        )
