"""Quote calculator.

Pure over (normalized request, distance, pricing snapshot, now). The
composition order below fixes both the rounding and the base that
percentage-style fees apply to:

    base + distance + service level + items + additional services
    -> x event type -> x each complexity factor -> x urgency
    -> + tax -> - discount -> round to cents
"""
import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from quotecraft.core.enums import ComplexityFactor, ServiceLevel, SpecialHandling, Urgency
from quotecraft.schemas.distance import DistanceResult
from quotecraft.schemas.pricing import DistanceTiers, PricingConfig
from quotecraft.schemas.quote import (
    ComplexityMultiplier,
    ItemFee,
    NormalizedQuoteRequest,
    PricingBreakdown,
    PricingMultipliers,
    QuoteCalculation,
    QuoteComponents,
    QuoteItem,
    QuotePricing,
    ServiceFee,
)

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")
HAZARDOUS_SURCHARGE = Decimal("0.5")
INSURANCE_SERVICE = "insurancePremium"

# (max days of notice, multiplier); anything beyond the last band is 1.0
LEAD_TIME_BANDS = (
    (1, Decimal("1.8")),
    (2, Decimal("1.4")),
    (7, Decimal("1.2")),
)

SERVICE_DESCRIPTIONS = {
    "venueCoordination": "Venue coordination and liaison services",
    "onSiteSupport": "On-site support and supervision",
    "setupAssistance": "Setup and installation assistance",
    "storageDaily": "Temporary storage (per day)",
    "customsHandling": "Customs and documentation handling",
    "insurancePremium": "Premium insurance coverage",
    "weekendDelivery": "Weekend delivery service",
    "afterHoursDelivery": "After-hours delivery service",
    "multipleStops": "Multiple pickup/delivery locations",
}

COMPLEXITY_DESCRIPTIONS = {
    ComplexityFactor.MULTI_VENUE.value: "Multiple venue coordination",
    ComplexityFactor.MULTI_DAY.value: "Multi-day event logistics",
    ComplexityFactor.INTERNATIONAL.value: "International shipping requirements",
    ComplexityFactor.HAZARDOUS.value: "Hazardous materials handling",
    ComplexityFactor.TIME_RESTRICTED.value: "Time-restricted delivery window",
    ComplexityFactor.SPECIAL_EQUIPMENT.value: "Special equipment required",
}


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_distance_fee(miles: Decimal, tiers: DistanceTiers) -> Decimal:
    tier1, tier2, tier3 = tiers.tier1, tiers.tier2, tiers.tier3

    if miles <= tier1.max_miles:
        return miles * tier1.rate
    tier1_fee = tier1.max_miles * tier1.rate
    if miles <= tier2.max_miles:
        return tier1_fee + (miles - tier1.max_miles) * tier2.rate
    tier2_fee = (tier2.max_miles - tier1.max_miles) * tier2.rate
    return tier1_fee + tier2_fee + (miles - tier2.max_miles) * tier3.rate


def calculate_item_fee(item: QuoteItem, item_fees: dict[str, Decimal]) -> ItemFee:
    base_fee = item_fees.get(item.size)
    if base_fee is None:
        base_fee = item_fees.get("medium", ZERO)

    special_fees = ZERO
    for tag in item.special:
        if tag == SpecialHandling.DELICATE:
            special_fees += item_fees.get("delicate", ZERO)
        elif tag == SpecialHandling.HIGH_VALUE:
            special_fees += item_fees.get("highValue", ZERO)
        elif tag == SpecialHandling.HAZARDOUS:
            special_fees += base_fee * HAZARDOUS_SURCHARGE
        elif tag == SpecialHandling.OVERSIZED:
            special_fees += item_fees.get("extraLarge", ZERO)

    return ItemFee(
        description=item.description,
        size=item.size,
        quantity=item.quantity,
        base_fee=base_fee,
        special_fees=special_fees,
        total_fee=(base_fee + special_fees) * item.quantity,
        details=item.special,
    )


def calculate_item_fees(items: Iterable[QuoteItem], item_fees: dict[str, Decimal]) -> tuple[ItemFee, ...]:
    return tuple(calculate_item_fee(item, item_fees) for item in items)


def calculate_additional_service_fees(
    services: Iterable[str],
    rates: dict[str, Decimal],
    declared_value: Decimal,
) -> tuple[ServiceFee, ...]:
    fees = []
    for service in services:
        rate = rates.get(service, ZERO)
        # insurance is a fraction of the declared value, not a flat fee
        fee = rate * declared_value if service == INSURANCE_SERVICE else rate
        fees.append(ServiceFee(
            service=service,
            fee=fee,
            description=SERVICE_DESCRIPTIONS.get(service, "Additional service"),
        ))
    return tuple(fees)


def calculate_complexity_multipliers(
    requirements: Iterable[str],
    factors: dict[str, Decimal],
) -> tuple[ComplexityMultiplier, ...]:
    return tuple(
        ComplexityMultiplier(
            factor=factor,
            multiplier=factors[factor],
            description=COMPLEXITY_DESCRIPTIONS.get(factor, factor),
        )
        for factor in requirements
        if factor in factors
    )


def days_until(event_date: datetime, now: datetime) -> int:
    return math.ceil((event_date - now).total_seconds() / 86400)


def calculate_urgency_multiplier(
    event_date: Optional[datetime],
    urgency: str,
    emergency_multiplier: Decimal,
    now: datetime,
) -> Decimal:
    if urgency == Urgency.EMERGENCY:
        return emergency_multiplier
    if event_date is None:
        return ONE

    days = days_until(event_date, now)
    for max_days, multiplier in LEAD_TIME_BANDS:
        if days <= max_days:
            return multiplier
    return ONE


def calculate_quote(
    request: NormalizedQuoteRequest,
    distance: DistanceResult,
    config: PricingConfig,
    now: datetime,
) -> QuoteCalculation:
    base_fee = config.base_fee
    distance_fee = calculate_distance_fee(distance.distance.miles, config.distance_tiers)

    item_fees = calculate_item_fees(request.items, config.item_fees)
    item_fees_total = sum((fee.total_fee for fee in item_fees), ZERO)

    service_level_fee = config.service_levels.get(
        request.service_level,
        config.service_levels.get(ServiceLevel.STANDARD.value, ZERO),
    )

    service_fees = calculate_additional_service_fees(
        request.additional_services,
        config.additional_services,
        request.declared_value,
    )
    services_total = sum((fee.fee for fee in service_fees), ZERO)

    subtotal_before = base_fee + distance_fee + service_level_fee + item_fees_total + services_total

    event_type_multiplier = config.event_types.get(request.event_type, ONE)
    complexity = calculate_complexity_multipliers(request.special_requirements, config.complexity_factors)
    urgency_multiplier = calculate_urgency_multiplier(
        request.event_date,
        request.urgency,
        config.emergency_urgency_multiplier,
        now,
    )

    subtotal = subtotal_before * event_type_multiplier
    for factor in complexity:
        subtotal *= factor.multiplier
    subtotal *= urgency_multiplier

    taxes = subtotal * config.tax_rate
    discounts = min(request.discount, subtotal + taxes)
    total = subtotal + taxes - discounts

    components = QuoteComponents(
        base_fee=base_fee,
        distance_fee=distance_fee,
        item_fees=item_fees,
        item_fees_total=item_fees_total,
        service_level_fee=service_level_fee,
        additional_service_fees=service_fees,
        additional_services_total=services_total,
        subtotal_before_multipliers=subtotal_before,
        event_type_multiplier=event_type_multiplier,
        complexity_multipliers=complexity,
        urgency_multiplier=urgency_multiplier,
        subtotal_after_multipliers=subtotal,
        taxes=taxes,
        discounts=discounts,
    )
    pricing = QuotePricing(
        subtotal=round_money(subtotal),
        taxes=round_money(taxes),
        discounts=round_money(discounts),
        total=round_money(total),
        breakdown=PricingBreakdown(
            base_fee=base_fee,
            distance_fee=distance_fee,
            item_fees=item_fees_total,
            service_level_fee=service_level_fee,
            additional_services=services_total,
            multipliers=PricingMultipliers(
                event_type=event_type_multiplier,
                complexity=complexity,
                urgency=urgency_multiplier,
            ),
        ),
    )
    return QuoteCalculation(components=components, pricing=pricing)


def calculate_estimate_base(
    service_level: str,
    distance: DistanceResult,
    config: PricingConfig,
) -> Decimal:
    """Preliminary price: base + distance + service level, no items or multipliers."""
    service_level_fee = config.service_levels.get(
        service_level,
        config.service_levels.get(ServiceLevel.STANDARD.value, ZERO),
    )
    return config.base_fee + calculate_distance_fee(distance.distance.miles, config.distance_tiers) + service_level_fee
