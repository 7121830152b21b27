from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from quotecraft.core.enums import ErrorReason, EventType, ItemSize, ServiceLevel, Urgency
from quotecraft.core.errors import QuoteInvalid
from quotecraft.schemas.pricing import to_decimal
from quotecraft.schemas.quote import NormalizedQuoteRequest, QuoteItem

ZERO = Decimal("0")

SERVICE_LEVELS = {level.value for level in ServiceLevel}
DEFAULT_EVENT_TYPES = frozenset(event.value for event in EventType)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _location(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _decimal_or_zero(value: Any) -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        return ZERO
    try:
        number = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    return number if number.is_finite() else ZERO


def _tag_set(value: Any) -> tuple[str, ...]:
    """Ordered, de-duplicated tags; a lone string counts as one tag."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Iterable) or isinstance(value, Mapping):
        return ()
    tags = []
    for tag in value:
        if tag is None:
            continue
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def parse_event_date(value: Any, now: datetime) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise QuoteInvalid(ErrorReason.BAD_EVENT_DATE, f"Unparseable event date: {value!r}")
    else:
        raise QuoteInvalid(ErrorReason.BAD_EVENT_DATE, f"Unparseable event date: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed <= now:
        raise QuoteInvalid(ErrorReason.PAST_EVENT_DATE, "Event date cannot be in the past")
    return parsed


def parse_quantity(value: Any) -> int:
    if value is None or value == "" or isinstance(value, bool):
        return 1
    try:
        quantity = int(to_decimal(value))
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 1
    if quantity < 1:
        raise QuoteInvalid(ErrorReason.BAD_ITEM_QUANTITY, f"Item quantity must be at least 1, got {value!r}")
    return quantity


def normalize_item(raw: Any) -> QuoteItem:
    if not isinstance(raw, Mapping):
        raw = {}
    dimensions = raw.get("dimensions")
    return QuoteItem(
        description=str(raw.get("description") or "Item"),
        size=str(raw.get("size") or ItemSize.MEDIUM.value),
        quantity=parse_quantity(raw.get("quantity")),
        weight=max(_decimal_or_zero(raw.get("weight")), ZERO),
        dimensions=dict(dimensions) if isinstance(dimensions, Mapping) else {},
        special=_tag_set(raw.get("special")),
        value=max(_decimal_or_zero(raw.get("value")), ZERO),
    )


def normalize_quote_request(
    raw: Mapping[str, Any],
    now: datetime,
    event_types: Iterable[str] = DEFAULT_EVENT_TYPES,
) -> NormalizedQuoteRequest:
    """Validate an untrusted request and materialize every default.

    Raises QuoteInvalid with one of: missing_locations, past_event_date,
    bad_event_date, bad_item_quantity, bad_declared_value, bad_discount.
    """
    pickup = _location(_first(raw, "pickup", "origin"))
    delivery = _location(_first(raw, "delivery", "destination"))
    if not pickup or not delivery:
        raise QuoteInvalid(ErrorReason.MISSING_LOCATIONS, "Pickup and delivery locations are required")

    event_type = raw.get("eventType")
    if not isinstance(event_type, str) or event_type not in set(event_types):
        event_type = EventType.CORPORATE_EVENT.value

    service_level = raw.get("serviceLevel")
    if not isinstance(service_level, str) or service_level not in SERVICE_LEVELS:
        service_level = ServiceLevel.STANDARD.value

    urgency = raw.get("urgency")
    if urgency != Urgency.EMERGENCY.value:
        urgency = Urgency.STANDARD.value

    event_date = parse_event_date(raw.get("eventDate"), now)

    raw_items = raw.get("items")
    items = tuple(normalize_item(item) for item in raw_items) if isinstance(raw_items, (list, tuple)) else ()

    declared_value = _decimal_or_zero(raw.get("declaredValue"))
    if declared_value < 0:
        raise QuoteInvalid(ErrorReason.BAD_DECLARED_VALUE, "Declared value cannot be negative")

    discount = _decimal_or_zero(raw.get("discount"))
    if discount < 0:
        raise QuoteInvalid(ErrorReason.BAD_DISCOUNT, "Discount cannot be negative")

    contact_info = raw.get("contactInfo")
    notes = raw.get("notes")

    return NormalizedQuoteRequest(
        pickup=pickup,
        delivery=delivery,
        event_type=event_type,
        service_level=service_level,
        event_date=event_date,
        items=items,
        additional_services=_tag_set(raw.get("additionalServices")),
        special_requirements=_tag_set(raw.get("specialRequirements")),
        declared_value=declared_value,
        discount=discount,
        urgency=urgency,
        contact_info=contact_info if contact_info is not None else {},
        notes=notes if notes is not None else "",
    )
