from enum import Enum


class EventType(str, Enum):
    CONFERENCE = "conference"
    TRADE_SHOW = "tradeShow"
    FESTIVAL = "festival"
    CORPORATE_EVENT = "corporateEvent"
    WEDDING = "wedding"
    EXHIBITION = "exhibition"
    CONCERT = "concert"
    SPORTING_EVENT = "sportingEvent"

    def __str__(self):
        return self.value


class ServiceLevel(str, Enum):
    STANDARD = "standard"
    NEXT_DAY = "nextDay"
    SAME_DAY = "sameDay"
    EMERGENCY = "emergency"

    def __str__(self):
        return self.value


class Urgency(str, Enum):
    STANDARD = "standard"
    EMERGENCY = "emergency"

    def __str__(self):
        return self.value


class ItemSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extraLarge"

    def __str__(self):
        return self.value


class SpecialHandling(str, Enum):
    DELICATE = "delicate"
    HIGH_VALUE = "highValue"
    HAZARDOUS = "hazardous"
    OVERSIZED = "oversized"

    def __str__(self):
        return self.value


class ComplexityFactor(str, Enum):
    MULTI_VENUE = "multiVenue"
    MULTI_DAY = "multiDay"
    INTERNATIONAL = "international"
    HAZARDOUS = "hazardous"
    TIME_RESTRICTED = "timeRestricted"
    SPECIAL_EQUIPMENT = "specialEquipment"

    def __str__(self):
        return self.value


class TravelMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"

    def __str__(self):
        return self.value


class ErrorReason(str, Enum):
    MISSING_LOCATIONS = "missing_locations"
    PAST_EVENT_DATE = "past_event_date"
    BAD_EVENT_DATE = "bad_event_date"
    BAD_ITEM_QUANTITY = "bad_item_quantity"
    BAD_DECLARED_VALUE = "bad_declared_value"
    BAD_DISCOUNT = "bad_discount"
    QUOTA_EXCEEDED = "quota_exceeded"

    def __str__(self):
        return self.value
