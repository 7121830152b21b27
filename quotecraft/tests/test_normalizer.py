import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from quotecraft.core.errors import QuoteInvalid
from quotecraft.services.normalizer import normalize_quote_request, parse_quantity


def _raw(**overrides):
    data = {"pickup": "123 Main St", "delivery": "456 Oak Ave"}
    data.update(overrides)
    return data


class TestLocations:

    @pytest.mark.parametrize("pickup,delivery", [
        (None, "456 Oak Ave"),
        ("123 Main St", None),
        ("   ", "456 Oak Ave"),
        ("123 Main St", ""),
    ])
    def test_missing_locations(self, now, pickup, delivery):
        with pytest.raises(QuoteInvalid) as exc:
            normalize_quote_request({"pickup": pickup, "delivery": delivery}, now)
        assert exc.value.reason == "missing_locations"

    def test_locations_are_trimmed(self, now):
        request = normalize_quote_request(_raw(pickup="  123 Main St  ", delivery="\t456 Oak Ave\n"), now)
        assert request.pickup == "123 Main St"
        assert request.delivery == "456 Oak Ave"

    def test_origin_destination_aliases(self, now):
        request = normalize_quote_request({"origin": "Warehouse 7", "destination": "Convention Center"}, now)
        assert request.pickup == "Warehouse 7"
        assert request.delivery == "Convention Center"


class TestEnumeratedFields:

    def test_defaults(self, now):
        request = normalize_quote_request(_raw(), now)
        assert request.event_type == "corporateEvent"
        assert request.service_level == "standard"
        assert request.urgency == "standard"
        assert request.event_date is None
        assert request.items == ()
        assert request.declared_value == Decimal("0")
        assert request.contact_info == {}
        assert request.notes == ""

    @pytest.mark.parametrize("event_type,expected", [
        ("wedding", "wedding"),
        ("tradeShow", "tradeShow"),
        ("rave", "corporateEvent"),
        (["wedding"], "corporateEvent"),
    ])
    def test_event_type(self, now, event_type, expected):
        assert normalize_quote_request(_raw(eventType=event_type), now).event_type == expected

    @pytest.mark.parametrize("level,expected", [
        ("sameDay", "sameDay"),
        ("emergency", "emergency"),
        ("overnight", "standard"),
        (None, "standard"),
    ])
    def test_service_level(self, now, level, expected):
        assert normalize_quote_request(_raw(serviceLevel=level), now).service_level == expected

    def test_event_types_follow_configuration(self, now):
        request = normalize_quote_request(_raw(eventType="gala"), now, event_types={"gala", "wedding"})
        assert request.event_type == "gala"

    def test_urgency(self, now):
        assert normalize_quote_request(_raw(urgency="emergency"), now).urgency == "emergency"
        assert normalize_quote_request(_raw(urgency="asap"), now).urgency == "standard"


class TestEventDate:

    def test_future_iso_string(self, now):
        request = normalize_quote_request(_raw(eventDate="2030-06-10T09:00:00Z"), now)
        assert request.event_date == datetime(2030, 6, 10, 9, 0, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self, now):
        request = normalize_quote_request(_raw(eventDate=datetime(2030, 7, 1)), now)
        assert request.event_date.tzinfo is not None

    @pytest.mark.parametrize("offset", [timedelta(days=-1), timedelta(0)])
    def test_past_or_present_rejected(self, now, offset):
        with pytest.raises(QuoteInvalid) as exc:
            normalize_quote_request(_raw(eventDate=(now + offset).isoformat()), now)
        assert exc.value.reason == "past_event_date"

    @pytest.mark.parametrize("value", ["next tuesday", 12345])
    def test_unparseable(self, now, value):
        with pytest.raises(QuoteInvalid) as exc:
            normalize_quote_request(_raw(eventDate=value), now)
        assert exc.value.reason == "bad_event_date"


class TestItems:

    def test_item_defaults(self, now):
        (item,) = normalize_quote_request(_raw(items=[{}]), now).items
        assert item.description == "Item"
        assert item.size == "medium"
        assert item.quantity == 1
        assert item.weight == Decimal("0")
        assert item.dimensions == {}
        assert item.special == ()
        assert item.value == Decimal("0")

    def test_items_keep_order(self, now):
        items = [{"description": "Stage"}, {"description": "Lights"}, {"description": "Speakers"}]
        request = normalize_quote_request(_raw(items=items), now)
        assert [item.description for item in request.items] == ["Stage", "Lights", "Speakers"]

    def test_non_list_items_become_empty(self, now):
        assert normalize_quote_request(_raw(items="three boxes"), now).items == ()

    def test_special_tags_deduplicated_unknown_kept(self, now):
        items = [{"special": ["delicate", "fragile", "delicate", "hazardous"]}]
        (item,) = normalize_quote_request(_raw(items=items), now).items
        assert item.special == ("delicate", "fragile", "hazardous")

    def test_negative_weight_and_value_clamped(self, now):
        (item,) = normalize_quote_request(_raw(items=[{"weight": -5, "value": "-100"}]), now).items
        assert item.weight == Decimal("0")
        assert item.value == Decimal("0")

    @pytest.mark.parametrize("value,expected", [
        (None, 1),
        ("", 1),
        ("3", 3),
        (4, 4),
        (2.9, 2),
        ("lots", 1),
    ])
    def test_quantity_coercion(self, value, expected):
        assert parse_quantity(value) == expected

    @pytest.mark.parametrize("value", [0, "0", -2, "-1", 0.5])
    def test_bad_quantity(self, now, value):
        with pytest.raises(QuoteInvalid) as exc:
            normalize_quote_request(_raw(items=[{"quantity": value}]), now)
        assert exc.value.reason == "bad_item_quantity"


class TestTagsAndValues:

    def test_tag_sets(self, now):
        request = normalize_quote_request(
            _raw(
                additionalServices=["venueCoordination", "venueCoordination", "onSiteSupport"],
                specialRequirements="international",
            ),
            now,
        )
        assert request.additional_services == ("venueCoordination", "onSiteSupport")
        assert request.special_requirements == ("international",)

    @pytest.mark.parametrize("value,expected", [
        ("1500.50", "1500.50"),
        (2500, "2500"),
        ("not a number", "0"),
        (None, "0"),
    ])
    def test_declared_value(self, now, value, expected):
        request = normalize_quote_request(_raw(declaredValue=value), now)
        assert request.declared_value == Decimal(expected)

    def test_negative_declared_value(self, now):
        with pytest.raises(QuoteInvalid) as exc:
            normalize_quote_request(_raw(declaredValue=-1), now)
        assert exc.value.reason == "bad_declared_value"

    def test_negative_discount(self, now):
        with pytest.raises(QuoteInvalid) as exc:
            normalize_quote_request(_raw(discount="-10"), now)
        assert exc.value.reason == "bad_discount"

    def test_contact_info_and_notes_preserved(self, now):
        contact = {"name": "Dana", "email": "dana@example.com", "phone": "not validated"}
        request = normalize_quote_request(_raw(contactInfo=contact, notes="Loading dock B"), now)
        assert request.contact_info == contact
        assert request.notes == "Loading dock B"

    @pytest.mark.parametrize("contact,notes", [
        ("dana@example.com", 42),
        (["Dana", "555-0100"], ["dock B", "after 6pm"]),
    ])
    def test_contact_info_and_notes_passed_through_unchanged(self, now, contact, notes):
        request = normalize_quote_request(_raw(contactInfo=contact, notes=notes), now)
        assert request.contact_info == contact
        assert request.notes == notes
