import pytest
from decimal import Decimal

from quotecraft.schemas.quote import QuoteSummary
from quotecraft.services.analytics import AnalyticsRing

pytestmark = pytest.mark.analytics


def summary(n, now, total="100", event_type="corporateEvent", service_level="standard"):
    return QuoteSummary(
        quote_id=f"QC-{n}",
        total_price=Decimal(total),
        distance_miles=Decimal("15"),
        event_type=event_type,
        service_level=service_level,
        timestamp=now,
    )


def test_capacity_is_not_trimmed(analytics, now):
    for n in range(1000):
        analytics.record(summary(n, now))
    assert len(analytics) == 1000


def test_overflow_keeps_newest_half(analytics, now):
    for n in range(1001):
        analytics.record(summary(n, now))

    entries = analytics.snapshot()
    assert len(entries) == 500
    assert entries[0].quote_id == "QC-501"
    assert entries[-1].quote_id == "QC-1000"


def test_grows_again_after_trim(now):
    ring = AnalyticsRing(capacity=4, retain=2)
    for n in range(5):
        ring.record(summary(n, now))
    assert [entry.quote_id for entry in ring.snapshot()] == ["QC-3", "QC-4"]

    ring.record(summary(5, now))
    assert len(ring) == 3


@pytest.mark.parametrize("capacity,retain", [(10, 0), (10, 11)])
def test_invalid_bounds(capacity, retain):
    with pytest.raises(ValueError):
        AnalyticsRing(capacity=capacity, retain=retain)


def test_snapshot_is_a_copy(analytics, now):
    analytics.record(summary(1, now))
    entries = analytics.snapshot()
    entries.clear()
    assert len(analytics) == 1


def test_summary(analytics, now):
    analytics.record(summary(1, now, total="89.51"))
    analytics.record(summary(2, now, total="125.32"))
    analytics.record(summary(3, now, total="352.08", event_type="wedding", service_level="sameDay"))

    result = analytics.summary()

    assert result.total_quotes == 3
    assert result.total_value == Decimal("566.91")
    assert result.average_quote == Decimal("188.97")
    assert result.event_type_breakdown == {"corporateEvent": 2, "wedding": 1}
    assert result.service_level_breakdown == {"standard": 2, "sameDay": 1}


def test_empty_summary(analytics):
    result = analytics.summary()
    assert result.total_quotes == 0
    assert result.average_quote == Decimal("0")
