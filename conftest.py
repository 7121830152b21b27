import pytest
import inspect
from datetime import datetime, timezone
from decimal import Decimal

import httpx
from httpx import AsyncClient, ASGITransport

from quotecraft.main import app
from quotecraft.core.config import Settings
from quotecraft.core.engine import get_quote_service
from quotecraft.schemas.distance import DistanceMeasure, DistanceResult, DurationMeasure
from quotecraft.schemas.pricing import PricingConfig
from quotecraft.services.analytics import AnalyticsRing
from quotecraft.services.distance import DistanceCache, DistanceResolver
from quotecraft.services.maps import MapsClient
from quotecraft.services.pricing_config import PricingConfigStore
from quotecraft.services.quote_service import QuoteService


FIXED_NOW = datetime(2030, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic seconds that only move when a test says so"""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class StubMapsClient:
    """Stands in for MapsClient: returns queued results or raises queued errors"""

    def __init__(self, miles="15", minutes=30, error: Exception | None = None):
        self.miles = Decimal(str(miles))
        self.minutes = minutes
        self.error = error
        self.calls = []
        self.configured = True

    async def distance_matrix(self, origin, destination, mode="driving"):
        self.calls.append((origin, destination, mode))
        if self.error is not None:
            raise self.error
        return make_distance(self.miles, origin=origin, destination=destination, minutes=self.minutes, mode=mode)


def make_distance(miles, origin="A", destination="B", minutes=30, mode="driving", estimated=False):
    return DistanceResult(
        distance=DistanceMeasure(miles=Decimal(str(miles)), text=f"{miles} mi"),
        duration=DurationMeasure(minutes=minutes, text=f"{minutes} mins"),
        origin=origin,
        destination=destination,
        mode=mode,
        estimated=estimated,
        timestamp=FIXED_NOW,
    )


def distance_matrix_payload(meters=24140, seconds=1800, status="OK", element_status="OK"):
    return {
        "status": status,
        "origin_addresses": ["123 Main St, Springfield, USA"],
        "destination_addresses": ["456 Oak Ave, Shelbyville, USA"],
        "rows": [{
            "elements": [{
                "status": element_status,
                "distance": {"text": "15.0 mi", "value": meters},
                "duration": {"text": "30 mins", "value": seconds},
            }]
        }],
    }


@pytest.fixture
def default_settings():
    return Settings(_env_file=None)


@pytest.fixture
def pricing_config(default_settings):
    return PricingConfig.from_settings(default_settings)


@pytest.fixture
def config_store(default_settings):
    return PricingConfigStore(settings=default_settings)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def stub_maps():
    return StubMapsClient()


@pytest.fixture
def distance_factory():
    return make_distance


@pytest.fixture
def distance_cache(fake_clock):
    return DistanceCache(ttl=24 * 60 * 60, clock=fake_clock)


@pytest.fixture
def resolver(stub_maps, distance_cache):
    return DistanceResolver(client=stub_maps, cache=distance_cache, clock=lambda: FIXED_NOW)


@pytest.fixture
def analytics():
    return AnalyticsRing(capacity=1000, retain=500)


@pytest.fixture
def quote_service(config_store, resolver, analytics):
    return QuoteService(
        config_store=config_store,
        resolver=resolver,
        analytics=analytics,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def mock_maps_client():
    """MapsClient wired to an httpx.MockTransport; tests tweak the returned state dict"""
    state = {"payload": distance_matrix_payload(), "status_code": 200, "requests": [], "exc": None}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        if state["exc"] is not None:
            raise state["exc"]
        return httpx.Response(state["status_code"], json=state["payload"])

    client = MapsClient(
        api_key="test-key",
        base_url="https://maps.example.test/maps/api",
        timeout=10,
        transport=httpx.MockTransport(handler),
        clock=lambda: FIXED_NOW,
    )
    return client, state


@pytest.fixture
async def test_client(quote_service):
    app.dependency_overrides[get_quote_service] = lambda: quote_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def valid_quote_data():
    return {
        "pickup": "123 Main St, Springfield",
        "delivery": "456 Oak Ave, Shelbyville",
        "eventType": "corporateEvent",
        "serviceLevel": "standard",
    }



def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "distance: marks tests related to distance resolution"
    )
    config.addinivalue_line(
        "markers", "analytics: marks tests related to the analytics ring"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP surface"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to handle asyncio tests
    """
    for item in items:
        if inspect.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
