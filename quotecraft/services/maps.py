"""Google Distance Matrix client.

Only `status == OK` with a first element whose status is also OK counts
as a route. Quota refusals raise MapsQuotaExceeded; every other failure
raises MapsError.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

import httpx

from quotecraft.core.config import settings
from quotecraft.core.metrics import track_distance_lookup
from quotecraft.schemas.distance import DistanceMeasure, DistanceResult, DurationMeasure

logger = logging.getLogger(__name__)

METERS_TO_MILES = Decimal("0.000621371")
QUOTA_STATUSES = {"OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT"}


class MapsError(Exception):
    outcome = "fallback"


class MapsQuotaExceeded(MapsError):
    outcome = "quota_exceeded"


def meters_to_miles(meters: int) -> Decimal:
    return (Decimal(meters) * METERS_TO_MILES).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def seconds_to_minutes(seconds: int) -> int:
    return int((Decimal(seconds) / 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MapsClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.base_url = (base_url or settings.MAPS_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.DISTANCE_TIMEOUT
        self._transport = transport
        self._clock = clock

        if not self.api_key:
            logger.warning("Google Maps API key not configured; distances will be estimated")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @track_distance_lookup
    async def distance_matrix(self, origin: str, destination: str, mode: str = "driving") -> DistanceResult:
        if not self.api_key:
            raise MapsError("Google Maps API key not configured")

        params = {
            "origins": origin,
            "destinations": destination,
            "mode": mode,
            "units": "imperial",
            "key": self.api_key,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(f"{self.base_url}/distancematrix/json", params=params)

        if response.status_code == 429:
            raise MapsQuotaExceeded("Google Maps quota exceeded. Please try again later.")
        if response.status_code != 200:
            raise MapsError(f"Google Maps HTTP {response.status_code}")

        data = response.json()
        status = data.get("status")
        if status in QUOTA_STATUSES:
            raise MapsQuotaExceeded(f"Google Maps quota exceeded: {status}")
        if status != "OK":
            raise MapsError(f"Google Maps API error: {status} - {data.get('error_message', 'Unknown error')}")

        rows = data.get("rows") or []
        elements = rows[0].get("elements") if rows else None
        element = elements[0] if elements else None
        if not element or element.get("status") != "OK":
            raise MapsError(f"No route found between {origin} and {destination}")

        meters = int(element["distance"]["value"])
        seconds = int(element["duration"]["value"])
        origins = data.get("origin_addresses") or [origin]
        destinations = data.get("destination_addresses") or [destination]

        return DistanceResult(
            distance=DistanceMeasure(
                miles=meters_to_miles(meters),
                meters=meters,
                text=element["distance"].get("text", ""),
            ),
            duration=DurationMeasure(
                minutes=seconds_to_minutes(seconds),
                seconds=seconds,
                text=element["duration"].get("text", ""),
            ),
            origin=origins[0],
            destination=destinations[0],
            mode=mode,
            estimated=False,
            timestamp=self._clock(),
        )
