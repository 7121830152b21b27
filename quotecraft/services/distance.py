"""Distance resolution with a time-bounded cache and an estimated fallback."""
import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, NamedTuple, Optional

from quotecraft.core.config import settings
from quotecraft.core.enums import ErrorReason, TravelMode
from quotecraft.core.errors import DistanceUnavailable
from quotecraft.core.metrics import cache_hits, cache_misses, distance_cache_size, distance_lookups
from quotecraft.schemas.distance import DistanceCacheStats, DistanceMeasure, DistanceResult, DurationMeasure
from quotecraft.services.maps import MapsClient, MapsQuotaExceeded

logger = logging.getLogger(__name__)

FALLBACK_MILES = Decimal("25")
FALLBACK_MINUTES = 45


def cache_key(origin: str, destination: str, mode: str) -> str:
    return f"{origin.lower()}|{destination.lower()}|{mode}"


class CacheEntry(NamedTuple):
    result: DistanceResult
    inserted_at: float


class DistanceCache:
    """Key -> (result, inserted_at). Entries are immutable tuples swapped whole."""

    def __init__(self, ttl: float = settings.DISTANCE_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at >= self.ttl

    def get(self, key: str) -> Optional[DistanceResult]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, now):
                del self._entries[key]
                distance_cache_size.set(len(self._entries))
                return None
            return entry.result

    def set(self, key: str, result: DistanceResult) -> None:
        entry = CacheEntry(result=result, inserted_at=self._clock())
        with self._lock:
            self._entries[key] = entry
            distance_cache_size.set(len(self._entries))

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
            for key in expired:
                del self._entries[key]
            distance_cache_size.set(len(self._entries))
        return len(expired)

    def clear(self) -> int:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
            distance_cache_size.set(0)
        logger.info(f"Distance cache cleared: {size} entries removed")
        return size

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        """Live-entry check; unlike get(), never evicts."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry, now)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DistanceResolver:
    def __init__(
        self,
        client: MapsClient,
        cache: Optional[DistanceCache] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.client = client
        self.cache = cache if cache is not None else DistanceCache()
        self._clock = clock
        self._sweeper: Optional[asyncio.Task] = None

    async def resolve(self, origin: str, destination: str, mode: str = TravelMode.DRIVING.value) -> DistanceResult:
        """Cached provider lookup.

        Quota refusals raise DistanceUnavailable(quota_exceeded). Any other
        provider failure returns an estimated fallback that is not cached,
        so the next call retries upstream.
        """
        mode = str(mode)
        key = cache_key(origin, destination, mode)
        cached = self.cache.get(key)
        if cached is not None:
            cache_hits.labels(cache="distance").inc()
            logger.info(f"Distance cache hit: {origin} -> {destination} ({mode})")
            return cached
        cache_misses.labels(cache="distance").inc()

        try:
            result = await self.client.distance_matrix(origin, destination, mode)
        except MapsQuotaExceeded as e:
            distance_lookups.labels(outcome="quota_exceeded").inc()
            logger.error(f"Distance lookup refused for {origin} -> {destination}: {e}")
            raise DistanceUnavailable(ErrorReason.QUOTA_EXCEEDED, str(e)) from e
        except Exception as e:
            distance_lookups.labels(outcome="fallback").inc()
            logger.warning(f"Distance calculation failed, using fallback: {origin} -> {destination}: {e}")
            return self.fallback(origin, destination, mode, e)

        distance_lookups.labels(outcome="ok").inc()
        self.cache.set(key, result)
        logger.info(
            f"Distance calculated: {result.origin} -> {result.destination}, "
            f"{result.distance.miles} miles, {result.duration.text or result.duration.minutes} ({mode})"
        )
        return result

    def fallback(self, origin: str, destination: str, mode: str, error: Optional[BaseException] = None) -> DistanceResult:
        note = "Distance estimated; the map provider was unavailable"
        if error is not None:
            note = f"{note}: {error}"
        return DistanceResult(
            distance=DistanceMeasure(miles=FALLBACK_MILES, text=f"{FALLBACK_MILES} miles (estimated)"),
            duration=DurationMeasure(minutes=FALLBACK_MINUTES, text=f"{FALLBACK_MINUTES} mins (estimated)"),
            origin=origin,
            destination=destination,
            mode=mode,
            estimated=True,
            note=note,
            timestamp=self._clock(),
        )

    def stats(self) -> DistanceCacheStats:
        return DistanceCacheStats(
            size=len(self.cache),
            max_age=int(self.cache.ttl),
            api_configured=self.client.configured,
        )

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            removed = self.cache.sweep()
            if removed:
                logger.info(f"Distance cache sweep removed {removed} expired entries")

    def start_sweeper(self, interval: float = settings.DISTANCE_CACHE_SWEEP_INTERVAL) -> asyncio.Task:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever(interval))
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
