"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry
import time
from functools import wraps
from typing import Callable

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

cache_hits = Counter(
    'cache_hits_total',
    'Total cache hits',
    ['cache'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Total cache misses',
    ['cache'],
    registry=registry
)

distance_lookups = Counter(
    'distance_lookups_total',
    'Distance provider lookups by outcome',
    ['outcome'],
    registry=registry
)

distance_lookup_duration = Histogram(
    'distance_lookup_duration_seconds',
    'Distance provider call duration in seconds',
    ['outcome'],
    registry=registry
)

distance_cache_size = Gauge(
    'distance_cache_size',
    'Number of entries held in the distance cache',
    registry=registry
)

quotes_generated = Counter(
    'quotes_generated_total',
    'Total quotes generated',
    ['event_type', 'service_level'],
    registry=registry
)

quote_processing_duration = Histogram(
    'quote_processing_duration_seconds',
    'Quote generation duration in seconds',
    registry=registry
)

analytics_ring_size = Gauge(
    'analytics_ring_size',
    'Number of quote summaries held for analytics',
    registry=registry
)


def track_distance_lookup(func: Callable) -> Callable:
    """Decorator to time provider calls; the outcome label comes from the exception, if any"""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            outcome = getattr(e, "outcome", "fallback")
            distance_lookup_duration.labels(outcome=outcome).observe(time.time() - start_time)
            raise
        distance_lookup_duration.labels(outcome="ok").observe(time.time() - start_time)
        return result
    return wrapper


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
