"""Prometheus metrics for link creation and resolution."""

from prometheus_client import Counter, Histogram

__all__ = [
    "LINK_CREATE_REQUESTS_TOTAL",
    "LINK_RESOLVE_REQUESTS_TOTAL",
    "HASH_COLLISIONS_TOTAL",
    "CACHE_REQUESTS_TOTAL",
    "LINK_CREATE_DURATION",
    "LINK_RESOLVE_DURATION",
]

LINK_CREATE_REQUESTS_TOTAL = Counter(
    "link_shortener_create_requests_total",
    "Total link creation requests",
    ["status"],
)
LINK_RESOLVE_REQUESTS_TOTAL = Counter(
    "link_shortener_resolve_requests_total",
    "Total hash resolutions by outcome",
    ["outcome"],
)
HASH_COLLISIONS_TOTAL = Counter(
    "link_shortener_hash_collisions_total",
    "Hash candidates rejected by the unique constraint",
    ["strategy"],
)
CACHE_REQUESTS_TOTAL = Counter(
    "link_shortener_cache_requests_total",
    "Link cache lookups",
    ["result"],
)

LINK_CREATE_DURATION = Histogram(
    "link_shortener_create_duration_seconds",
    "Time taken to create links",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
LINK_RESOLVE_DURATION = Histogram(
    "link_shortener_resolve_duration_seconds",
    "Time taken to resolve hashes",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
)
