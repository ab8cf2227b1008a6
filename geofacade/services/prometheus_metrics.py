"""
Prometheus metrics for geofacade
"""

from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST

from ..config import API_VERSION

# Build info
BUILD_INFO = Gauge(
    'geofacade_build_info',
    'Build information',
    ['version']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'geofacade_requests_total',
    'Total number of HTTP requests',
    ['status_class', 'path_group']
)

# Field lookups by outcome: hit (served from cache), present, absent
FIELD_LOOKUPS_TOTAL = Counter(
    'geofacade_field_lookups_total',
    'Total number of accessor lookups',
    ['field', 'outcome']
)

PROVIDER_CALLS_TOTAL = Counter(
    'geofacade_provider_calls_total',
    'Total number of calls into the geo provider',
    ['capability']
)

PROVIDER_LOADED = Gauge(
    'geofacade_provider_loaded',
    'Whether the geo provider database is loaded',
    ['provider']
)


class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def __init__(self):
        BUILD_INFO.labels(version=API_VERSION).set(1)

    def increment_requests(self, status_code: int, path: str = "/unknown"):
        """Increment request counter."""
        if 200 <= status_code < 300:
            status_class = "2xx"
        elif 400 <= status_code < 500:
            status_class = "4xx"
        elif 500 <= status_code < 600:
            status_class = "5xx"
        else:
            status_class = "other"

        if "/v1/geo" in path:
            path_group = "geo"
        elif "/v1/health" in path:
            path_group = "health"
        else:
            path_group = "other"

        REQUESTS_TOTAL.labels(status_class=status_class, path_group=path_group).inc()

    def increment_field_lookup(self, field: str, outcome: str):
        FIELD_LOOKUPS_TOTAL.labels(field=field, outcome=outcome).inc()

    def increment_provider_call(self, capability: str):
        PROVIDER_CALLS_TOTAL.labels(capability=capability).inc()

    def set_provider_loaded(self, provider: str, loaded: bool):
        """Set provider loaded status."""
        PROVIDER_LOADED.labels(provider=provider).set(1 if loaded else 0)

    def get_metrics(self) -> bytes:
        """Get Prometheus metrics in text format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get the content type for Prometheus metrics."""
        return CONTENT_TYPE_LATEST


# Global metrics instance
prometheus_metrics = PrometheusMetrics()
