"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest

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

quotes_computed = Counter(
    'fare_quotes_total',
    'Total fare quotes computed',
    ['zone', 'service_type', 'min_fare_applied'],
    registry=registry
)

pricing_fallbacks = Counter(
    'pricing_fallbacks_total',
    'Quotes priced with a fallback configuration',
    ['source'],
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

fx_rates_stored = Counter(
    'fx_rates_stored_total',
    'FX rates fetched and stored',
    ['base', 'quote'],
    registry=registry
)

fx_fetch_failures = Counter(
    'fx_fetch_failures_total',
    'FX provider fetch failures',
    ['base'],
    registry=registry
)

fx_missing_rate = Counter(
    'fx_missing_rate_total',
    'Quotes requested in a display currency with no stored rate',
    ['quote'],
    registry=registry
)

cfdi_results = Counter(
    'cfdi_results_total',
    'CFDI generation outcomes',
    ['provider', 'status'],
    registry=registry
)

tax_retentions = Counter(
    'tax_retentions_total',
    'Tax retention calculations',
    ['country', 'has_rfc'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    return generate_latest(registry).decode('utf-8')
