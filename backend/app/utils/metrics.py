"""Prometheus metrics for external API traffic."""

from prometheus_client import Counter, Histogram

# Transport search metrics
transport_search_latency_ms = Histogram(
    "transport_search_latency_ms",
    "Transport route search latency in milliseconds",
    ["mode", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

transport_options_total = Counter(
    "transport_options_total",
    "Total transport options returned by route searches",
    ["match_type"],
)

booking_failures_total = Counter(
    "booking_failures_total",
    "Total booking telemetry calls that failed",
    ["reason"],
)

persistence_failures_total = Counter(
    "persistence_failures_total",
    "Total fire-and-forget itinerary saves that failed",
    ["operation"],
)


class PrometheusEngineMetrics:
    """Prometheus-based engine metrics implementation."""

    def record_search(self, mode: str, outcome: str, latency_ms: float) -> None:
        """Record transport search latency."""
        transport_search_latency_ms.labels(mode=mode, outcome=outcome).observe(latency_ms)

    def inc_options(self, match_type: str, count: int) -> None:
        """Count options returned per match type."""
        if count:
            transport_options_total.labels(match_type=match_type).inc(count)

    def inc_booking_failure(self, reason: str) -> None:
        """Increment booking failure counter."""
        booking_failures_total.labels(reason=reason).inc()

    def inc_persistence_failure(self, operation: str) -> None:
        """Increment persistence failure counter."""
        persistence_failures_total.labels(operation=operation).inc()
