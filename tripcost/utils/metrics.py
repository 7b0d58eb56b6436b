"""Prometheus metrics for pricing calculations."""

from prometheus_client import Counter, Histogram

pricing_latency_ms = Histogram(
    "pricing_latency_ms",
    "Pricing calculation latency in milliseconds",
    ["outcome"],
    buckets=[1, 5, 10, 50, 100, 200, 500, 1000, 2000],
)

pricing_calculations_total = Counter(
    "pricing_calculations_total",
    "Total pricing calculation requests",
    ["outcome"],
)

pricing_cache_hits_total = Counter(
    "pricing_cache_hits_total",
    "Total pricing cache hits",
)

pricing_stale_responses_total = Counter(
    "pricing_stale_responses_total",
    "Total pricing responses discarded because a newer request was issued",
)


class PrometheusPricingMetrics:
    """Prometheus-based pricing metrics implementation."""

    def record_latency(self, outcome: str, latency_ms: float) -> None:
        """Record calculation latency."""
        pricing_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_calculation(self, outcome: str) -> None:
        """Increment calculation counter."""
        pricing_calculations_total.labels(outcome=outcome).inc()

    def inc_cache_hit(self) -> None:
        """Increment cache hit counter."""
        pricing_cache_hits_total.inc()

    def inc_stale_response(self) -> None:
        """Increment discarded stale response counter."""
        pricing_stale_responses_total.inc()
