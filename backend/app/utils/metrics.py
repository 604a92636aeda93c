"""Prometheus metrics for the API gateway."""

from prometheus_client import Counter, Histogram

gateway_decisions_total = Counter(
    "gateway_decisions_total",
    "Gateway authorization decisions",
    ["route", "outcome"],
)

gateway_handler_latency_ms = Histogram(
    "gateway_handler_latency_ms",
    "Route handler latency in milliseconds",
    ["route", "status"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000],
)


class PrometheusGatewayMetrics:
    """Prometheus-based gateway metrics implementation."""

    def inc_decision(self, route: str, outcome: str) -> None:
        """Increment decision counter."""
        gateway_decisions_total.labels(route=route, outcome=outcome).inc()

    def record_latency(self, route: str, status: int, latency_ms: float) -> None:
        """Record handler latency."""
        gateway_handler_latency_ms.labels(route=route, status=str(status)).observe(latency_ms)
