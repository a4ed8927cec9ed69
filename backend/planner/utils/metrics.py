"""Prometheus metrics for collaborator calls and itinerary mutations."""

from prometheus_client import Counter, Histogram

# Collaborator call metrics
collaborator_latency_ms = Histogram(
    "collaborator_latency_ms",
    "Collaborator call latency in milliseconds",
    ["collaborator", "outcome"],
    buckets=[5, 10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

collaborator_errors_total = Counter(
    "collaborator_errors_total",
    "Total collaborator call errors",
    ["collaborator", "reason"],
)

# Itinerary mutation metrics
itinerary_mutations_total = Counter(
    "itinerary_mutations_total",
    "Total itinerary mutations",
    ["operation", "outcome"],
)


class PrometheusCallMetrics:
    """Prometheus-based collaborator call metrics."""

    def record_latency(self, collaborator: str, outcome: str, latency_ms: float) -> None:
        """Record call latency."""
        collaborator_latency_ms.labels(collaborator=collaborator, outcome=outcome).observe(
            latency_ms
        )

    def inc_error(self, collaborator: str, reason: str) -> None:
        """Increment error counter."""
        collaborator_errors_total.labels(collaborator=collaborator, reason=reason).inc()


def record_mutation(operation: str, outcome: str) -> None:
    """Count an itinerary mutation by operation and outcome."""
    itinerary_mutations_total.labels(operation=operation, outcome=outcome).inc()
