"""Prometheus metrics for webhook processing.

Metrics Defined:
- bountyhook_webhooks_received_total: Counter of deliveries by event and outcome
- bountyhook_signature_failures_total: Counter of rejected deliveries
- bountyhook_claims_recorded_total: Counter of saved claims by state

Metrics are exposed at the `/metrics` endpoint in Prometheus format.
"""

from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, generate_latest


class WebhookMetrics:
    """Container for the webhook processor's Prometheus metrics.

    Supports custom registries for testing.

    Example:
        >>> metrics = WebhookMetrics(registry=CollectorRegistry())
        >>> metrics.record_webhook("pull_request", "processed")
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize webhook metrics.

        Args:
            registry: Optional Prometheus registry. If None, uses the
                      default REGISTRY. Pass a custom registry for testing.
        """
        self.registry = registry or REGISTRY

        self.webhooks_received_total = Counter(
            "bountyhook_webhooks_received_total",
            "Total number of verified webhook deliveries",
            labelnames=["event", "status"],
            registry=self.registry,
        )

        self.signature_failures_total = Counter(
            "bountyhook_signature_failures_total",
            "Total number of webhook deliveries rejected by signature check",
            registry=self.registry,
        )

        self.claims_recorded_total = Counter(
            "bountyhook_claims_recorded_total",
            "Total number of bounty claims saved, by state",
            labelnames=["state"],
            registry=self.registry,
        )

    def record_webhook(self, event: str, status: str) -> None:
        self.webhooks_received_total.labels(event=event, status=status).inc()

    def record_signature_failure(self) -> None:
        self.signature_failures_total.inc()

    def record_claim(self, state: str) -> None:
        self.claims_recorded_total.labels(state=state).inc()

    def generate(self) -> bytes:
        """Render this registry in Prometheus text format."""
        return generate_latest(self.registry)


_default_metrics: Optional[WebhookMetrics] = None


def get_metrics() -> WebhookMetrics:
    """Get or create the metrics instance for the default registry."""
    global _default_metrics
    if _default_metrics is None:
        _default_metrics = WebhookMetrics()
    return _default_metrics
