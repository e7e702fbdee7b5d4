"""
Shared metrics configuration for the Access Mediator.
"""

from typing import Dict, Any, Optional

from prometheus_client import Counter, Histogram, Info, CollectorRegistry


class MetricsCollector:
    """Centralized metrics collector for mediator components.

    Metrics are registered against ``registry``; with ``registry=None`` they
    are created unregistered, which keeps repeated construction (tests,
    disabled metrics) free of duplicate-registration errors.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_mediator_metrics()

    def _setup_mediator_metrics(self):
        """Set up mediation-specific metrics."""
        self._metrics["mediation_requests_total"] = Counter(
            "mediation_requests_total",
            "Total mediated requests by outcome",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["delegate_constructions_total"] = Counter(
            "delegate_constructions_total",
            "Total delegate constructions",
            registry=self.registry
        )

        self._metrics["delegate_invocations_total"] = Counter(
            "delegate_invocations_total",
            "Total delegate invocations",
            ["status"],
            registry=self.registry
        )

        self._metrics["delegate_duration_seconds"] = Histogram(
            "delegate_duration_seconds",
            "Delegate invocation duration in seconds",
            registry=self.registry
        )

    def record_mediation(self, outcome: str):
        """Record the outcome of a mediated request."""
        self._metrics["mediation_requests_total"].labels(outcome=outcome).inc()

    def record_delegate_construction(self):
        """Record a delegate construction."""
        self._metrics["delegate_constructions_total"].inc()

    def record_delegate_invocation(self, status: str, duration: float):
        """Record a delegate invocation and its duration."""
        self._metrics["delegate_invocations_total"].labels(status=status).inc()
        self._metrics["delegate_duration_seconds"].observe(duration)

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)

