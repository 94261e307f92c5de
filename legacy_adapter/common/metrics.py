"""Metrics collection for legacy system adapters.

Provides a thin convenience wrapper around ``prometheus_client`` so adapters
can consistently record request, retry, and transformation metrics.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- A single registry is kept per collector (can be injected if needed)
"""

from typing import Optional
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for adapters.

    Parameters
    - service_name: Logical name used for scoping/labels if desired
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.request_count = Counter(
            'adapter_requests_total',
            'Total adapter requests',
            ['adapter', 'method', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'adapter_request_duration_seconds',
            'Adapter request duration including retries and transformation',
            ['adapter'],
            registry=self.registry
        )

        self.retries = Counter(
            'adapter_retries_total',
            'Total retry attempts issued after a failed request',
            ['adapter'],
            registry=self.registry
        )

        self.bytes_processed = Counter(
            'adapter_bytes_processed_total',
            'Total bytes received from remote endpoints',
            ['adapter'],
            registry=self.registry
        )

        self.fields_transformed = Counter(
            'adapter_fields_transformed_total',
            'Total configured field transforms applied per transformation',
            ['adapter'],
            registry=self.registry
        )

    def record_request(
        self,
        adapter: str,
        method: str,
        success: bool,
        duration: float
    ) -> None:
        """Record adapter request metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        status = "success" if success else "failure"
        self.request_count.labels(adapter=adapter, method=method, status=status).inc()
        self.request_duration.labels(adapter=adapter).observe(duration)

    def record_retry(self, adapter: str) -> None:
        """Record a single retry attempt."""
        self.retries.labels(adapter=adapter).inc()

    def record_bytes(self, adapter: str, size: int) -> None:
        """Record bytes received."""
        self.bytes_processed.labels(adapter=adapter).inc(size)

    def record_transform(self, adapter: str, fields_transformed: int) -> None:
        """Record the number of field transforms applied."""
        self.fields_transformed.labels(adapter=adapter).inc(fields_transformed)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str) -> MetricsCollector:
    """Get or create metrics collector for a service.

    Returns a process‑wide singleton to avoid duplicate collectors/labels.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
        logger.debug("Metrics collector created", service=service_name)
    return _metrics_collector
