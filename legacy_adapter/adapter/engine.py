"""Legacy system adapter.

``LegacySystemAdapter`` is the entry point combining the retry executor and
the transformation pipeline for each logical request. It owns one immutable
``AdapterConfig`` and one set of running ``AdapterMetrics``.

Failures never propagate out of ``execute``: every error is logged, counted
and returned as ``AdapterResponse(success=False, ...)``. One-shot
diagnostics (``analyze_endpoint``) re-raise instead.
"""

import asyncio
import json
import threading
import time
from dataclasses import replace
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import structlog

from ..common.logging import ServiceLogger
from ..common.metrics import MetricsCollector
from .base import ConfigurationError, Transport
from .inference import infer_schema
from .mapping import CustomFunction, SchemaMapper
from .pipeline import TransformationPipeline, decode_payload
from .retry import RetryExecutor, retry_always
from .transport import HttpxTransport, accept_header
from .types import (
    AdapterConfig,
    AdapterHealthCheck,
    AdapterMetrics,
    AdapterRequest,
    AdapterResponse,
    AdapterTransformResult,
    EndpointAnalysis,
    HttpMethod,
    InferredSchema,
    ResponseMetadata,
    RetryPolicy,
    SchemaMapping,
    SourceFormat,
    TargetFormat,
    TransportRequest,
    utc_timestamp,
)

ANALYZE_TIMEOUT_MS = 10000
ANALYZE_ACCEPT = "application/json, application/xml, text/csv"


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _payload_size(body: Any) -> int:
    """Size in bytes of a response body as received."""
    if body is None:
        return 0
    if isinstance(body, bytes):
        return len(body)
    if isinstance(body, str):
        return len(body.encode("utf-8"))
    return len(json.dumps(body, default=str).encode("utf-8"))


def detect_source_format(content_type: str, body: Any) -> SourceFormat:
    """Guess the wire format from a content type and a sample body."""
    content_type = content_type.lower()
    is_text = isinstance(body, str)

    if "xml" in content_type or (is_text and body.strip().startswith("<")):
        return SourceFormat.XML
    if "csv" in content_type or (is_text and "," in body):
        return SourceFormat.CSV
    return SourceFormat.JSON


class LegacySystemAdapter:
    """Bridges callers to a legacy endpoint with retries and schema mapping."""

    def __init__(
        self,
        config: AdapterConfig,
        logger: Optional[Any] = None,
        transport: Optional[Transport] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        custom_functions: Optional[Mapping[str, CustomFunction]] = None,
        is_retryable: Callable[[Exception], bool] = retry_always,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        """Create an adapter.

        Parameters
        - config: Immutable adapter configuration
        - logger: structlog-style logger; defaults to a ``ServiceLogger``
          bound with the adapter name
        - transport: Network collaborator; defaults to ``HttpxTransport``
          using the configured timeout and format-specific ``Accept`` header
        - metrics_collector: Optional Prometheus collector
        - custom_functions: Functions available to ``custom`` transforms
        - is_retryable: Predicate narrowing which failures are retried
        - sleep: Backoff sleep (seconds); injectable for tests
        """
        self.config = config
        self.logger = logger or ServiceLogger("legacy_adapter", adapter=config.name)
        self.retry_policy = config.retry_policy or RetryPolicy()
        self.transport = transport or HttpxTransport(
            timeout_ms=config.timeout_ms,
            accept=accept_header(config.source_format)
        )
        self.metrics_collector = metrics_collector
        self.mapper = SchemaMapper(custom_functions)
        self.pipeline = TransformationPipeline(config, self.mapper)
        self.retry_executor = RetryExecutor(
            self.retry_policy,
            is_retryable=is_retryable,
            sleep=sleep,
            logger=self.logger,
            metrics=metrics_collector,
            name=config.name
        )

        self._metrics = AdapterMetrics()
        self._metrics_lock = threading.Lock()

    async def __aenter__(self) -> "LegacySystemAdapter":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying transport."""
        await self.transport.aclose()

    def register_transform(self, name: str, func: CustomFunction) -> None:
        """Make ``func`` available to ``custom`` transforms under ``name``."""
        self.mapper.register(name, func)

    async def execute(self, request: AdapterRequest) -> AdapterResponse:
        """Execute a request through the adapter."""
        start = time.perf_counter()
        with self._metrics_lock:
            self._metrics.requests_total += 1

        try:
            transport_request = self._build_request(request)
            result = await self.retry_executor.execute_with_retry(
                lambda: self.transport.send(transport_request),
                operation_name=f"{request.method.value} {transport_request.url}"
            )

            transform_metadata = None
            if request.method == HttpMethod.GET:
                transformed = self.pipeline.transform(result.body)
                data = transformed.data
                transform_metadata = transformed.metadata
            else:
                data = result.body
        except Exception as e:
            duration = _elapsed_ms(start)
            with self._metrics_lock:
                self._metrics.requests_failed += 1

            error = str(e) or type(e).__name__
            self.logger.error(
                f"Adapter execution failed: {self.config.name}",
                error=error,
                error_type=type(e).__name__,
                duration=duration
            )
            self._record_request(request, False, duration)
            return AdapterResponse(
                success=False,
                error=error,
                metadata=ResponseMetadata(duration=duration, adapter=self.config.name)
            )

        duration = _elapsed_ms(start)
        size = _payload_size(result.body)
        with self._metrics_lock:
            self._metrics.requests_success += 1
            success_count = self._metrics.requests_success
            self._metrics.avg_response_time = (
                self._metrics.avg_response_time * (success_count - 1) + duration
            ) / success_count
            self._metrics.total_bytes_processed += size

        self.logger.info(
            f"Adapter executed successfully: {self.config.name}",
            duration=duration,
            status_code=result.status_code
        )
        self._record_request(request, True, duration)
        if self.metrics_collector is not None:
            self.metrics_collector.record_bytes(self.config.name, size)
            if transform_metadata is not None:
                self.metrics_collector.record_transform(
                    self.config.name, transform_metadata.fields_transformed
                )

        return AdapterResponse(
            success=True,
            data=data,
            status_code=result.status_code,
            headers=result.headers,
            metadata=ResponseMetadata(duration=duration, adapter=self.config.name),
            transform=transform_metadata
        )

    def transform(
        self,
        data: Any,
        target_format: Optional[Union[TargetFormat, str]] = None
    ) -> AdapterTransformResult:
        """Transform data between formats without any network access."""
        return self.pipeline.transform(data, target_format)

    async def health_check(self) -> AdapterHealthCheck:
        """Probe the configured endpoint once, bypassing the retry policy."""
        start = time.perf_counter()

        try:
            if self.config.endpoint:
                await self.transport.head(self.config.endpoint)
        except Exception as e:
            self.logger.warning("Health check failed", endpoint=self.config.endpoint, error=str(e))
            return AdapterHealthCheck(
                healthy=False,
                latency=_elapsed_ms(start),
                last_checked=utc_timestamp(),
                errors=[str(e) or type(e).__name__]
            )

        return AdapterHealthCheck(
            healthy=True,
            latency=_elapsed_ms(start),
            last_checked=utc_timestamp()
        )

    def get_metrics(self) -> AdapterMetrics:
        """Snapshot of the running counters."""
        with self._metrics_lock:
            return replace(self._metrics)

    @staticmethod
    def infer_schema(sample: Any, confidence: Optional[float] = None) -> InferredSchema:
        """Infer schema from sample data."""
        return infer_schema(sample, confidence)

    @staticmethod
    async def analyze_endpoint(
        endpoint: str,
        logger: Optional[Any] = None,
        transport: Optional[Transport] = None,
        timeout_ms: int = ANALYZE_TIMEOUT_MS
    ) -> EndpointAnalysis:
        """Suggest an adapter configuration by sampling ``endpoint`` once.

        Errors are logged and re-raised.
        """
        log = logger or structlog.get_logger("legacy_adapter")
        log.info(f"Analyzing endpoint: {endpoint}")

        owns_transport = transport is None
        transport = transport or HttpxTransport(timeout_ms=timeout_ms, accept=ANALYZE_ACCEPT)

        try:
            result = await transport.send(TransportRequest(method="GET", url=endpoint))
            content_type = next(
                (v for k, v in result.headers.items() if k.lower() == "content-type"), ""
            )
            source_format = detect_source_format(content_type, result.body)
            schema = infer_schema(decode_payload(result.body, source_format), confidence=0.8)

            log.info(
                "Endpoint analysis complete",
                source_format=source_format.value,
                fields=len(schema.fields)
            )
            return EndpointAnalysis(
                source_format=source_format,
                target_format=TargetFormat.JSON,
                schema_mapping=SchemaMapping(source_fields={}),
                inferred_schema=schema
            )
        except Exception as e:
            log.error(f"Endpoint analysis failed: {endpoint}", error=str(e))
            raise
        finally:
            if owns_transport:
                await transport.aclose()

    def _build_request(self, request: AdapterRequest) -> TransportRequest:
        url = request.endpoint or self.config.endpoint
        if not url:
            raise ConfigurationError(f"No endpoint configured for adapter {self.config.name}")
        if request.path:
            url = f"{url.rstrip('/')}/{request.path.lstrip('/')}"

        return TransportRequest(
            method=request.method.value,
            url=url,
            headers=dict(request.headers),
            body=request.body,
            query_params=dict(request.query_params)
        )

    def _record_request(self, request: AdapterRequest, success: bool, duration_ms: float) -> None:
        if self.metrics_collector is not None:
            self.metrics_collector.record_request(
                self.config.name, request.method.value, success, duration_ms / 1000.0
            )
