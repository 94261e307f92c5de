"""Types shared by the adapter components.

Configuration is expressed as frozen pydantic models so it is validated once
at construction and cannot change afterwards. Per-call results are plain
dataclasses with a ``to_dict`` helper, mirroring the event payloads used
elsewhere in the stack.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Generic decoded tree passed between pipeline stages.
StructuredValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class SourceFormat(str, Enum):
    """Wire formats an adapter can read."""
    JSON = "json"
    XML = "xml"
    CSV = "csv"
    SOAP = "soap"
    GRPC = "grpc"
    REST = "rest"
    GRAPHQL = "graphql"


class TargetFormat(str, Enum):
    """Formats an adapter can produce."""
    JSON = "json"
    XML = "xml"
    CSV = "csv"
    PROTOBUF = "protobuf"  # encoding supplied by an external collaborator


class TransformType(str, Enum):
    """Per-field value conversions."""
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CUSTOM = "custom"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class RetryPolicy(BaseModel):
    """Bounded exponential backoff parameters (milliseconds)."""

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    initial_delay_ms: float = Field(default=1000, gt=0, description="Delay before the first retry")
    max_delay_ms: float = Field(default=10000, gt=0, description="Upper bound for any delay")
    backoff_multiplier: float = Field(default=2.0, ge=1, description="Growth factor per failed attempt")

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryPolicy":
        if self.max_delay_ms < self.initial_delay_ms:
            raise ValueError("max_delay_ms must be >= initial_delay_ms")
        return self

    def delays(self) -> Iterator[float]:
        """Yield the delay before each retry, ``max_retries`` values in total."""
        delay = self.initial_delay_ms
        for _ in range(self.max_retries):
            yield delay
            delay = min(delay * self.backoff_multiplier, self.max_delay_ms)


class FieldTransform(BaseModel):
    """Single value conversion rule applied to every record."""

    model_config = ConfigDict(frozen=True)

    source_field: str
    target_field: str
    transform_type: TransformType
    transform_fn: Optional[str] = Field(
        default=None,
        description="Name of a registered function, used by the custom transform"
    )


class SchemaMapping(BaseModel):
    """Declarative rename/select mapping plus ordered value transforms."""

    model_config = ConfigDict(frozen=True)

    source_fields: Dict[str, str] = Field(default_factory=dict)
    transforms: List[FieldTransform] = Field(default_factory=list)


class AdapterConfig(BaseModel):
    """Immutable configuration of one adapter instance."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    source_format: SourceFormat
    target_format: TargetFormat
    schema_mapping: Optional[SchemaMapping] = None
    endpoint: Optional[str] = None
    timeout_ms: int = Field(default=30000, gt=0)
    retry_policy: Optional[RetryPolicy] = None
    unwrap_soap_body: bool = Field(
        default=False,
        description="Strip the SOAP Envelope/Body wrapper after decoding"
    )


class AdapterRequest(BaseModel):
    """A logical request issued through an adapter."""

    method: HttpMethod = HttpMethod.GET
    endpoint: Optional[str] = None
    path: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None
    query_params: Dict[str, str] = Field(default_factory=dict)


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class TransportRequest:
    """Fully resolved request handed to a transport."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    query_params: Dict[str, str] = field(default_factory=dict)


@dataclass
class RawResult:
    """Transport output for one successful round trip."""
    body: Any
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class TransformMetadata:
    source_format: str
    target_format: str
    fields_mapped: int
    fields_transformed: int
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AdapterTransformResult:
    data: Any
    metadata: TransformMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "metadata": self.metadata.to_dict()}


@dataclass
class ResponseMetadata:
    duration: float
    adapter: str
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass
class AdapterResponse:
    """Outcome of ``LegacySystemAdapter.execute``; failures never raise."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    headers: Optional[Dict[str, str]] = None
    metadata: Optional[ResponseMetadata] = None
    transform: Optional[TransformMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AdapterHealthCheck:
    healthy: bool
    last_checked: str
    latency: Optional[float] = None
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AdapterMetrics:
    """Running counters owned by a single adapter instance."""
    requests_total: int = 0
    requests_success: int = 0
    requests_failed: int = 0
    avg_response_time: float = 0.0
    total_bytes_processed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InferredField:
    name: str
    type: str
    nullable: bool
    sample_values: List[Any]


@dataclass(frozen=True)
class InferredSchema:
    fields: List[InferredField]
    confidence: float
    suggestions: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EndpointAnalysis:
    """Partial adapter configuration suggested by probing an endpoint."""
    source_format: SourceFormat
    target_format: TargetFormat
    schema_mapping: SchemaMapping
    inferred_schema: InferredSchema
