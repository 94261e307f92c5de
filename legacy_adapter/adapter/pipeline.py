"""Transformation pipeline: decode -> schema mapping -> encode.

The stage order is fixed. Decoding depends on the configured source format,
encoding on the requested target format and the shape of the mapped value.
"""

from typing import Any, Optional, Union
import structlog

from .codecs import decode_csv, decode_xml, encode_csv, encode_xml, unwrap_soap_body
from .mapping import SchemaMapper
from .types import (
    AdapterConfig,
    AdapterTransformResult,
    SourceFormat,
    StructuredValue,
    TargetFormat,
    TransformMetadata,
)

logger = structlog.get_logger("transformation_pipeline")


def decode_payload(
    raw: Any,
    source_format: SourceFormat,
    unwrap_soap: bool = False
) -> StructuredValue:
    """Decode ``raw`` according to ``source_format``.

    Only text and bytes are decoded; values that are already structured, and
    every non-XML/CSV format, pass through unchanged.
    """
    if not isinstance(raw, (str, bytes)):
        return raw

    if source_format == SourceFormat.XML:
        return decode_xml(raw)
    if source_format == SourceFormat.SOAP:
        decoded = decode_xml(raw)
        return unwrap_soap_body(decoded) if unwrap_soap else decoded
    if source_format == SourceFormat.CSV:
        return decode_csv(raw)
    return raw


def encode_payload(value: StructuredValue, target_format: TargetFormat) -> Any:
    """Encode ``value`` when the target format and shape allow it."""
    if target_format == TargetFormat.XML and isinstance(value, dict):
        return encode_xml(value)
    if target_format == TargetFormat.CSV and isinstance(value, list):
        return encode_csv(value)
    return value


class TransformationPipeline:
    """Stateless transformation chain bound to one adapter configuration."""

    def __init__(self, config: AdapterConfig, mapper: Optional[SchemaMapper] = None):
        self.config = config
        self.mapper = mapper or SchemaMapper()

    def transform(
        self,
        raw: Any,
        target_format: Optional[Union[TargetFormat, str]] = None
    ) -> AdapterTransformResult:
        source = self.config.source_format
        target = TargetFormat(target_format) if target_format else self.config.target_format

        data = decode_payload(raw, source, unwrap_soap=self.config.unwrap_soap_body)

        fields_mapped = 0
        fields_transformed = 0
        if self.config.schema_mapping is not None:
            result = self.mapper.apply(data, self.config.schema_mapping)
            data = result.data
            fields_mapped = result.fields_mapped
            fields_transformed = result.fields_transformed

        data = encode_payload(data, target)

        metadata = TransformMetadata(
            source_format=source.value,
            target_format=target.value,
            fields_mapped=fields_mapped,
            fields_transformed=fields_transformed
        )
        logger.debug(
            "Payload transformed",
            adapter=self.config.name,
            source_format=metadata.source_format,
            target_format=metadata.target_format,
            fields_mapped=fields_mapped,
            fields_transformed=fields_transformed
        )
        return AdapterTransformResult(data=data, metadata=metadata)
