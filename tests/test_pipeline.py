"""Tests for the transformation pipeline."""

import pytest

from legacy_adapter.adapter.base import DecodeError
from legacy_adapter.adapter.pipeline import TransformationPipeline, decode_payload, encode_payload
from legacy_adapter.adapter.types import AdapterConfig, SourceFormat, TargetFormat

CSV_PAYLOAD = "id,name,joined\n1,ada,2024-01-15\n2,grace,01/02/2023\n"


def make_config(**overrides):
    values = {
        "name": "test-adapter",
        "source_format": "csv",
        "target_format": "json",
    }
    values.update(overrides)
    return AdapterConfig.model_validate(values)


def test_csv_to_json_with_transforms():
    """Test decode and per-record transforms."""
    config = make_config(schema_mapping={
        "source_fields": {},
        "transforms": [
            {"source_field": "id", "target_field": "id", "transform_type": "number"},
            {"source_field": "name", "target_field": "name", "transform_type": "uppercase"},
            {"source_field": "joined", "target_field": "joined_at", "transform_type": "date"},
        ],
    })

    result = TransformationPipeline(config).transform(CSV_PAYLOAD)

    assert result.data == [
        {"id": 1, "name": "ADA", "joined": "2024-01-15", "joined_at": "2024-01-15T00:00:00.000Z"},
        {"id": 2, "name": "GRACE", "joined": "01/02/2023", "joined_at": "2023-01-02T00:00:00.000Z"},
    ]
    assert result.metadata.source_format == "csv"
    assert result.metadata.target_format == "json"
    assert result.metadata.fields_mapped == 0
    assert result.metadata.fields_transformed == 3
    assert result.metadata.timestamp.endswith("Z")


def test_no_mapping_counts_are_zero():
    """Test metadata without a configured mapping."""
    result = TransformationPipeline(make_config()).transform(CSV_PAYLOAD)
    assert result.metadata.fields_mapped == 0
    assert result.metadata.fields_transformed == 0
    assert len(result.data) == 2


def test_xml_rename_and_select():
    """Test XML decode followed by renaming of a single object."""
    config = make_config(
        source_format="xml",
        schema_mapping={"source_fields": {"customer": "client"}},
    )
    result = TransformationPipeline(config).transform("<customer><id>7</id></customer>")

    assert result.data == {"client": {"id": "7"}}
    assert result.metadata.fields_mapped == 1


def test_soap_envelope_kept_by_default():
    """Test SOAP payloads decode without unwrapping."""
    payload = (
        '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">'
        "<s:Body><Ping>pong</Ping></s:Body></s:Envelope>"
    )
    result = TransformationPipeline(make_config(source_format="soap")).transform(payload)
    assert result.data["s:Envelope"]["s:Body"] == {"Ping": "pong"}


def test_soap_envelope_unwrapped_when_enabled():
    """Test opt-in SOAP body extraction."""
    payload = (
        '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">'
        "<s:Body><Ping>pong</Ping></s:Body></s:Envelope>"
    )
    config = make_config(source_format="soap", unwrap_soap_body=True)
    result = TransformationPipeline(config).transform(payload)
    assert result.data == {"Ping": "pong"}


def test_json_to_csv():
    """Test structured input passes decode and encodes to CSV."""
    config = make_config(source_format="json", target_format="csv")
    result = TransformationPipeline(config).transform([{"a": "1", "b": "2"}])
    assert result.data == 'a,b\n"1","2"'


def test_json_to_xml():
    """Test object encodes to XML."""
    config = make_config(source_format="rest", target_format="xml")
    result = TransformationPipeline(config).transform({"status": {"ok": True}})
    assert "<ok>true</ok>" in result.data


def test_incompatible_shape_left_structured():
    """Test a list is not encoded to XML and a dict is not encoded to CSV."""
    records = [{"a": 1}]
    xml_pipeline = TransformationPipeline(make_config(source_format="json", target_format="xml"))
    csv_pipeline = TransformationPipeline(make_config(source_format="json", target_format="csv"))

    assert xml_pipeline.transform(records).data == records
    assert csv_pipeline.transform({"a": 1}).data == {"a": 1}


def test_protobuf_target_returns_structured_value():
    """Test protobuf encoding is left to external collaborators."""
    config = make_config(target_format="protobuf")
    result = TransformationPipeline(config).transform("a\n1\n")
    assert result.data == [{"a": "1"}]


def test_target_format_override():
    """Test per-call target format."""
    pipeline = TransformationPipeline(make_config())
    result = pipeline.transform("a,b\n1,2\n", target_format="csv")
    assert result.data == 'a,b\n"1","2"'
    assert result.metadata.target_format == "csv"


def test_transform_is_idempotent_on_structured_input():
    """Test repeated transforms of the same data are identical."""
    config = make_config(
        source_format="json",
        schema_mapping={
            "source_fields": {},
            "transforms": [{"source_field": "n", "target_field": "n", "transform_type": "number"}],
        },
    )
    pipeline = TransformationPipeline(config)
    data = [{"n": "5"}, {"n": "x"}]

    first = pipeline.transform(data)
    second = pipeline.transform(data)

    assert first.data[0] == second.data[0] == {"n": 5}
    assert data == [{"n": "5"}, {"n": "x"}]


def test_malformed_xml_raises_decode_error():
    """Test decode failures surface as DecodeError."""
    pipeline = TransformationPipeline(make_config(source_format="xml"))
    with pytest.raises(DecodeError):
        pipeline.transform("<broken>")


def test_decode_payload_passthrough():
    """Test structured values and non-legacy formats are not decoded."""
    assert decode_payload({"a": 1}, SourceFormat.XML) == {"a": 1}
    assert decode_payload("a,b", SourceFormat.JSON) == "a,b"


def test_encode_payload_passthrough():
    """Test json target leaves values untouched."""
    assert encode_payload([1, 2], TargetFormat.JSON) == [1, 2]
