"""Tests for the command-line scripts."""

import json
import sys

import pytest

from scripts import infer_schema, transform_file


def test_load_sample_by_extension(tmp_path):
    """Test samples are decoded according to their file extension."""
    csv_path = tmp_path / "sample.csv"
    csv_path.write_text("id,name\n1,ada\n")
    xml_path = tmp_path / "sample.xml"
    xml_path.write_text("<row><id>1</id></row>")
    json_path = tmp_path / "sample.json"
    json_path.write_text('[{"id": 1}]')

    assert infer_schema.load_sample(csv_path) == [{"id": "1", "name": "ada"}]
    assert infer_schema.load_sample(xml_path) == {"row": {"id": "1"}}
    assert infer_schema.load_sample(json_path) == [{"id": 1}]


def test_infer_schema_main(tmp_path, monkeypatch, capsys):
    """Test the inference CLI prints the schema as JSON."""
    sample = tmp_path / "sample.json"
    sample.write_text('[{"id": 1, "created": "2024-01-15"}]')
    monkeypatch.setattr(sys, "argv", ["infer_schema.py", str(sample)])

    infer_schema.main()

    output = json.loads(capsys.readouterr().out)
    assert [f["type"] for f in output["fields"]] == ["number", "date"]
    assert output["confidence"] == 0.2


def test_infer_schema_main_missing_file(tmp_path, monkeypatch):
    """Test unreadable samples exit non-zero."""
    monkeypatch.setattr(sys, "argv", ["infer_schema.py", str(tmp_path / "missing.json")])
    with pytest.raises(SystemExit) as exc_info:
        infer_schema.main()
    assert exc_info.value.code == 1


def test_transform_file_main(tmp_path, monkeypatch):
    """Test the transform CLI writes the pipeline output."""
    config = tmp_path / "adapter.json"
    config.write_text(json.dumps({
        "name": "customers",
        "source_format": "csv",
        "target_format": "json",
        "schema_mapping": {
            "source_fields": {},
            "transforms": [{"source_field": "id", "target_field": "id", "transform_type": "number"}],
        },
    }))
    payload = tmp_path / "customers.csv"
    payload.write_text("id,name\n1,ada\n")
    output = tmp_path / "out.json"

    monkeypatch.setattr(sys, "argv", [
        "transform_file.py",
        "--config", str(config),
        "--input", str(payload),
        "--output", str(output),
    ])
    transform_file.main()

    assert json.loads(output.read_text()) == [{"id": 1, "name": "ada"}]
