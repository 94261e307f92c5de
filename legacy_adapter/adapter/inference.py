"""Best-effort schema inference from sample data.

Pure functions: no network access and no mutation of the sample. Types are
taken from the first record only; nullability is checked across the whole
sample. ``confidence`` is a crude completeness heuristic (field count / 10),
not a statistical measure.
"""

import re
from typing import Any, List, Optional

from .types import InferredField, InferredSchema

SAMPLE_VALUES_LIMIT = 5
DATE_PATTERNS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}"),
    re.compile(r"^\d{2}/\d{2}/\d{4}"),
)
EMPTY_SCHEMA_SUGGESTION = "Unable to infer schema from empty or invalid data"


def looks_like_date(value: Any) -> bool:
    """True for text starting with ``YYYY-MM-DD`` or ``MM/DD/YYYY``."""
    if not isinstance(value, str):
        return False
    return any(pattern.match(value) for pattern in DATE_PATTERNS)


def infer_field_type(value: Any) -> str:
    # bool before number: Python booleans are ints
    if value is None:
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    if looks_like_date(value):
        return "date"
    return "string"


def _field_value(item: Any, key: str) -> Any:
    return item.get(key) if isinstance(item, dict) else None


def infer_schema(sample: Any, confidence: Optional[float] = None) -> InferredSchema:
    """Infer a field-level schema from a list of records or a single record.

    ``confidence`` is accepted for call compatibility and does not change the
    result.
    """
    fields: List[InferredField] = []
    suggestions: List[str] = []

    if isinstance(sample, list) and sample:
        first = sample[0]
        if isinstance(first, dict):
            for key, value in first.items():
                fields.append(InferredField(
                    name=key,
                    type=infer_field_type(value),
                    nullable=any(_field_value(item, key) is None for item in sample),
                    sample_values=[_field_value(item, key) for item in sample[:SAMPLE_VALUES_LIMIT]]
                ))
    elif isinstance(sample, dict):
        for key, value in sample.items():
            fields.append(InferredField(
                name=key,
                type=infer_field_type(value),
                nullable=value is None,
                sample_values=[value]
            ))

    if not fields:
        suggestions.append(EMPTY_SCHEMA_SUGGESTION)

    date_fields = [
        f.name for f in fields
        if f.type == "string" and any(looks_like_date(v) for v in f.sample_values)
    ]
    if date_fields:
        suggestions.append(f"Consider adding date transforms for: {', '.join(date_fields)}")

    return InferredSchema(
        fields=fields,
        confidence=min(1.0, len(fields) / 10),
        suggestions=suggestions
    )
