"""Schema mapping: field rename/select followed by per-field value transforms.

The mapper never mutates its input. Renaming builds a new dict and every
transformed record is a shallow copy of the original.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from .types import FieldTransform, SchemaMapping, StructuredValue, TransformType

INVALID_DATE = "Invalid Date"

# Keywords pandas resolves against the current clock
RELATIVE_DATE_KEYWORDS = frozenset({"now", "today"})

# Widest epoch-millisecond offset accepted as a date
MAX_EPOCH_MS = 8_640_000_000_000_000

CustomFunction = Callable[[Any], Any]


@dataclass
class MappingResult:
    data: StructuredValue
    fields_mapped: int
    fields_transformed: int


def map_fields(data: Dict[str, Any], source_fields: Mapping[str, str]) -> Dict[str, Any]:
    """Keep only mapped fields that are present, under their target names."""
    result: Dict[str, Any] = {}
    for source_field, target_field in source_fields.items():
        if source_field in data:
            result[target_field] = data[source_field]
    return result


def to_number(value: Any) -> float:
    """Coerce to a number; anything non-numeric becomes NaN."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return np.nan
    return np.nan


def to_boolean(value: Any) -> bool:
    """Truthiness of primitives: None, False, zero, NaN and "" are false."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def to_iso_date(value: Any) -> str:
    """Reformat to ``YYYY-MM-DDTHH:MM:SS.sssZ``; unparsable input gives ``Invalid Date``.

    Numbers are read as epoch milliseconds and naive timestamps as UTC.
    """
    if value is None or isinstance(value, bool):
        return INVALID_DATE

    try:
        if isinstance(value, (int, float)):
            if (isinstance(value, float) and math.isnan(value)) or abs(value) > MAX_EPOCH_MS:
                return INVALID_DATE
            ts = pd.to_datetime(value, unit="ms", utc=True)
        elif isinstance(value, (datetime, date)):
            ts = pd.Timestamp(value)
            ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
        else:
            text = str(value).strip()
            if text.lower() in RELATIVE_DATE_KEYWORDS:
                return INVALID_DATE
            ts = pd.to_datetime(text, utc=True, errors="coerce")
    except (ValueError, OverflowError, pd.errors.OutOfBoundsDatetime):
        return INVALID_DATE

    if ts is pd.NaT or pd.isna(ts):
        return INVALID_DATE
    return ts.to_pydatetime().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class SchemaMapper:
    """Applies a ``SchemaMapping`` to a decoded value.

    ``custom_functions`` maps names to callables used by ``custom``
    transforms (looked up via ``FieldTransform.transform_fn``). A custom
    transform without a registered function leaves the value unchanged.
    """

    def __init__(self, custom_functions: Optional[Mapping[str, CustomFunction]] = None):
        self.custom_functions: Dict[str, CustomFunction] = dict(custom_functions or {})

    def register(self, name: str, func: CustomFunction) -> None:
        """Register a function for ``custom`` transforms."""
        self.custom_functions[name] = func

    def apply(self, decoded: StructuredValue, mapping: SchemaMapping) -> MappingResult:
        result = decoded
        fields_mapped = len(mapping.source_fields)
        fields_transformed = len(mapping.transforms)

        if mapping.source_fields and isinstance(decoded, dict):
            result = map_fields(decoded, mapping.source_fields)

        if mapping.transforms:
            result = self.apply_transforms(result, mapping.transforms)

        return MappingResult(
            data=result,
            fields_mapped=fields_mapped,
            fields_transformed=fields_transformed
        )

    def apply_transforms(self, data: StructuredValue, transforms: List[FieldTransform]) -> StructuredValue:
        """Run every transform over every record of a list; other shapes pass through."""
        if not isinstance(data, list):
            return data

        records = []
        for item in data:
            if not isinstance(item, dict):
                records.append(item)
                continue

            record = dict(item)
            for transform in transforms:
                if transform.source_field in record:
                    record[transform.target_field] = self.transform_value(
                        record[transform.source_field], transform
                    )
            records.append(record)
        return records

    def transform_value(self, value: Any, transform: FieldTransform) -> Any:
        transform_type = transform.transform_type

        if transform_type == TransformType.UPPERCASE:
            return value.upper() if isinstance(value, str) else value
        if transform_type == TransformType.LOWERCASE:
            return value.lower() if isinstance(value, str) else value
        if transform_type == TransformType.NUMBER:
            return to_number(value)
        if transform_type == TransformType.BOOLEAN:
            return to_boolean(value)
        if transform_type == TransformType.DATE:
            return to_iso_date(value)
        if transform_type == TransformType.CUSTOM:
            func = self.custom_functions.get(transform.transform_fn or "")
            return func(value) if func else value
        return value
