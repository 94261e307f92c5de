"""XML and CSV codecs for legacy payloads.

XML is parsed with ``defusedxml`` (entity expansion and external references
are refused) and decoded into the compact dict form common to XML-to-JSON
bridges:

- the root element is the single top-level key
- an element with only text becomes that string
- repeated child tags become lists
- attributes are grouped under ``"$"`` and text that sits next to children
  or attributes under ``"_"``
- namespace prefixes are kept as written (``soap:Envelope``)

CSV uses a fixed comma delimiter and the first row as header.
"""

import csv
import io
import json
import math
from typing import Any, Dict, List, Tuple, Union
import xml.etree.ElementTree as ET

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET
from defusedxml.ElementTree import ParseError as SafeParseError

from .base import DecodeError

CSV_DELIMITER = ","
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
XML_DEFAULT_ROOT = "root"
ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"

Payload = Union[str, bytes]


def _to_text(payload: Payload) -> str:
    if isinstance(payload, bytes):
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Payload is not valid UTF-8: {e}") from e
    return payload


# --------------------------------------------------------------------------
# XML
# --------------------------------------------------------------------------

def decode_xml(payload: Payload) -> Dict[str, Any]:
    """Decode an XML document into nested dicts, lists and strings."""
    data = payload.encode("utf-8") if isinstance(payload, str) else payload

    prefixes: Dict[str, str] = {}
    declarations: Dict[ET.Element, List[Tuple[str, str]]] = {}
    pending: List[Tuple[str, str]] = []
    root = None

    try:
        for event, item in SafeET.iterparse(io.BytesIO(data), events=("start-ns", "start")):
            if event == "start-ns":
                prefix, uri = item
                prefixes.setdefault(uri, prefix)
                pending.append(item)
                continue
            if root is None:
                root = item
            if pending:
                declarations[item] = pending
                pending = []
    except (SafeParseError, DefusedXmlException) as e:
        raise DecodeError(f"Malformed XML payload: {e}") from e

    if root is None:
        raise DecodeError("XML payload contains no root element")

    return {_qualify(root.tag, prefixes): _element_to_value(root, prefixes, declarations)}


def _qualify(name: str, prefixes: Dict[str, str]) -> str:
    """Turn ``{uri}local`` back into ``prefix:local``."""
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefix = prefixes.get(uri)
    return f"{prefix}:{local}" if prefix else local


def _element_to_value(
    elem: ET.Element,
    prefixes: Dict[str, str],
    declarations: Dict[ET.Element, List[Tuple[str, str]]]
) -> Any:
    attributes: Dict[str, str] = {}
    for prefix, uri in declarations.get(elem, []):
        attributes[f"xmlns:{prefix}" if prefix else "xmlns"] = uri
    for key, value in elem.attrib.items():
        attributes[_qualify(key, prefixes)] = value

    children = list(elem)
    if not children and not attributes:
        return elem.text or ""

    node: Dict[str, Any] = {}
    if attributes:
        node[ATTRIBUTES_KEY] = attributes

    text_chunks = [elem.text or ""]
    for child in children:
        key = _qualify(child.tag, prefixes)
        value = _element_to_value(child, prefixes, declarations)
        if key in node:
            if not isinstance(node[key], list):
                node[key] = [node[key]]
            node[key].append(value)
        else:
            node[key] = value
        text_chunks.append(child.tail or "")

    text = "".join(text_chunks).strip()
    if text:
        node[TEXT_KEY] = text
    return node


def encode_xml(value: Dict[str, Any]) -> str:
    """Encode a dict as an XML document.

    A dict with exactly one key names the root element; any other dict is
    wrapped in ``<root>``.
    """
    if len(value) == 1:
        root_name, content = next(iter(value.items()))
        if root_name in (ATTRIBUTES_KEY, TEXT_KEY) or isinstance(content, list):
            root_name, content = XML_DEFAULT_ROOT, value
    else:
        root_name, content = XML_DEFAULT_ROOT, value

    root = ET.Element(root_name)
    _fill_element(root, content)
    ET.indent(root)
    return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}"


def _fill_element(elem: ET.Element, content: Any) -> None:
    if content is None:
        return
    if isinstance(content, dict):
        for key, value in content.items():
            if key == ATTRIBUTES_KEY and isinstance(value, dict):
                for attr_name, attr_value in value.items():
                    elem.set(attr_name, _scalar_text(attr_value))
            elif key == TEXT_KEY:
                elem.text = _scalar_text(value)
            elif isinstance(value, list):
                for item in value:
                    _fill_element(ET.SubElement(elem, key), item)
            else:
                _fill_element(ET.SubElement(elem, key), value)
    elif isinstance(content, list):
        for item in content:
            _fill_element(ET.SubElement(elem, "item"), item)
    else:
        elem.text = _scalar_text(content)


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def unwrap_soap_body(value: Any) -> Any:
    """Return the contents of ``Envelope/Body`` from a decoded SOAP message.

    Values that are not SOAP envelopes are returned unchanged. Namespace
    declarations and other attributes on the Body element are dropped.
    """
    if not isinstance(value, dict) or len(value) != 1:
        return value

    root_name, envelope = next(iter(value.items()))
    if _local_name(root_name) != "Envelope" or not isinstance(envelope, dict):
        return value

    for key, body in envelope.items():
        if _local_name(key) == "Body":
            if isinstance(body, dict):
                return {k: v for k, v in body.items() if k != ATTRIBUTES_KEY}
            return body
    return value


def _local_name(name: str) -> str:
    return name.rsplit(":", 1)[-1]


# --------------------------------------------------------------------------
# CSV
# --------------------------------------------------------------------------

def decode_csv(payload: Payload) -> List[Dict[str, Any]]:
    """Decode CSV text into one dict per non-blank row, keyed by the header.

    Values are trimmed; rows shorter than the header get ``None`` for the
    missing trailing fields.
    """
    text = _to_text(payload)

    try:
        rows = [
            row for row in csv.reader(io.StringIO(text), delimiter=CSV_DELIMITER)
            if any(cell.strip() for cell in row)
        ]
    except csv.Error as e:
        raise DecodeError(f"Malformed CSV payload: {e}") from e

    if not rows:
        return []

    headers = [header.strip() for header in rows[0]]
    records: List[Dict[str, Any]] = []
    for row in rows[1:]:
        record: Dict[str, Any] = {}
        for idx, header in enumerate(headers):
            record[header] = row[idx].strip() if idx < len(row) else None
        records.append(record)
    return records


def encode_csv(records: List[Any]) -> str:
    """Encode a list of dicts as CSV.

    The header comes from the first record's keys. An empty list encodes to
    an empty string.
    """
    if not records:
        return ""

    first = records[0] if isinstance(records[0], dict) else {}
    headers = list(first.keys())

    lines = [CSV_DELIMITER.join(_quote_header(h) for h in headers)]
    for item in records:
        record = item if isinstance(item, dict) else {}
        lines.append(CSV_DELIMITER.join(_csv_cell(record.get(h)) for h in headers))
    return "\n".join(lines)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _quote_header(name: str) -> str:
    if any(ch in name for ch in (CSV_DELIMITER, '"', "\n", "\r")):
        return _quote(name)
    return name


def _csv_cell(value: Any) -> str:
    """Serialize one value: text, None and containers quoted, numbers bare, NaN as null."""
    if value is None:
        return '""'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return "null"
        return str(value)
    if isinstance(value, (dict, list)):
        return _quote(json.dumps(value, default=str))
    return _quote(str(value))
