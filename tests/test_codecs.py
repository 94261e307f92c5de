"""Tests for the XML and CSV codecs."""

import pytest

from legacy_adapter.adapter.base import DecodeError
from legacy_adapter.adapter.codecs import (
    decode_csv,
    decode_xml,
    encode_csv,
    encode_xml,
    unwrap_soap_body,
)

SOAP_MESSAGE = """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Header/>
  <soap:Body>
    <GetCustomerResponse>
      <id>42</id>
      <name>Ada</name>
    </GetCustomerResponse>
  </soap:Body>
</soap:Envelope>
"""


class TestCSV:
    """CSV decode/encode behaviour."""

    def test_decode_uses_header_row(self):
        records = decode_csv("id,name\n1,Ada\n2,Grace\n")
        assert records == [{"id": "1", "name": "Ada"}, {"id": "2", "name": "Grace"}]

    def test_decode_trims_values_and_skips_blank_lines(self):
        records = decode_csv(" id , name \n\n 1 ,  Ada  \n   \n")
        assert records == [{"id": "1", "name": "Ada"}]

    def test_decode_short_row_fills_none(self):
        records = decode_csv("a,b,c\n1,2\n")
        assert records == [{"a": "1", "b": "2", "c": None}]

    def test_decode_empty(self):
        assert decode_csv("") == []
        assert decode_csv("\n\n") == []

    def test_decode_header_only(self):
        assert decode_csv("a,b\n") == []

    def test_decode_quoted_fields(self):
        records = decode_csv('name,city\n"Lovelace, Ada","London"\n')
        assert records == [{"name": "Lovelace, Ada", "city": "London"}]

    def test_decode_bytes(self):
        assert decode_csv(b"a\n1\n") == [{"a": "1"}]

    def test_encode(self):
        text = encode_csv([{"a": "1", "b": 2}, {"a": None, "b": True}])
        assert text == 'a,b\n"1",2\n"",true'

    def test_encode_missing_and_non_finite_values(self):
        text = encode_csv([{"a": None, "b": float("nan"), "c": float("inf"), "d": 1.5}])
        assert text == 'a,b,c,d\n"",null,null,1.5'

    def test_encode_empty(self):
        assert encode_csv([]) == ""

    def test_encode_uses_first_record_keys(self):
        text = encode_csv([{"a": "x"}, {"a": "y", "extra": "z"}])
        assert text == 'a\n"x"\n"y"'

    def test_round_trip(self):
        records = [{"a": "1", "b": "2"}]
        assert decode_csv(encode_csv(records)) == records

    def test_round_trip_with_quotes_and_commas(self):
        records = [{"note": 'say "hi", then leave'}]
        assert decode_csv(encode_csv(records)) == records


class TestXML:
    """XML decode/encode behaviour."""

    def test_decode_simple(self):
        value = decode_xml("<customer><id>1</id><name>Ada</name></customer>")
        assert value == {"customer": {"id": "1", "name": "Ada"}}

    def test_decode_repeated_children_become_list(self):
        value = decode_xml("<items><item>a</item><item>b</item></items>")
        assert value == {"items": {"item": ["a", "b"]}}

    def test_decode_attributes_and_text(self):
        value = decode_xml('<price currency="EUR">10.5</price>')
        assert value == {"price": {"$": {"currency": "EUR"}, "_": "10.5"}}

    def test_decode_empty_element(self):
        assert decode_xml("<root><empty/></root>") == {"root": {"empty": ""}}

    def test_decode_bytes(self):
        assert decode_xml(b"<a>1</a>") == {"a": "1"}

    def test_decode_keeps_namespace_prefixes(self):
        value = decode_xml(SOAP_MESSAGE)
        envelope = value["soap:Envelope"]
        assert envelope["$"] == {"xmlns:soap": "http://schemas.xmlsoap.org/soap/envelope/"}
        assert envelope["soap:Body"]["GetCustomerResponse"] == {"id": "42", "name": "Ada"}

    def test_decode_malformed(self):
        with pytest.raises(DecodeError):
            decode_xml("<open><unclosed></open>")

    def test_decode_empty_payload(self):
        with pytest.raises(DecodeError):
            decode_xml("")

    def test_decode_rejects_entity_expansion(self):
        payload = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE bomb [<!ENTITY a "aaaaaaaa">]>'
            "<bomb>&a;</bomb>"
        )
        with pytest.raises(DecodeError):
            decode_xml(payload)

    def test_encode_single_root(self):
        text = encode_xml({"customer": {"id": 1, "active": True, "note": None}})
        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<customer>" in text
        assert "<id>1</id>" in text
        assert "<active>true</active>" in text
        assert "<note />" in text

    def test_encode_wraps_multiple_keys(self):
        text = encode_xml({"a": "1", "b": "2"})
        assert "<root>" in text
        assert "<a>1</a>" in text

    def test_encode_lists_and_attributes(self):
        text = encode_xml({"items": {"$": {"count": 2}, "item": ["x", "y"]}})
        assert '<items count="2">' in text
        assert text.count("<item>") == 2

    def test_round_trip(self):
        value = {"order": {"$": {"id": "7"}, "line": ["a", "b"], "total": "3"}}
        assert decode_xml(encode_xml(value)) == value


class TestSoapUnwrap:
    """Opt-in SOAP body extraction."""

    def test_unwrap_body(self):
        value = unwrap_soap_body(decode_xml(SOAP_MESSAGE))
        assert value == {"GetCustomerResponse": {"id": "42", "name": "Ada"}}

    def test_non_envelope_unchanged(self):
        value = {"customer": {"id": "1"}}
        assert unwrap_soap_body(value) is value
