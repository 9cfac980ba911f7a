import math
from typing import List, Optional

import pytest

from wirespec.codecs.body import BodyCodec, BodyMode
from wirespec.codecs.headers import HeaderCodec
from wirespec.codecs.query import QueryCodec
from wirespec.errors import (
    BodyDeserializeError,
    HeaderParseError,
    InvalidHeaderValue,
    MissingHeader,
    QueryDecodeError,
)
from wirespec.schema.fields import BODY, NEWTYPE_BODY, QUERY, Field, Kind


def f(name, tp=str, kind=BODY):
    return Field(name=name, type=tp, kind=kind, location=f"request.{name}")


# ----------------------------
# query
# ----------------------------


def test_query_encode_in_declaration_order():
    codec = QueryCodec([f("limit", int, QUERY), f("tags", List[str], QUERY), f("since", Optional[str], QUERY)])
    assert codec.encode({"limit": 10, "tags": ["a", "b"], "since": None}) == "limit=10&tags=a&tags=b"


def test_query_form_encoding_round_trip():
    codec = QueryCodec([f("q", str, QUERY), f("exact", bool, QUERY)])
    values = {"q": "hi there & more", "exact": False}
    encoded = codec.encode(values)
    assert encoded == "q=hi+there+%26+more&exact=false"
    assert codec.decode(encoded) == values


def test_query_decode_defaults_optional_fields():
    codec = QueryCodec([f("limit", int, QUERY), f("since", Optional[str], QUERY)])
    assert codec.decode("limit=5&unrelated=1") == {"limit": 5, "since": None}


def test_query_decode_errors():
    codec = QueryCodec([f("limit", int, QUERY)])
    with pytest.raises(QueryDecodeError):
        codec.decode("limit=many")
    with pytest.raises(QueryDecodeError):
        codec.decode("")
    with pytest.raises(QueryDecodeError):
        codec.decode("limit=1&limit=2")


def test_query_empty_sequence_round_trip():
    codec = QueryCodec([f("tags", List[str], QUERY)])
    assert codec.encode({"tags": []}) == ""
    assert codec.decode("") == {"tags": []}


def test_query_non_finite_floats():
    codec = QueryCodec([f("scale", float, QUERY), f("weights", List[float], QUERY)])
    encoded = codec.encode({"scale": float("-inf"), "weights": [1.5, float("inf")]})
    assert encoded == "scale=-inf&weights=1.5&weights=inf"
    assert codec.decode(encoded) == {"scale": float("-inf"), "weights": [1.5, float("inf")]}


# ----------------------------
# headers
# ----------------------------


def test_header_encode_and_case_insensitive_decode():
    codec = HeaderCodec([f("ct", str, Kind.header("Content-Type")), f("count", int, Kind.header("X-Count"))])
    headers = {}
    codec.encode({"ct": "text/plain", "count": 3}, headers)
    assert headers == {"Content-Type": "text/plain", "X-Count": "3"}

    assert codec.decode({"content-type": "text/plain", "x-count": "3"}) == {"ct": "text/plain", "count": 3}


def test_header_overrides_default_with_other_casing():
    codec = HeaderCodec([f("ct", str, Kind.header("content-type"))])
    headers = {"Content-Type": "application/json"}
    codec.encode({"ct": "text/plain"}, headers)
    assert headers == {"content-type": "text/plain"}


def test_missing_header_is_an_error():
    codec = HeaderCodec([f("ct", str, Kind.header("Content-Type"))])
    with pytest.raises(MissingHeader) as e:
        codec.decode({})
    assert e.value.header_name == "Content-Type"


def test_optional_header_may_be_absent():
    codec = HeaderCodec([f("etag", Optional[str], Kind.header("ETag"))])
    headers = {}
    codec.encode({"etag": None}, headers)
    assert headers == {}
    assert codec.decode({}) == {"etag": None}


def test_header_parse_error():
    codec = HeaderCodec([f("count", int, Kind.header("X-Count"))])
    with pytest.raises(HeaderParseError) as e:
        codec.decode({"X-Count": "lots"})
    assert e.value.header_name == "X-Count"
    assert e.value.value == "lots"


def test_header_value_with_newline_is_rejected():
    codec = HeaderCodec([f("v", str, Kind.header("X-Value"))])
    with pytest.raises(InvalidHeaderValue):
        codec.encode({"v": "a\r\nInjected: 1"}, {})


def test_header_nan_keeps_its_text():
    codec = HeaderCodec([f("ratio", float, Kind.header("X-Ratio"))])
    headers = {}
    codec.encode({"ratio": float("nan")}, headers)
    assert headers == {"X-Ratio": "nan"}
    assert math.isnan(codec.decode(headers)["ratio"])


# ----------------------------
# body
# ----------------------------


def test_empty_body_mode():
    codec = BodyCodec([])
    assert codec.mode is BodyMode.EMPTY
    assert codec.encode({}) == b""
    assert codec.decode(b"definitely not json") == {}


def test_newtype_body_is_the_whole_payload():
    codec = BodyCodec([], f("events", List[str], NEWTYPE_BODY))
    assert codec.mode is BodyMode.NEWTYPE
    payload = codec.encode({"events": ["a", "b"]})
    assert payload == b'["a","b"]'
    assert codec.decode(payload) == {"events": ["a", "b"]}


def test_aggregate_body_packs_fields_by_name():
    codec = BodyCodec([f("msgtype"), f("count", int)])
    assert codec.mode is BodyMode.AGGREGATE
    payload = codec.encode({"msgtype": "m.text", "count": 2})
    assert payload == b'{"msgtype":"m.text","count":2}'
    assert codec.decode(payload) == {"msgtype": "m.text", "count": 2}


def test_body_deserialize_errors():
    with pytest.raises(BodyDeserializeError):
        BodyCodec([f("a")]).decode(b"{not json")
    with pytest.raises(BodyDeserializeError):
        BodyCodec([f("a")]).decode(b'{"b": 1}')
    with pytest.raises(BodyDeserializeError):
        BodyCodec([], f("n", int, NEWTYPE_BODY)).decode(b'"x"')


def test_body_modes_are_exclusive():
    with pytest.raises(ValueError):
        BodyCodec([f("a")], f("n", int, NEWTYPE_BODY))
