import math

import pytest

from wirespec.codecs.path import LiteralSegment, PathCodec, PathTemplate, Placeholder
from wirespec.domain.models import EndpointMetadata, FieldDecl
from wirespec.errors import PathSegmentDecodeError, SchemaError
from wirespec.schema.fields import PATH, Field
from wirespec.schema.validator import validate


def path_field(name, tp=str):
    return Field(name=name, type=tp, kind=PATH, location=f"request.{name}")


def test_parse_template_segments():
    t = PathTemplate.parse("/_matrix/client/rooms/:room_id/state")
    assert t.segments == (
        LiteralSegment("_matrix"),
        LiteralSegment("client"),
        LiteralSegment("rooms"),
        Placeholder("room_id"),
        LiteralSegment("state"),
    )
    assert t.placeholder_names == ("room_id",)


def test_parse_requires_root():
    with pytest.raises(ValueError):
        PathTemplate.parse("rooms/:id")


def test_encode_follows_template_order_not_field_order():
    t = PathTemplate.parse("/rooms/:room_id/event/:event_id")
    codec = PathCodec(t, [path_field("event_id"), path_field("room_id")])
    assert codec.encode({"event_id": "e1", "room_id": "r1"}) == "/rooms/r1/event/e1"


def test_encode_percent_encodes_each_segment():
    t = PathTemplate.parse("/rooms/:room_id")
    codec = PathCodec(t, [path_field("room_id")])
    assert codec.encode({"room_id": "!abc:example.org"}) == "/rooms/%21abc%3Aexample.org"
    assert codec.encode({"room_id": "a/b c"}) == "/rooms/a%2Fb%20c"


def test_decode_percent_decodes_and_parses_types():
    t = PathTemplate.parse("/rooms/:room_id/limit/:limit")
    codec = PathCodec(t, [path_field("room_id"), path_field("limit", int)])
    assert codec.decode("/rooms/%21abc%3Aexample.org/limit/25") == {
        "room_id": "!abc:example.org",
        "limit": 25,
    }


def test_decode_bad_segment_names_the_field():
    t = PathTemplate.parse("/items/:item_id")
    codec = PathCodec(t, [path_field("item_id", int)])
    with pytest.raises(PathSegmentDecodeError) as e:
        codec.decode("/items/abc")
    assert e.value.field_name == "item_id"
    assert e.value.segment == "abc"


def test_decode_missing_segment():
    t = PathTemplate.parse("/items/:item_id")
    codec = PathCodec(t, [path_field("item_id")])
    with pytest.raises(PathSegmentDecodeError) as e:
        codec.decode("/")
    # "/" splits into one empty segment; item_id sits at index 1
    assert e.value.segment is None


def test_codec_rejects_unmatched_fields():
    t = PathTemplate.parse("/items/:item_id")
    with pytest.raises(ValueError):
        PathCodec(t, [path_field("other")])


def test_bool_and_float_segments_round_trip():
    t = PathTemplate.parse("/flags/:on/:ratio")
    codec = PathCodec(t, [path_field("on", bool), path_field("ratio", float)])
    encoded = codec.encode({"on": True, "ratio": 0.5})
    assert encoded == "/flags/true/0.5"
    assert codec.decode(encoded) == {"on": True, "ratio": 0.5}


def test_non_finite_float_segments_round_trip():
    t = PathTemplate.parse("/scale/:factor")
    codec = PathCodec(t, [path_field("factor", float)])

    assert codec.encode({"factor": float("inf")}) == "/scale/inf"
    assert codec.decode("/scale/inf") == {"factor": float("inf")}

    encoded = codec.encode({"factor": float("nan")})
    assert encoded == "/scale/nan"
    assert math.isnan(codec.decode(encoded)["factor"])


def test_optional_path_field_is_a_schema_error():
    with pytest.raises(SchemaError) as e:
        validate(
            EndpointMetadata(method="GET", name="ep", path="/items/:item_id"),
            [FieldDecl(name="item_id", type="int?", attrs=["path"])],
            [],
        )
    assert e.value.codes() == ["optional-path-field"]
    assert e.value.issues[0].locations == ("request.item_id",)
