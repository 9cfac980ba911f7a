from typing import List, Optional

from wirespec.domain.models import FieldDecl
from wirespec.errors import DuplicateKindAttribute, ErrorCollector, UnknownAttributeKey, UnknownTypeName
from wirespec.schema.classifier import classify_field, normalize_header_name
from wirespec.schema.fields import BODY, NEWTYPE_BODY, PATH, QUERY, Kind, KindTag
from wirespec.schema.types import allows_none, is_sequence_type, resolve_type


def classify(**kw):
    errors = ErrorCollector()
    field = classify_field(FieldDecl(**kw), "request", errors)
    return field, errors


def test_unannotated_field_defaults_to_body():
    f, errors = classify(name="foo", type="str")
    assert not errors
    assert f.kind == BODY
    assert f.type is str
    assert f.location == "request.foo"


def test_word_attributes_map_to_kinds():
    assert classify(name="a", attrs=["body"])[0].kind == NEWTYPE_BODY
    assert classify(name="a", attrs=["path"])[0].kind == PATH
    assert classify(name="a", attrs=["query"])[0].kind == QUERY


def test_header_attribute_keeps_header_name():
    f, errors = classify(name="content_type", attrs=[{"header": "Content-Type"}])
    assert not errors
    assert f.kind == Kind.header("Content-Type")
    assert f.kind.tag is KindTag.HEADER
    assert str(f.kind) == "header(Content-Type)"


def test_header_constant_names_are_normalized():
    assert normalize_header_name("CONTENT_TYPE") == "Content-Type"
    assert normalize_header_name("X_REQUEST_ID") == "X-Request-Id"
    assert normalize_header_name("x-custom") == "x-custom"

    f, _ = classify(name="ct", attrs=[{"header": "CONTENT_TYPE"}])
    assert f.kind.header_name == "Content-Type"


def test_more_than_one_kind_attribute_is_an_error():
    f, errors = classify(name="a", attrs=["path", "query"])
    assert f is None
    assert len(errors) == 1
    issue = errors.issues[0]
    assert isinstance(issue, DuplicateKindAttribute)
    assert issue.locations == ("request.a",)


def test_unknown_name_value_key_expects_header():
    f, errors = classify(name="a", attrs=[{"cookie": "session"}])
    assert f is None
    issue = errors.issues[0]
    assert isinstance(issue, UnknownAttributeKey)
    assert "expected `header`" in issue.message


def test_unknown_word_attribute_is_an_error():
    f, errors = classify(name="a", attrs=["fragment"])
    assert f is None
    assert isinstance(errors.issues[0], UnknownAttributeKey)


def test_unknown_type_name_is_reported_alongside_attribute_errors():
    f, errors = classify(name="a", type="uuid4", attrs=["nope"])
    assert f is None
    assert [type(i) for i in errors.issues] == [UnknownAttributeKey, UnknownTypeName]


def test_type_names():
    assert resolve_type("int") is int
    assert resolve_type("list[int]") == List[int]
    assert resolve_type("str?") == Optional[str]
    assert resolve_type(float) is float

    assert allows_none(resolve_type("int?"))
    assert not allows_none(int)
    assert is_sequence_type(resolve_type("list[str]"))
    assert is_sequence_type(resolve_type("list[str]?"))
    assert not is_sequence_type(str)
