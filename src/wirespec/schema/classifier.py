from __future__ import annotations

import re
from typing import Optional

from wirespec.domain.models import FieldDecl
from wirespec.errors import (
    DuplicateKindAttribute,
    ErrorCollector,
    UnknownAttributeKey,
    UnknownTypeName,
)
from wirespec.schema.fields import BODY, NEWTYPE_BODY, PATH, QUERY, Field, Kind
from wirespec.schema.types import resolve_type

_WORD_KINDS = {
    "body": NEWTYPE_BODY,
    "path": PATH,
    "query": QUERY,
}

_HEADER_CONSTANT = re.compile(r"^[A-Z][A-Z0-9]*(_[A-Z0-9]+)*$")


def normalize_header_name(value: str) -> str:
    """
    CONTENT_TYPE -> Content-Type; anything else is used verbatim.
    """
    value = value.strip()
    if _HEADER_CONSTANT.match(value):
        return "-".join(part.capitalize() for part in value.split("_"))
    return value


def _kind_from_attrs(decl: FieldDecl, location: str, errors: ErrorCollector) -> Optional[Kind]:
    if not decl.attrs:
        return BODY

    if len(decl.attrs) > 1:
        errors.add(
            DuplicateKindAttribute(
                "only one field-kind attribute per field, found "
                + ", ".join(f"`{a}`" for a in decl.attrs),
                (location,),
            )
        )
        return None

    attr = decl.attrs[0]
    if attr.is_word:
        kind = _WORD_KINDS.get(attr.name)
        if kind is None:
            errors.add(
                UnknownAttributeKey(
                    f"invalid attribute `{attr.name}`, expected one of `body`, `path`, `query`",
                    (location,),
                )
            )
        return kind

    if attr.name != "header":
        errors.add(
            UnknownAttributeKey(
                f"invalid attribute `{attr.name}` with value, expected `header`",
                (location,),
            )
        )
        return None

    header_name = normalize_header_name(attr.value or "")
    if not header_name:
        errors.add(UnknownAttributeKey("`header` attribute needs a header name", (location,)))
        return None
    return Kind.header(header_name)


def classify_field(decl: FieldDecl, section: str, errors: ErrorCollector) -> Optional[Field]:
    """
    Resolve one declared field into a classified Field.

    Issues go to `errors`; returns None when the field could not be classified
    so later checks can still run over the rest of the schema.
    """
    location = f"{section}.{decl.name}"
    kind = _kind_from_attrs(decl, location, errors)

    try:
        tp = resolve_type(decl.type)
    except ValueError as e:
        errors.add(UnknownTypeName(str(e), (location,)))
        return None

    if kind is None:
        return None
    return Field(name=decl.name, type=tp, kind=kind, location=location)
