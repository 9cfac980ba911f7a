from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from wirespec.codecs.path import PATH_ROOT, PathTemplate
from wirespec.domain.models import EndpointMetadata, FieldDecl
from wirespec.errors import (
    BodyFieldsOnGetMethod,
    DuplicateFieldName,
    DuplicatePlaceholder,
    ErrorCollector,
    InvalidPathTemplate,
    InvalidResponseFieldKind,
    MultipleNewtypeBodyFields,
    NewtypeAndBodyFields,
    OptionalPathField,
    PlaceholderFieldCountMismatch,
    UnknownPlaceholderField,
)
from wirespec.schema.classifier import classify_field
from wirespec.schema.fields import Field, KindTag
from wirespec.schema.types import allows_none

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Schema:
    """Ordered, classified fields of one side of an endpoint."""

    section: str
    fields: tuple[Field, ...]

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def field(self, name: str) -> Optional[Field]:
        return next((f for f in self.fields if f.name == name), None)

    def fields_of(self, tag: KindTag) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.kind.tag is tag)

    @property
    def body_fields(self) -> tuple[Field, ...]:
        return self.fields_of(KindTag.BODY)

    @property
    def header_fields(self) -> tuple[Field, ...]:
        return self.fields_of(KindTag.HEADER)

    @property
    def newtype_body_field(self) -> Optional[Field]:
        return next((f for f in self.fields if f.is_newtype_body), None)

    @property
    def has_body(self) -> bool:
        return bool(self.body_fields) or self.newtype_body_field is not None


@dataclass(frozen=True)
class RequestSchema(Schema):
    @property
    def path_fields(self) -> tuple[Field, ...]:
        return self.fields_of(KindTag.PATH)

    @property
    def query_fields(self) -> tuple[Field, ...]:
        return self.fields_of(KindTag.QUERY)

    @property
    def path_field_count(self) -> int:
        return len(self.path_fields)

    def path_field(self, name: str) -> Optional[Field]:
        """Exact-name lookup among path fields only."""
        return next((f for f in self.path_fields if f.name == name), None)


@dataclass(frozen=True)
class ResponseSchema(Schema):
    pass


_RESPONSE_KINDS = {KindTag.BODY, KindTag.NEWTYPE_BODY, KindTag.HEADER}


def _classify_all(decls: Iterable[FieldDecl], section: str, errors: ErrorCollector) -> tuple[Field, ...]:
    decls = list(decls)

    counts = Counter(d.name for d in decls)
    for name, n in counts.items():
        if n > 1:
            errors.add(
                DuplicateFieldName(f"field `{name}` declared {n} times", (f"{section}.{name}",))
            )

    out: list[Field] = []
    for d in decls:
        f = classify_field(d, section, errors)
        if f is not None:
            out.append(f)
    return tuple(out)


def _check_body_exclusivity(fields: tuple[Field, ...], section: str, errors: ErrorCollector) -> None:
    newtypes = [f for f in fields if f.is_newtype_body]
    if len(newtypes) > 1:
        errors.add(
            MultipleNewtypeBodyFields(
                f"there can only be one newtype body field in the {section}",
                tuple(f.ref() for f in newtypes),
            )
        )

    bodies = [f for f in fields if f.is_body]
    if newtypes and bodies:
        errors.add(
            NewtypeAndBodyFields(
                f"can't have both a newtype body field and regular body fields in the {section}",
                tuple(f.ref() for f in newtypes + bodies),
            )
        )


def _check_get_has_no_body(metadata: EndpointMetadata, fields: tuple[Field, ...], errors: ErrorCollector) -> None:
    if metadata.method != "GET":
        return
    # one issue per offending field; newtype last
    offending = [f for f in fields if f.is_body] + [f for f in fields if f.is_newtype_body]
    for f in offending:
        errors.add(BodyFieldsOnGetMethod("GET endpoints can't have body fields", (f.ref(),)))


def _check_path_template(
    metadata: EndpointMetadata, fields: tuple[Field, ...], errors: ErrorCollector
) -> Optional[PathTemplate]:
    if not metadata.path.startswith(PATH_ROOT):
        errors.add(InvalidPathTemplate(f"path needs to start with '{PATH_ROOT}': {metadata.path!r}"))
        template = PathTemplate.parse(PATH_ROOT + metadata.path)
    else:
        template = PathTemplate.parse(metadata.path)

    path_fields = [f for f in fields if f.is_path]
    for f in path_fields:
        # an empty segment can't be routed back to None
        if f.type is not Any and allows_none(f.type):
            errors.add(OptionalPathField(f"path field `{f.name}` can't be optional", (f.ref(),)))

    names = template.placeholder_names

    for name, n in Counter(names).items():
        if n > 1:
            errors.add(DuplicatePlaceholder(f"placeholder `:{name}` appears {n} times in {metadata.path!r}"))

    if len(names) != len(path_fields):
        errors.add(
            PlaceholderFieldCountMismatch(
                f"number of declared path parameters ({len(path_fields)}) needs to match "
                f"amount of placeholders in path ({len(names)})",
                tuple(f.ref() for f in path_fields),
            )
        )

    by_name = {f.name for f in path_fields}
    for name in dict.fromkeys(names):
        if name not in by_name:
            errors.add(
                UnknownPlaceholderField(
                    f"placeholder `:{name}` has no path field with that name",
                    (f"request.{name}",),
                )
            )
    return template


def build_request_schema(
    metadata: EndpointMetadata, decls: Iterable[FieldDecl], errors: ErrorCollector
) -> tuple[RequestSchema, Optional[PathTemplate]]:
    fields = _classify_all(decls, "request", errors)
    _check_body_exclusivity(fields, "request", errors)
    _check_get_has_no_body(metadata, fields, errors)
    template = _check_path_template(metadata, fields, errors)
    return RequestSchema(section="request", fields=fields), template


def build_response_schema(decls: Iterable[FieldDecl], errors: ErrorCollector) -> ResponseSchema:
    fields = _classify_all(decls, "response", errors)
    for f in fields:
        if f.kind.tag not in _RESPONSE_KINDS:
            errors.add(
                InvalidResponseFieldKind(
                    f"response fields can't use the `{f.kind}` kind, expected body or header",
                    (f.ref(),),
                )
            )
    _check_body_exclusivity(fields, "response", errors)
    return ResponseSchema(section="response", fields=fields)


def validate(
    metadata: EndpointMetadata,
    request: Iterable[FieldDecl],
    response: Iterable[FieldDecl],
) -> tuple[RequestSchema, ResponseSchema, PathTemplate]:
    """
    Classify and check both sides of an endpoint.

    Every violation across request and response is collected first; a single
    SchemaError listing all of them is raised if there are any.
    """
    errors = ErrorCollector(endpoint=metadata.name)

    request_schema, template = build_request_schema(metadata, request, errors)
    response_schema = build_response_schema(response, errors)

    if errors:
        logger.warning("endpoint %s rejected with %d schema issue(s)", metadata.name, len(errors))
    errors.raise_if_any()

    logger.debug(
        "endpoint %s: %d request field(s), %d response field(s)",
        metadata.name,
        request_schema.field_count,
        response_schema.field_count,
    )
    return request_schema, response_schema, template
