from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, create_model

from wirespec.codecs.body import BodyCodec
from wirespec.codecs.envelope import RawHttpRequest, RawHttpResponse
from wirespec.codecs.headers import HeaderCodec
from wirespec.codecs.path import PathCodec, PathTemplate
from wirespec.codecs.query import QueryCodec
from wirespec.config import CompilerConfig
from wirespec.domain.models import EndpointDescription, EndpointMetadata
from wirespec.errors import HttpStatusError
from wirespec.schema.fields import Field
from wirespec.schema.types import allows_none, type_label
from wirespec.schema.validator import RequestSchema, ResponseSchema, Schema, validate

logger = logging.getLogger(__name__)

_SAFE = re.compile(r"[^a-zA-Z0-9]+")


def _type_prefix(name: str) -> str:
    # some_endpoint -> SomeEndpoint
    parts = [p for p in _SAFE.split(name) if p]
    return "".join(p[:1].upper() + p[1:] for p in parts) or "Endpoint"


def _value_model(type_name: str, schema: Schema, doc: str) -> type[BaseModel]:
    return create_model(
        type_name,
        __config__=ConfigDict(extra="forbid"),
        __doc__=doc,
        **{f.name: (f.type, None if allows_none(f.type) else ...) for f in schema.fields},
    )


class Endpoint:
    """
    Compiled endpoint: the Request/Response value types plus the four
    conversions to and from raw HTTP envelopes.

    Stateless after construction; every conversion is reentrant.
    """

    def __init__(
        self,
        metadata: EndpointMetadata,
        request_schema: RequestSchema,
        response_schema: ResponseSchema,
        template: PathTemplate,
        config: Optional[CompilerConfig] = None,
    ):
        self.metadata = metadata
        self.request_schema = request_schema
        self.response_schema = response_schema
        self.template = template
        self.config = config or CompilerConfig()

        prefix = _type_prefix(metadata.name)
        self.request_type = _value_model(
            f"{prefix}Request",
            request_schema,
            f"Data for a request to the `{metadata.name}` API endpoint.\n\n{metadata.description}".rstrip(),
        )
        self.response_type = _value_model(
            f"{prefix}Response",
            response_schema,
            f"Data in the response from the `{metadata.name}` API endpoint.",
        )

        self._path = PathCodec(template, request_schema.path_fields)
        self._query = QueryCodec(request_schema.query_fields, f"{prefix}RequestQuery") if request_schema.query_fields else None
        self._request_headers = HeaderCodec(request_schema.header_fields)
        self._request_body = BodyCodec(
            request_schema.body_fields, request_schema.newtype_body_field, f"{prefix}RequestBody"
        )
        self._response_headers = HeaderCodec(response_schema.header_fields)
        self._response_body = BodyCodec(
            response_schema.body_fields, response_schema.newtype_body_field, f"{prefix}ResponseBody"
        )

        logger.debug(
            "compiled %s %s (%s): request body=%s, response body=%s",
            metadata.method,
            metadata.path,
            metadata.name,
            self._request_body.mode.value,
            self._response_body.mode.value,
        )

    def __repr__(self) -> str:
        return f"<Endpoint {self.metadata.name}: {self.metadata.method} {self.metadata.path}>"

    @property
    def request_body_mode(self) -> str:
        return self._request_body.mode.value

    @property
    def response_body_mode(self) -> str:
        return self._response_body.mode.value

    # ----------------------------
    # Request
    # ----------------------------

    def _coerce(self, value: Any, model: type[BaseModel]) -> BaseModel:
        if isinstance(value, model):
            return value
        if isinstance(value, Mapping):
            return model.model_validate(value)
        raise TypeError(f"expected {model.__name__} or a mapping, got {type(value).__name__}")

    @staticmethod
    def _values(value: BaseModel, schema: Schema) -> dict[str, Any]:
        return {f.name: getattr(value, f.name) for f in schema.fields}

    def encode_request(self, request: Union[BaseModel, Mapping[str, Any]]) -> RawHttpRequest:
        values = self._values(self._coerce(request, self.request_type), self.request_schema)

        path = self._path.encode(values) if self._path.has_fields else self.template.raw
        query = self._query.encode(values) if self._query is not None else None
        body = self._request_body.encode(values)

        headers: dict[str, str] = {}
        if not self._request_body.is_empty:
            headers["Content-Type"] = self.config.content_type
        self._request_headers.encode(values, headers)

        return RawHttpRequest(
            method=self.metadata.method,
            path=path,
            query=query,
            headers=headers,
            body=body,
        )

    def decode_request(self, raw: RawHttpRequest) -> BaseModel:
        data: dict[str, Any] = {}
        if self._path.has_fields:
            data.update(self._path.decode(raw.path))
        if self._query is not None:
            data.update(self._query.decode(raw.query))
        data.update(self._request_headers.decode(raw.headers))
        data.update(self._request_body.decode(raw.body))
        return self.request_type.model_validate(data)

    # ----------------------------
    # Response
    # ----------------------------

    def encode_response(
        self, response: Union[BaseModel, Mapping[str, Any]], status: Optional[int] = None
    ) -> RawHttpResponse:
        values = self._values(self._coerce(response, self.response_type), self.response_schema)

        headers: dict[str, str] = {"Content-Type": self.config.content_type}
        self._response_headers.encode(values, headers)

        return RawHttpResponse(
            status=self.config.default_response_status if status is None else status,
            headers=headers,
            body=self._response_body.encode(values),
        )

    def decode_response(self, raw: RawHttpResponse) -> BaseModel:
        # non-success never touches headers or body
        if not self.config.is_success(raw.status):
            raise HttpStatusError(raw.status)

        data: dict[str, Any] = {}
        data.update(self._response_headers.decode(raw.headers))
        data.update(self._response_body.decode(raw.body))
        return self.response_type.model_validate(data)

    # ----------------------------
    # Discovery
    # ----------------------------

    def describe(self) -> dict[str, Any]:
        """Plain descriptor for routers and tooling."""
        m = self.metadata
        return {
            "name": m.name,
            "method": m.method,
            "path": m.path,
            "description": m.description,
            "rate_limited": m.rate_limited,
            "requires_authentication": m.requires_authentication,
            "placeholders": list(self.template.placeholder_names),
            "request": {
                "body_mode": self.request_body_mode,
                "fields": [_field_row(f) for f in self.request_schema.fields],
            },
            "response": {
                "body_mode": self.response_body_mode,
                "fields": [_field_row(f) for f in self.response_schema.fields],
            },
        }


def _field_row(f: Field) -> dict[str, Any]:
    return {"name": f.name, "type": type_label(f.type), "kind": str(f.kind)}


def compile_endpoint(
    description: Union[EndpointDescription, Mapping[str, Any]],
    config: Optional[CompilerConfig] = None,
) -> Endpoint:
    """
    Validate an endpoint description and build its codecs.

    Raises SchemaError listing every problem found; nothing is built until
    the description is clean.
    """
    if not isinstance(description, EndpointDescription):
        description = EndpointDescription.model_validate(description)

    request_schema, response_schema, template = validate(
        description.metadata, description.request, description.response
    )
    return Endpoint(description.metadata, request_schema, response_schema, template, config)
