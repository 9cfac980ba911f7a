from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Sequence

from pydantic import TypeAdapter, ValidationError

from wirespec.codecs.envelope import get_header
from wirespec.codecs.values import error_summary, from_wire_string, to_wire_string
from wirespec.errors import HeaderParseError, InvalidHeaderValue, MissingHeader
from wirespec.schema.fields import Field
from wirespec.schema.types import allows_none

_FORBIDDEN = ("\r", "\n", "\x00")


class HeaderCodec:
    """Per-field header binding, keyed by the header name from the field's kind."""

    def __init__(self, header_fields: Sequence[Field]):
        for f in header_fields:
            if not f.is_header:
                raise ValueError(f"{f.ref()} is not a header field")

        self.fields = tuple(header_fields)
        self._adapters = {f.name: TypeAdapter(f.type) for f in self.fields}
        self._optional = {f.name for f in self.fields if allows_none(f.type)}

    def encode(self, values: Mapping[str, Any], headers: MutableMapping[str, str]) -> None:
        for f in self.fields:
            header_name = f.kind.header_name
            value = values.get(f.name)
            if value is None and f.name in self._optional:
                continue

            text = to_wire_string(self._adapters[f.name], value)
            if any(c in text for c in _FORBIDDEN):
                raise InvalidHeaderValue(header_name, text)

            # replace any differently-cased default (e.g. content-type)
            for existing in [k for k in headers if k.lower() == header_name.lower()]:
                del headers[existing]
            headers[header_name] = text

    def decode(self, headers: Mapping[str, str]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in self.fields:
            header_name = f.kind.header_name
            raw = get_header(headers, header_name)
            if raw is None:
                if f.name in self._optional:
                    out[f.name] = None
                    continue
                raise MissingHeader(header_name)

            try:
                out[f.name] = from_wire_string(self._adapters[f.name], raw)
            except ValidationError as e:
                raise HeaderParseError(header_name, raw, error_summary(e)) from e
        return out
