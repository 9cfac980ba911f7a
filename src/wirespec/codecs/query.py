from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel, TypeAdapter, ValidationError, create_model
from pydantic import Field as ModelField

from wirespec.codecs.values import error_summary, from_wire_string, render_item
from wirespec.errors import QueryDecodeError
from wirespec.schema.fields import Field
from wirespec.schema.types import allows_none, is_sequence_type

logger = logging.getLogger(__name__)


class QueryCodec:
    """
    Form-encodes the query fields of a request as one synthetic group.

    Keys are field names in declaration order; None values are left out.
    Sequence-typed fields use repeated keys.
    """

    def __init__(self, query_fields: Sequence[Field], model_name: str = "RequestQuery"):
        if not query_fields:
            raise ValueError("QueryCodec needs at least one query field")

        self.fields = tuple(query_fields)
        self._adapters = {f.name: TypeAdapter(f.type) for f in self.fields}
        self._sequence = {f.name for f in self.fields if is_sequence_type(f.type)}
        self.model: type[BaseModel] = create_model(
            model_name,
            **{f.name: (f.type, self._default(f)) for f in self.fields},
        )

    def _default(self, f: Field) -> Any:
        if allows_none(f.type):
            return None
        # an empty sequence encodes to no pairs at all
        if f.name in self._sequence:
            return ModelField(default_factory=list)
        return ...

    def encode(self, values: Mapping[str, Any]) -> str:
        pairs: list[tuple[str, str]] = []
        for f in self.fields:
            value = values.get(f.name)
            if value is None:
                continue
            dumped = self._adapters[f.name].dump_python(value, mode="json")
            if f.name in self._sequence:
                pairs.extend((f.name, render_item(item, d)) for item, d in zip(value, dumped))
            else:
                pairs.append((f.name, render_item(value, dumped)))
        return urlencode(pairs)

    def decode(self, query: Optional[str]) -> dict[str, Any]:
        query = query or ""
        grouped: dict[str, list[str]] = {}
        for k, v in parse_qsl(query, keep_blank_values=True):
            grouped.setdefault(k, []).append(v)

        data: dict[str, Any] = {}
        for f in self.fields:
            raw = grouped.get(f.name)
            if raw is None:
                continue
            if f.name in self._sequence:
                data[f.name] = raw
                continue
            if len(raw) > 1:
                raise QueryDecodeError(query, f"`{f.name}` given {len(raw)} times")
            try:
                data[f.name] = from_wire_string(self._adapters[f.name], raw[0])
            except ValidationError as e:
                raise QueryDecodeError(query, error_summary(e)) from e

        try:
            group = self.model.model_validate(data)
        except ValidationError as e:
            logger.debug("query %r rejected: %s", query, e)
            raise QueryDecodeError(query, error_summary(e)) from e
        return {f.name: getattr(group, f.name) for f in self.fields}
