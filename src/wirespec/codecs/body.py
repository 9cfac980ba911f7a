from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError, create_model

from wirespec.codecs.values import error_summary
from wirespec.errors import BodyDeserializeError
from wirespec.schema.fields import Field
from wirespec.schema.types import allows_none

logger = logging.getLogger(__name__)


class BodyMode(str, Enum):
    EMPTY = "empty"
    NEWTYPE = "newtype"
    AGGREGATE = "aggregate"


class BodyCodec:
    """
    JSON body for one schema, in exactly one mode:

      EMPTY      no body fields; encodes to b"" and ignores incoming bytes
      NEWTYPE    one field is the whole body, no wrapping object
      AGGREGATE  all body fields packed into one object, keyed by field name
    """

    def __init__(
        self,
        body_fields: Sequence[Field],
        newtype_field: Optional[Field] = None,
        model_name: str = "Body",
    ):
        if newtype_field is not None and body_fields:
            raise ValueError("newtype body field and body fields are mutually exclusive")

        self.fields = tuple(body_fields)
        self.newtype_field = newtype_field
        self.model: Optional[type[BaseModel]] = None
        self._adapter: Optional[TypeAdapter] = None

        if newtype_field is not None:
            self.mode = BodyMode.NEWTYPE
            self._adapter = TypeAdapter(newtype_field.type)
        elif self.fields:
            self.mode = BodyMode.AGGREGATE
            self.model = create_model(
                model_name,
                **{f.name: (f.type, None if allows_none(f.type) else ...) for f in self.fields},
            )
        else:
            self.mode = BodyMode.EMPTY

    @property
    def is_empty(self) -> bool:
        return self.mode is BodyMode.EMPTY

    def encode(self, values: Mapping[str, Any]) -> bytes:
        if self.mode is BodyMode.EMPTY:
            return b""
        if self.mode is BodyMode.NEWTYPE:
            return self._adapter.dump_json(values[self.newtype_field.name])

        body = self.model.model_validate({f.name: values.get(f.name) for f in self.fields})
        return body.model_dump_json().encode("utf-8")

    def decode(self, payload: bytes) -> dict[str, Any]:
        if self.mode is BodyMode.EMPTY:
            return {}

        try:
            if self.mode is BodyMode.NEWTYPE:
                return {self.newtype_field.name: self._adapter.validate_json(payload)}
            body = self.model.model_validate_json(payload)
        except ValidationError as e:
            logger.debug("body rejected (%d bytes): %s", len(payload), e)
            raise BodyDeserializeError(error_summary(e)) from e

        return {f.name: getattr(body, f.name) for f in self.fields}
