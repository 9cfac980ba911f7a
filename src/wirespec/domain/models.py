from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


class EndpointMetadata(BaseModel):
    """Endpoint-level facts; not derived from field classification."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    name: str
    description: str = ""
    path: str
    rate_limited: bool = False
    requires_authentication: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class AttributeDecl(BaseModel):
    """
    One field annotation as it appears in a description.

    Word form (`path`) has no value; name/value form is `header = <name>`.
    In JSON a word is a bare string and a pair is a one-key object.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        if isinstance(data, dict) and len(data) == 1 and "name" not in data:
            ((k, v),) = data.items()
            return {"name": k, "value": v}
        return data

    @property
    def is_word(self) -> bool:
        return self.value is None

    def __str__(self) -> str:
        return self.name if self.value is None else f"{self.name} = {self.value}"


class FieldDecl(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    type: Any = "str"  # python type or type name ("int", "list[str]", "int?")
    attrs: list[AttributeDecl] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"field name must be an identifier, got {v!r}")
        return v


class EndpointDescription(BaseModel):
    """An endpoint as handed over by a front end: metadata plus raw field lists."""

    model_config = ConfigDict(frozen=True)

    metadata: EndpointMetadata
    request: list[FieldDecl] = Field(default_factory=list)
    response: list[FieldDecl] = Field(default_factory=list)
