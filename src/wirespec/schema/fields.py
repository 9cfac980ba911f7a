from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class KindTag(str, Enum):
    BODY = "body"
    NEWTYPE_BODY = "newtype_body"
    HEADER = "header"
    PATH = "path"
    QUERY = "query"


@dataclass(frozen=True)
class Kind:
    """
    Wire location of a field. Resolved once by the classifier; everything
    downstream switches on `tag`.
    """

    tag: KindTag
    header_name: Optional[str] = None  # only for HEADER

    def __post_init__(self) -> None:
        if (self.tag is KindTag.HEADER) != (self.header_name is not None):
            raise ValueError("header_name is required for HEADER kind and only for it")

    @classmethod
    def header(cls, name: str) -> "Kind":
        return cls(KindTag.HEADER, name)

    def __str__(self) -> str:
        if self.tag is KindTag.HEADER:
            return f"header({self.header_name})"
        return self.tag.value


BODY = Kind(KindTag.BODY)
NEWTYPE_BODY = Kind(KindTag.NEWTYPE_BODY)
PATH = Kind(KindTag.PATH)
QUERY = Kind(KindTag.QUERY)


@dataclass(frozen=True)
class Field:
    name: str
    type: Any
    kind: Kind
    location: str = ""  # e.g. "request.foo"; used in error messages

    @property
    def is_body(self) -> bool:
        return self.kind.tag is KindTag.BODY

    @property
    def is_newtype_body(self) -> bool:
        return self.kind.tag is KindTag.NEWTYPE_BODY

    @property
    def is_header(self) -> bool:
        return self.kind.tag is KindTag.HEADER

    @property
    def is_path(self) -> bool:
        return self.kind.tag is KindTag.PATH

    @property
    def is_query(self) -> bool:
        return self.kind.tag is KindTag.QUERY

    def ref(self) -> str:
        return self.location or self.name
