from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union
from urllib.parse import quote, unquote

from pydantic import TypeAdapter, ValidationError

from wirespec.codecs.values import error_summary, from_wire_string, to_wire_string
from wirespec.errors import PathSegmentDecodeError
from wirespec.schema.fields import Field

logger = logging.getLogger(__name__)

PATH_ROOT = "/"
PLACEHOLDER_MARKER = ":"


@dataclass(frozen=True)
class LiteralSegment:
    text: str


@dataclass(frozen=True)
class Placeholder:
    name: str


Segment = Union[LiteralSegment, Placeholder]


@dataclass(frozen=True)
class PathTemplate:
    raw: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, template: str) -> "PathTemplate":
        """
        /rooms/:room_id/state -> (Literal rooms, Placeholder room_id, Literal state)

        The template must start at the path root; everything else is
        checked by the schema validator.
        """
        if not template.startswith(PATH_ROOT):
            raise ValueError(f"path template must start with '{PATH_ROOT}': {template!r}")

        segments: list[Segment] = []
        for seg in template[len(PATH_ROOT):].split("/"):
            if seg.startswith(PLACEHOLDER_MARKER):
                segments.append(Placeholder(seg[len(PLACEHOLDER_MARKER):]))
            else:
                segments.append(LiteralSegment(seg))
        return cls(raw=template, segments=tuple(segments))

    @property
    def placeholders(self) -> tuple[Placeholder, ...]:
        return tuple(s for s in self.segments if isinstance(s, Placeholder))

    @property
    def placeholder_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.placeholders)


def split_path(path: str) -> list[str]:
    if path.startswith(PATH_ROOT):
        path = path[len(PATH_ROOT):]
    return path.split("/")


class PathCodec:
    """
    Binds path fields to template placeholders.

    Built only after the validator has confirmed every placeholder has a
    same-named path field and the counts match.
    """

    def __init__(self, template: PathTemplate, path_fields: Sequence[Field]):
        by_name = {f.name: f for f in path_fields}
        missing = [n for n in template.placeholder_names if n not in by_name]
        if missing or len(by_name) != len(template.placeholders):
            raise ValueError(
                f"path fields {sorted(by_name)} do not match placeholders {list(template.placeholder_names)}"
            )

        self.template = template
        self._fields = by_name
        self._adapters = {name: TypeAdapter(f.type) for name, f in by_name.items()}

    @property
    def has_fields(self) -> bool:
        return bool(self._fields)

    def encode(self, values: Mapping[str, Any]) -> str:
        """Concrete path in template order, regardless of field declaration order."""
        parts: list[str] = []
        for seg in self.template.segments:
            if isinstance(seg, LiteralSegment):
                parts.append(seg.text)
                continue
            text = to_wire_string(self._adapters[seg.name], values[seg.name])
            parts.append(quote(text, safe=""))
        return PATH_ROOT + "/".join(parts)

    def decode(self, path: str) -> dict[str, Any]:
        actual = split_path(path)
        out: dict[str, Any] = {}

        for i, seg in enumerate(self.template.segments):
            if not isinstance(seg, Placeholder):
                continue
            if i >= len(actual):
                raise PathSegmentDecodeError(seg.name, None)

            decoded = unquote(actual[i])
            try:
                out[seg.name] = from_wire_string(self._adapters[seg.name], decoded)
            except ValidationError as e:
                logger.debug("path segment %r rejected for %s", decoded, seg.name)
                raise PathSegmentDecodeError(seg.name, decoded, error_summary(e)) from e
        return out
