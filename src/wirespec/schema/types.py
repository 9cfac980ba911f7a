from __future__ import annotations

import re
import types
from typing import Any, List, Optional, Union, get_args, get_origin

_SCALARS: dict[str, Any] = {
    "str": str,
    "string": str,
    "int": int,
    "integer": int,
    "float": float,
    "number": float,
    "bool": bool,
    "boolean": bool,
    "object": dict[str, Any],
    "any": Any,
}

_LIST = re.compile(r"^list\[(.+)\]$")


def resolve_type(descriptor: Any) -> Any:
    """
    Turn a type descriptor into a python type.

    Python types (and typing constructs) pass through untouched. Strings use
    the small description-file grammar:
      str | int | float | bool | object | any
      list[<t>]
      <t>?        (optional)
    Raises ValueError for names that don't resolve.
    """
    if not isinstance(descriptor, str):
        return descriptor

    text = descriptor.strip()
    if not text:
        raise ValueError("empty type name")

    if text.endswith("?"):
        return Optional[resolve_type(text[:-1])]

    m = _LIST.match(text)
    if m:
        return List[resolve_type(m.group(1))]

    try:
        return _SCALARS[text.lower()]
    except KeyError:
        raise ValueError(f"unknown type name {descriptor!r}") from None


def allows_none(tp: Any) -> bool:
    if tp is Any or tp is None or tp is type(None):
        return True
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(tp)
    return False


def is_sequence_type(tp: Any) -> bool:
    """list/tuple/set types; used to decide repeated query keys."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        return any(is_sequence_type(a) for a in get_args(tp) if a is not type(None))
    return origin in (list, tuple, set, frozenset) or tp in (list, tuple, set, frozenset)


def type_label(tp: Any) -> str:
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return str(tp).replace("typing.", "")
