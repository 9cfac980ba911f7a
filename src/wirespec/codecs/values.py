from __future__ import annotations

import json
import math
from typing import Any

from pydantic import TypeAdapter, ValidationError


def to_wire_string(adapter: TypeAdapter, value: Any) -> str:
    """
    String form of a value for a path segment, query value or header.

    Scalars render as their JSON scalar text without quotes (true, 42, 1.5);
    structured values render as compact JSON.
    """
    return render_item(value, adapter.dump_python(value, mode="json"))


def render_item(value: Any, dumped: Any) -> str:
    # JSON mode dumps inf/nan as null; keep their float text instead
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return render_dumped(dumped)


def render_dumped(dumped: Any) -> str:
    if isinstance(dumped, str):
        return dumped
    if isinstance(dumped, bool):
        return "true" if dumped else "false"
    if isinstance(dumped, (int, float)):
        return str(dumped)
    if dumped is None:
        return ""
    return json.dumps(dumped, separators=(",", ":"))


def from_wire_string(adapter: TypeAdapter, text: str) -> Any:
    """Inverse of `to_wire_string`; raises pydantic's ValidationError."""
    try:
        return adapter.validate_python(text)
    except ValidationError:
        if text[:1] in ("{", "["):
            try:
                return adapter.validate_json(text)
            except ValidationError:
                pass
        raise


def error_summary(exc: ValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return str(exc)
    first = errs[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    more = f" (+{len(errs) - 1} more)" if len(errs) > 1 else ""
    return f"{loc}: {msg}{more}" if loc else f"{msg}{more}"
