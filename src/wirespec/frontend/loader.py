from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from wirespec.codecs.values import error_summary
from wirespec.domain.models import EndpointDescription
from wirespec.errors import DescriptionError


def parse_descriptions(data: Any, source: Optional[str] = None) -> list[EndpointDescription]:
    """
    Accepts one description object, a list of them, or {"endpoints": [...]}.
    """
    if isinstance(data, dict) and "endpoints" in data:
        data = data["endpoints"]
    items = data if isinstance(data, list) else [data]

    out: list[EndpointDescription] = []
    for i, item in enumerate(items):
        try:
            out.append(EndpointDescription.model_validate(item))
        except ValidationError as e:
            where = f"endpoint #{i}" if len(items) > 1 else "endpoint"
            raise DescriptionError(f"{where}: {error_summary(e)}", source) from e
    return out


def load_descriptions_from_text(text: str, source: Optional[str] = None) -> list[EndpointDescription]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DescriptionError(f"invalid JSON: {e}", source) from e
    return parse_descriptions(data, source)


def load_descriptions(path: Path) -> list[EndpointDescription]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DescriptionError(f"cannot read file: {e}", str(path)) from e
    return load_descriptions_from_text(text, str(path))
