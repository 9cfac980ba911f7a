"""
Compiler configuration.

Defaults live in the dataclass; `CompilerConfig.from_env()` lets the CLI (or
an embedding build step) override them through WIRESPEC_* variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_PREFIX = "WIRESPEC_"


@dataclass(frozen=True)
class CompilerConfig:
    content_type: str = "application/json"
    """Content type set on every non-empty request body and every response."""

    success_status_min: int = 200
    success_status_max: int = 300
    """Half-open range of response statuses that are decoded; anything else is an HttpStatusError."""

    default_response_status: int = 200

    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not self.content_type.strip():
            raise ValueError("content_type must not be empty")
        if not (100 <= self.success_status_min < self.success_status_max <= 600):
            raise ValueError(
                f"invalid success status range: [{self.success_status_min}, {self.success_status_max})"
            )
        if not (100 <= self.default_response_status < 600):
            raise ValueError(f"invalid default response status: {self.default_response_status}")

    def is_success(self, status: int) -> bool:
        return self.success_status_min <= status < self.success_status_max

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CompilerConfig":
        env = os.environ if environ is None else environ
        config = cls()
        overrides = {}

        content_type = env.get(f"{ENV_PREFIX}CONTENT_TYPE")
        if content_type:
            overrides["content_type"] = content_type.strip()

        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
        if log_level:
            overrides["log_level"] = log_level.strip().upper()

        status = env.get(f"{ENV_PREFIX}DEFAULT_RESPONSE_STATUS")
        if status:
            try:
                overrides["default_response_status"] = int(status)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}DEFAULT_RESPONSE_STATUS must be an integer, got {status!r}") from None

        return replace(config, **overrides) if overrides else config
