from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup (HTTP header names are case-insensitive)."""
    if name in headers:
        return headers[name]
    wanted = name.lower()
    for k, v in headers.items():
        if k.lower() == wanted:
            return v
    return None


@dataclass(frozen=True)
class RawHttpRequest:
    method: str
    path: str
    query: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        return get_header(self.headers, name)

    @property
    def target(self) -> str:
        """path plus query string, as sent on the request line."""
        return f"{self.path}?{self.query}" if self.query is not None else self.path

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "path": self.path,
            "query": self.query,
            "headers": dict(self.headers),
            "body": self.body.decode("utf-8", errors="replace"),
        }


@dataclass(frozen=True)
class RawHttpResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        return get_header(self.headers, name)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "headers": dict(self.headers),
            "body": self.body.decode("utf-8", errors="replace"),
        }
