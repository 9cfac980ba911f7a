from __future__ import annotations

from typing import Iterable, Iterator, Optional

from wirespec.emitter.endpoint import Endpoint


def _route_key(method: str, path: str) -> str:
    return f"{method.upper()} {path}"


class EndpointRegistry:
    """
    Compiled endpoints indexed for discovery by an external router.

    Keys:
      - name
      - METHOD + path template
    Both must be unique.
    """

    def __init__(self, endpoints: Iterable[Endpoint] = ()):
        self._by_name: dict[str, Endpoint] = {}
        self._by_route: dict[str, Endpoint] = {}
        for e in endpoints:
            self.register(e)

    def register(self, endpoint: Endpoint) -> Endpoint:
        m = endpoint.metadata
        route = _route_key(m.method, m.path)

        if m.name in self._by_name:
            raise ValueError(f"endpoint name already registered: {m.name}")
        if route in self._by_route:
            other = self._by_route[route].metadata.name
            raise ValueError(f"route {route} already registered by {other}")

        self._by_name[m.name] = endpoint
        self._by_route[route] = endpoint
        return endpoint

    def get(self, name: str) -> Optional[Endpoint]:
        return self._by_name.get(name)

    def for_route(self, method: str, path_template: str) -> Optional[Endpoint]:
        return self._by_route.get(_route_key(method, path_template))

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Endpoint]:
        # stable ordering for listings and exports
        return iter(sorted(self._by_name.values(), key=lambda e: (e.metadata.path, e.metadata.method, e.metadata.name)))

    def describe(self) -> list[dict]:
        return [e.describe() for e in self]
