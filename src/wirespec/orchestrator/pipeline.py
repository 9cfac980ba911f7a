from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from wirespec.config import CompilerConfig
from wirespec.emitter.endpoint import Endpoint, compile_endpoint
from wirespec.emitter.registry import EndpointRegistry
from wirespec.errors import DescriptionError, SchemaError, SchemaIssue
from wirespec.frontend.loader import load_descriptions
from wirespec.repo.scanner import expand_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointResult:
    source: str
    name: str
    endpoint: Optional[Endpoint] = None
    issues: tuple[SchemaIssue, ...] = ()
    error: str = ""  # unreadable file / malformed description / registry conflict

    @property
    def ok(self) -> bool:
        return self.endpoint is not None and not self.issues and not self.error


@dataclass
class CheckResult:
    files_scanned: int
    results: list[EndpointResult] = field(default_factory=list)
    registry: EndpointRegistry = field(default_factory=EndpointRegistry)

    @property
    def failed(self) -> list[EndpointResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def run_check(paths: Iterable[Path], config: Optional[CompilerConfig] = None) -> CheckResult:
    """
    Load and compile every description under `paths`.

    Each endpoint compiles independently; one bad description never hides
    the issues of another.
    """
    files = expand_inputs(paths)
    result = CheckResult(files_scanned=len(files))

    for src in files:
        try:
            descriptions = load_descriptions(Path(src))
        except DescriptionError as e:
            logger.warning("skipping %s: %s", src, e)
            result.results.append(EndpointResult(source=src, name="", error=str(e)))
            continue

        for d in descriptions:
            name = d.metadata.name
            try:
                endpoint = compile_endpoint(d, config)
            except SchemaError as e:
                result.results.append(EndpointResult(source=src, name=name, issues=e.issues))
                continue

            try:
                result.registry.register(endpoint)
            except ValueError as e:
                result.results.append(EndpointResult(source=src, name=name, endpoint=endpoint, error=str(e)))
                continue
            result.results.append(EndpointResult(source=src, name=name, endpoint=endpoint))

    logger.debug("checked %d file(s), %d endpoint(s), %d failed", len(files), len(result.results), len(result.failed))
    return result
