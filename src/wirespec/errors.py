from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Optional


# ----------------------------
# Schema errors (compile time)
# ----------------------------


@dataclass(frozen=True)
class SchemaIssue:
    """One violation found while compiling an endpoint description."""

    message: str
    locations: tuple[str, ...] = ()

    code: ClassVar[str] = "schema-issue"

    def __str__(self) -> str:
        if not self.locations:
            return self.message
        return f"{self.message} ({', '.join(self.locations)})"


class DuplicateKindAttribute(SchemaIssue):
    code = "duplicate-kind-attribute"


class UnknownAttributeKey(SchemaIssue):
    code = "unknown-attribute-key"


class MultipleNewtypeBodyFields(SchemaIssue):
    code = "multiple-newtype-body-fields"


class NewtypeAndBodyFields(SchemaIssue):
    code = "newtype-and-body-fields"


class BodyFieldsOnGetMethod(SchemaIssue):
    code = "body-fields-on-get"


class PlaceholderFieldCountMismatch(SchemaIssue):
    code = "placeholder-count-mismatch"


class UnknownPlaceholderField(SchemaIssue):
    code = "unknown-placeholder-field"


class InvalidPathTemplate(SchemaIssue):
    code = "invalid-path-template"


class OptionalPathField(SchemaIssue):
    code = "optional-path-field"


class DuplicatePlaceholder(SchemaIssue):
    code = "duplicate-placeholder"


class DuplicateFieldName(SchemaIssue):
    code = "duplicate-field-name"


class InvalidResponseFieldKind(SchemaIssue):
    code = "invalid-response-field-kind"


class UnknownTypeName(SchemaIssue):
    code = "unknown-type-name"


class SchemaError(Exception):
    """Every issue found in one endpoint description, reported together."""

    def __init__(self, issues: Iterable[SchemaIssue], endpoint: str = ""):
        self.issues: tuple[SchemaIssue, ...] = tuple(issues)
        self.endpoint = endpoint
        super().__init__(self._render())

    def _render(self) -> str:
        head = f"endpoint `{self.endpoint}`" if self.endpoint else "endpoint"
        lines = [f"{head}: {len(self.issues)} schema error(s)"]
        lines.extend(f"  - [{i.code}] {i}" for i in self.issues)
        return "\n".join(lines)

    def codes(self) -> list[str]:
        return [i.code for i in self.issues]


class ErrorCollector:
    """
    Accumulates schema issues across independent checks.

    Checks never short-circuit; call `raise_if_any()` once at the end.
    """

    def __init__(self, endpoint: str = ""):
        self.endpoint = endpoint
        self._issues: List[SchemaIssue] = []

    def add(self, issue: SchemaIssue) -> None:
        self._issues.append(issue)

    def extend(self, issues: Iterable[SchemaIssue]) -> None:
        self._issues.extend(issues)

    @property
    def issues(self) -> tuple[SchemaIssue, ...]:
        return tuple(self._issues)

    def __len__(self) -> int:
        return len(self._issues)

    def __bool__(self) -> bool:
        return bool(self._issues)

    def raise_if_any(self) -> None:
        if self._issues:
            raise SchemaError(self._issues, endpoint=self.endpoint)


class DescriptionError(ValueError):
    """A description file is malformed before any schema checks can run."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


# ----------------------------
# Runtime errors (marshal time)
# ----------------------------


class CodecError(Exception):
    """Base class for failures raised by compiled codecs."""


class MissingHeader(CodecError):
    def __init__(self, header_name: str):
        self.header_name = header_name
        super().__init__(f"missing expected header: {header_name}")


class HeaderParseError(CodecError):
    def __init__(self, header_name: str, value: str, detail: str = ""):
        self.header_name = header_name
        self.value = value
        msg = f"invalid value for header {header_name}: {value!r}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class PathSegmentDecodeError(CodecError):
    def __init__(self, field_name: str, segment: Optional[str], detail: str = ""):
        self.field_name = field_name
        self.segment = segment
        if segment is None:
            msg = f"path segment for `{field_name}` is missing"
        else:
            msg = f"cannot decode path segment {segment!r} into `{field_name}`"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class QueryDecodeError(CodecError):
    def __init__(self, query: str, detail: str = ""):
        self.query = query
        msg = f"cannot decode query string {query!r}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class BodyDeserializeError(CodecError):
    def __init__(self, detail: str = ""):
        msg = "cannot deserialize body"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class HttpStatusError(CodecError):
    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"http status {status_code}")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HttpStatusError) and other.status_code == self.status_code

    def __hash__(self) -> int:
        return hash(("HttpStatusError", self.status_code))


class InvalidHeaderValue(ValueError):
    """A header value cannot be represented on the wire (CR, LF or NUL)."""

    def __init__(self, header_name: str, value: str):
        self.header_name = header_name
        self.value = value
        super().__init__(f"value for header {header_name} is not a valid header value: {value!r}")
