"""IR node types produced by the ReverHTTP generator.

The IR is a tree of frozen dataclasses that is disjoint from the AST it was
generated from.  Optional scalar fields use None for "absent"; map fields
preserve insertion (source) order.  ``reverlib.ir.serialize`` renders the
tree into the JSON/YAML document shape consumed by downstream tools.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ErrorResponse:
    status: int
    body: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Output:
    """Response of a route; status is 0 when the route never responds."""

    status: int = 0
    body: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EtagFunction:
    """``etag: hash(user)``."""

    fn: str
    from_: str


@dataclass(frozen=True)
class Cache:
    max_age: int | None = None
    s_maxage: int | None = None
    visibility: str = ""  # "public", "private" or empty
    no_cache: bool | None = None
    no_store: bool | None = None
    etag: str | EtagFunction | None = None
    last_modified: str = ""
    vary: tuple[str, ...] = ()


@dataclass(frozen=True)
class Cors:
    origins: tuple[str, ...] = ()
    methods: tuple[str, ...] = ()
    headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    max_age: int | None = None
    credentials: bool | None = None


@dataclass(frozen=True)
class CorsDisabled:
    """``cors(none)`` on a route: serialized as an explicit null."""


@dataclass(frozen=True)
class Auth:
    method: str = ""
    roles: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()
    bind: str = ""


@dataclass(frozen=True)
class Defaults:
    cache: Cache | None = None
    cors: Cors | None = None
    auth: Auth | None = None


# ---------------------------------------------------------------------------
# Input, validate, transform
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InputSource:
    from_: str


@dataclass(frozen=True)
class ValidateRule:
    type: str = ""
    min: int | None = None
    max: int | None = None
    format: str = ""


@dataclass(frozen=True)
class Validate:
    rules: dict[str, ValidateRule] = field(default_factory=dict)
    error: ErrorResponse | None = None


@dataclass(frozen=True)
class Transform:
    """Exactly one of ``cast`` (primitive type name) or ``fn`` is set."""

    cast: str = ""
    fn: str = ""
    from_: str = ""


# ---------------------------------------------------------------------------
# Match patterns and arms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValuePattern:
    """Single literal; ``value`` is an int, bool, None (``null``) or str."""

    value: int | bool | str | None


@dataclass(frozen=True)
class InPattern:
    values: tuple[str, ...]


@dataclass(frozen=True)
class RangePattern:
    min: int
    max: int


@dataclass(frozen=True)
class RegexPattern:
    regex: str


Pattern = Union[ValuePattern, InPattern, RangePattern, RegexPattern]

PackageInput = dict[str, Union[str, dict[str, str]]]


@dataclass(frozen=True)
class MatchArm:
    """A match arm; ``pattern`` is None only for a full-action default."""

    pattern: Pattern | None = None
    use: str = ""
    input: PackageInput = field(default_factory=dict)
    ref: str = ""
    error: ErrorResponse | None = None


@dataclass(frozen=True)
class DefaultError:
    """Default arm that only produces an error response."""

    error: ErrorResponse


@dataclass(frozen=True)
class DefaultRef:
    """Default arm that yields an existing variable."""

    ref: str
    error: ErrorResponse | None = None


MatchDefault = Union[MatchArm, DefaultError, DefaultRef]


@dataclass(frozen=True)
class MatchBlock:
    on: str
    arms: tuple[MatchArm, ...] = ()
    default: MatchDefault | None = None


# ---------------------------------------------------------------------------
# Process steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageStep:
    use: str
    input: PackageInput = field(default_factory=dict)
    bind: str = ""
    error: ErrorResponse | None = None


@dataclass(frozen=True)
class NotExpr:
    """Negated guard expression: ``{"not": expr}``."""

    expr: str


@dataclass(frozen=True)
class GuardStep:
    guard: str | NotExpr
    error: ErrorResponse | None = None


@dataclass(frozen=True)
class MatchStep:
    match: MatchBlock
    bind: str = ""
    error: ErrorResponse | None = None


ProcessStep = Union[PackageStep, GuardStep, MatchStep]


@dataclass(frozen=True)
class Process:
    steps: tuple[ProcessStep, ...] = ()


# ---------------------------------------------------------------------------
# Routes and root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Import:
    source: str
    version: str = ""
    local: bool = False


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    auth: Auth | None = None
    cache: Cache | None = None
    cors: Cors | CorsDisabled | None = None  # None means no cors directive
    input: dict[str, InputSource] = field(default_factory=dict)
    validate: Validate | None = None
    transform_in: dict[str, Transform] = field(default_factory=dict)
    process: Process | None = None
    output: Output = field(default_factory=Output)


@dataclass(frozen=True)
class Root:
    version: str
    imports: dict[str, Import] = field(default_factory=dict)
    types: dict[str, dict[str, str]] = field(default_factory=dict)
    defaults: Defaults | None = None
    routes: tuple[Route, ...] = ()
