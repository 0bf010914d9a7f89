"""AST node types for the ReverHTTP parser.

Directive argument values are defined in ``reverlib.core.values`` and
re-exported here for convenience.  This module adds declaration, route,
pipeline-step, pattern and file-level nodes.

All nodes are frozen dataclasses; sequences are tuples so an AST cannot be
mutated after parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from reverlib.core.values import (
    ArgValue,
    FlagValue,
    FuncCallValue,
    IdentValue,
    IntValue,
    ListValue,
    StringValue,
)
from reverlib.diagnostics.location import SourceLocation

__all__ = [
    # Argument values (re-exported from core)
    "ArgValue",
    "StringValue",
    "IntValue",
    "IdentValue",
    "ListValue",
    "FuncCallValue",
    "FlagValue",
    # Declarations
    "ImportDecl",
    "TypeField",
    "TypeDecl",
    "Arg",
    "Directive",
    "DefaultsBlock",
    # Shared pieces
    "BodyField",
    "ErrorFlow",
    # Package call arguments
    "NamedArg",
    "TypeRefArg",
    "PositionalArg",
    "ObjectArg",
    "PkgArg",
    # Pipeline steps
    "InputField",
    "InputStep",
    "Constraint",
    "ValidateRule",
    "ValidateStep",
    "TransformField",
    "TransformStep",
    "GuardStep",
    "PackageCall",
    "RespondStep",
    "MatchStep",
    "StepBody",
    "PipelineStep",
    # Match patterns and actions
    "LiteralPattern",
    "MultiPattern",
    "RangePattern",
    "RegexPattern",
    "WildcardPattern",
    "Pattern",
    "VarRef",
    "ErrorOnly",
    "ArmAction",
    "MatchArm",
    # Route and file
    "Route",
    "FileNode",
]


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportDecl:
    """``import alias = source@version`` or ``import alias = @/local/path``."""

    alias: str
    source: str
    version: str = ""  # empty for local imports
    is_local: bool = False
    location: SourceLocation | None = None


@dataclass(frozen=True)
class TypeField:
    name: str
    type_name: str


@dataclass(frozen=True)
class TypeDecl:
    """``type User { id: int, name: string }``."""

    name: str
    fields: tuple[TypeField, ...] = ()
    location: SourceLocation | None = None


@dataclass(frozen=True)
class Arg:
    """A directive argument; ``name`` is None for positional arguments."""

    value: ArgValue
    name: str | None = None


@dataclass(frozen=True)
class Directive:
    """``cache(...)``, ``cors(...)`` or ``auth(...) as name``."""

    name: str  # "cache", "cors", "auth"
    args: tuple[Arg, ...] = ()
    bind: str | None = None
    location: SourceLocation | None = None


@dataclass(frozen=True)
class DefaultsBlock:
    """``defaults`` followed by one directive per line."""

    directives: tuple[Directive, ...] = ()
    location: SourceLocation | None = None


# ---------------------------------------------------------------------------
# Body fields and error flows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BodyField:
    """``key: value`` inside a respond body, header block or error body.

    ``value`` is the string literal text or a dotted path such as ``user.id``.
    """

    key: str
    value: str


@dataclass(frozen=True)
class ErrorFlow:
    """``~> status { body }``."""

    status: int | None
    body: tuple[BodyField, ...] = ()
    location: SourceLocation | None = None


# ---------------------------------------------------------------------------
# Package call arguments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NamedArg:
    """``key: value``."""

    name: str
    value: str


@dataclass(frozen=True)
class TypeRefArg:
    """Positional identifier starting with an uppercase letter: ``User``."""

    name: str


@dataclass(frozen=True)
class PositionalArg:
    """Any other positional value: ``id``, ``42``, ``"x"``."""

    value: str


@dataclass(frozen=True)
class ObjectArg:
    """Object shorthand ``{ name, email }``."""

    fields: tuple[str, ...]


PkgArg = Union[NamedArg, TypeRefArg, PositionalArg, ObjectArg]


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InputField:
    name: str
    source: str  # e.g. "path.id", "body.name", "header.x-role"


@dataclass(frozen=True)
class InputStep:
    """``input(id: path.id, name: body.name)``."""

    fields: tuple[InputField, ...] = ()


@dataclass(frozen=True)
class Constraint:
    """``int``, ``min(1)``, ``format(email)``; ``args`` are literal values."""

    name: str
    args: tuple[ArgValue, ...] = ()


@dataclass(frozen=True)
class ValidateRule:
    """One field of a validate step; its constraints are ANDed."""

    field: str
    constraints: tuple[Constraint, ...] = ()


@dataclass(frozen=True)
class ValidateStep:
    """``validate(id: int & min(1))``."""

    rules: tuple[ValidateRule, ...] = ()


@dataclass(frozen=True)
class TransformField:
    """``name: fn(source)``; ``source`` is None when no argument list follows."""

    name: str
    func: str
    source: str | None = None


@dataclass(frozen=True)
class TransformStep:
    """``transform(id: int(id), name: trim(name))``."""

    fields: tuple[TransformField, ...] = ()


@dataclass(frozen=True)
class GuardStep:
    """``guard expr`` or ``guard !expr``."""

    expression: str
    negated: bool = False


@dataclass(frozen=True)
class PackageCall:
    """Call to an imported package: ``fetch(User, id)``."""

    package: str
    args: tuple[PkgArg, ...] = ()


@dataclass(frozen=True)
class RespondStep:
    """``respond status { body } with headers { ... }``."""

    status: int | None
    body: tuple[BodyField, ...] = ()
    headers: tuple[BodyField, ...] = ()


# ---------------------------------------------------------------------------
# Match patterns and arms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LiteralPattern:
    """A single string, integer or bare-word value."""

    value: str


@dataclass(frozen=True)
class MultiPattern:
    """``"user", "member"``: matches any of the values."""

    values: tuple[str, ...]


@dataclass(frozen=True)
class RangePattern:
    """``200..299``: inclusive on both ends."""

    min: int
    max: int


@dataclass(frozen=True)
class RegexPattern:
    source: str


@dataclass(frozen=True)
class WildcardPattern:
    """``_``: the default arm."""


Pattern = Union[LiteralPattern, MultiPattern, RangePattern, RegexPattern, WildcardPattern]


@dataclass(frozen=True)
class VarRef:
    """Arm action that yields an existing variable: ``cached``."""

    name: str


@dataclass(frozen=True)
class ErrorOnly:
    """Arm action made of nothing but an error flow: ``_: ~> 400``."""


ArmAction = Union[PackageCall, VarRef, ErrorOnly]


@dataclass(frozen=True)
class MatchArm:
    pattern: Pattern
    action: ArmAction | None = None
    error_flow: ErrorFlow | None = None
    location: SourceLocation | None = None

    @property
    def is_default(self) -> bool:
        return isinstance(self.pattern, WildcardPattern)


@dataclass(frozen=True)
class MatchStep:
    """``match expr { pattern: action ... }``."""

    scrutinee: str
    arms: tuple[MatchArm, ...] = ()


StepBody = Union[
    InputStep,
    ValidateStep,
    TransformStep,
    GuardStep,
    MatchStep,
    PackageCall,
    RespondStep,
]


@dataclass(frozen=True)
class PipelineStep:
    """One ``|>`` stage: the step body plus its optional bind and error flow."""

    body: StepBody
    bind: str | None = None
    error_flow: ErrorFlow | None = None
    location: SourceLocation | None = None


# ---------------------------------------------------------------------------
# Route and file
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Route:
    """``METHOD /path`` with its directives and pipeline."""

    method: str
    path: str
    directives: tuple[Directive, ...] = ()
    steps: tuple[PipelineStep, ...] = ()
    location: SourceLocation | None = None


@dataclass(frozen=True)
class FileNode:
    """Root of a parsed ``.rever`` file."""

    imports: tuple[ImportDecl, ...] = ()
    types: tuple[TypeDecl, ...] = ()
    defaults: DefaultsBlock | None = None
    routes: tuple[Route, ...] = ()
