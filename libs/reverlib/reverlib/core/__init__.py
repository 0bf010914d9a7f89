"""ReverHTTP core subpackage (Layer 1 -- depends only on diagnostics)."""

from reverlib.core.directives import NONE_ARG, DirectiveKind
from reverlib.core.methods import HttpMethod
from reverlib.core.types import PrimitiveType
from reverlib.core.values import (
    ArgValue,
    FlagValue,
    FuncCallValue,
    IdentValue,
    IntValue,
    ListValue,
    StringValue,
    value_text,
)

__all__ = [
    "DirectiveKind",
    "NONE_ARG",
    "HttpMethod",
    "PrimitiveType",
    "ArgValue",
    "StringValue",
    "IntValue",
    "IdentValue",
    "ListValue",
    "FuncCallValue",
    "FlagValue",
    "value_text",
]
