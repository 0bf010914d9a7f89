"""Directive argument value nodes for ReverHTTP."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass


class ArgValue(ABC):
    """Base type for directive argument values. All concrete subclasses are frozen dataclasses."""


@dataclass(frozen=True)
class StringValue(ArgValue):
    """String literal, stored without quotes: ``"Authorization"``."""

    value: str


@dataclass(frozen=True)
class IntValue(ArgValue):
    """Integer literal: ``3600``."""

    value: int


@dataclass(frozen=True)
class IdentValue(ArgValue):
    """Identifier or dotted path: ``user``, ``user.updated_at``."""

    name: str


@dataclass(frozen=True)
class ListValue(ArgValue):
    """Bracketed list: ``["GET", "POST"]``."""

    items: tuple[str, ...]


@dataclass(frozen=True)
class FuncCallValue(ArgValue):
    """Single-argument function call: ``hash(user)``."""

    func: str
    arg: str


@dataclass(frozen=True)
class FlagValue(ArgValue):
    """Bare keyword flag carrying no payload, such as the ``none`` sentinel."""

    name: str


def value_text(value: ArgValue | None) -> str:
    """Return the textual form of *value*.

    Lists have no single textual form and yield an empty string.
    """
    if isinstance(value, StringValue):
        return value.value
    elif isinstance(value, IntValue):
        return str(value.value)
    elif isinstance(value, IdentValue):
        return value.name
    elif isinstance(value, FuncCallValue):
        return f"{value.func}({value.arg})"
    elif isinstance(value, FlagValue):
        return value.name
    return ""
