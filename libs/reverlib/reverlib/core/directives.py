"""ReverHTTP directive kind definitions."""

from __future__ import annotations

from enum import Enum


class DirectiveKind(Enum):
    """Cross-cutting directives allowed on routes and in ``defaults``."""

    CACHE = "cache"
    CORS = "cors"
    AUTH = "auth"

    @classmethod
    def from_name(cls, name: str) -> DirectiveKind | None:
        """Look up a directive kind by its source-level name."""
        for member in cls:
            if member.value == name:
                return member
        return None


# Argument name that switches a directive off for one route: ``cors(none)``.
NONE_ARG = "none"
