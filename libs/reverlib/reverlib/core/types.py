"""Primitive type names understood by ``validate`` and ``transform``."""

from __future__ import annotations

from enum import Enum


class PrimitiveType(Enum):
    """Primitive value types.

    A ``transform`` function named after one of these is a cast; a
    ``validate`` constraint named after one of these declares the field type.
    """

    INT = "int"
    STRING = "string"
    BOOL = "bool"
    FLOAT = "float"
    DATETIME = "datetime"

    @classmethod
    def from_name(cls, name: str) -> PrimitiveType | None:
        """Look up a primitive type by name, or None for anything else."""
        for member in cls:
            if member.value == name:
                return member
        return None

    @classmethod
    def is_primitive(cls, name: str) -> bool:
        """Return True if *name* is a primitive type name."""
        return cls.from_name(name) is not None
