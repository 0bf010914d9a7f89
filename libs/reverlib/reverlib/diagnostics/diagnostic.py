"""Diagnostic message representation for ReverHTTP.

Diagnostics render as ``file:line:column: message``.  Editor integrations
recover the position with :data:`DIAGNOSTIC_PATTERN`, so the shape of
:meth:`Diagnostic.__str__` must not change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from reverlib.diagnostics.location import SourceLocation

DIAGNOSTIC_PATTERN = re.compile(r"^[^:]+:(\d+):(\d+): (.+)$")


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic message."""

    message: str
    location: SourceLocation | None = None

    def __str__(self) -> str:
        loc = f"{self.location}: " if self.location else ""
        return f"{loc}{self.message}"


@dataclass(frozen=True)
class ParsedDiagnostic:
    """Line/column/message recovered from a rendered diagnostic string."""

    line: int  # 1-indexed
    column: int  # 1-indexed
    message: str

    def zero_based(self) -> tuple[int, int]:
        """Return ``(line, column)`` converted to 0-based positions."""
        return self.line - 1, self.column - 1


def parse_diagnostic(text: str) -> ParsedDiagnostic | None:
    """Split a rendered diagnostic back into its parts.

    Returns ``None`` when *text* does not have the ``file:line:column: message``
    shape.
    """
    m = DIAGNOSTIC_PATTERN.match(text)
    if m is None:
        return None
    return ParsedDiagnostic(line=int(m.group(1)), column=int(m.group(2)), message=m.group(3))
