"""Diagnostic collector for accumulating messages during lexing and parsing."""

from __future__ import annotations

from reverlib.diagnostics.diagnostic import Diagnostic
from reverlib.diagnostics.location import SourceLocation


class DiagnosticCollector:
    """Accumulates diagnostics in the order they are reported."""

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []

    def __len__(self) -> int:
        return len(self._diagnostics)

    def error(self, message: str, location: SourceLocation | None = None) -> None:
        """Record an error diagnostic."""
        self._diagnostics.append(Diagnostic(message, location))

    def has_errors(self) -> bool:
        """Return True if any diagnostics have been recorded."""
        return bool(self._diagnostics)

    def get_all(self) -> list[Diagnostic]:
        """Return a copy of all collected diagnostics."""
        return list(self._diagnostics)

    def messages(self) -> list[str]:
        """Return every diagnostic rendered as ``file:line:column: message``."""
        return [str(d) for d in self._diagnostics]

    def format_all(self) -> str:
        """Format all diagnostics as a newline-separated string."""
        return "\n".join(self.messages())
