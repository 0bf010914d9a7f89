"""Exception types raised by the ReverHTTP compiler driver.

The lexer, parser and generator never raise on malformed input; these
exceptions exist only at the file and configuration level.
"""

from __future__ import annotations

from collections.abc import Sequence


class ReverError(Exception):
    """Base class for reverlib errors."""


class CompileError(ReverError):
    """Raised when one or more source files produced diagnostics."""

    def __init__(self, diagnostics: Sequence[str]) -> None:
        self.diagnostics = list(diagnostics)
        count = len(self.diagnostics)
        super().__init__(f"{count} error{'s' if count != 1 else ''} found")


class ConfigError(ReverError):
    """Raised on an unreadable or malformed configuration file."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
