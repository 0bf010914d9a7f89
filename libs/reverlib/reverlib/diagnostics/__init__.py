"""ReverHTTP diagnostics subpackage (Layer 0 -- zero internal dependencies)."""

from reverlib.diagnostics.collector import DiagnosticCollector
from reverlib.diagnostics.diagnostic import (
    DIAGNOSTIC_PATTERN,
    Diagnostic,
    ParsedDiagnostic,
    parse_diagnostic,
)
from reverlib.diagnostics.location import SourceLocation

__all__ = [
    "SourceLocation",
    "Diagnostic",
    "DiagnosticCollector",
    "DIAGNOSTIC_PATTERN",
    "ParsedDiagnostic",
    "parse_diagnostic",
]
