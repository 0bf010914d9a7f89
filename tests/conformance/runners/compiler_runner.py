"""Compiler-based conformance runner using reverlib."""

from reverlib.compiler import compile_source
from reverlib.ir import to_dict
from tests.conformance.runner import ValidationResult


class CompilerRunner:
    """Conformance runner that uses the reverlib parser and generator."""

    name = "compiler"

    def validate(self, source: str, filename: str = "<test>") -> ValidationResult:
        """Parse and generate *source*.

        The IR is serialized even when diagnostics were reported, so cases
        can check what survives error recovery.
        """
        root, errors = compile_source(source, filename)
        return ValidationResult(valid=not errors, diagnostics=errors, ir=to_dict(root))
