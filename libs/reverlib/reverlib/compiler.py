"""File-level compiler driver: parse, generate and merge."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from reverlib.errors import CompileError
from reverlib.gen import IR_VERSION, generate
from reverlib.ir import merge_ir
from reverlib.ir import nodes as ir
from reverlib.parser import parse

logger = logging.getLogger(__name__)


def compile_source(source: str, filename: str = "<string>") -> tuple[ir.Root, list[str]]:
    """Compile one source text.

    The IR is always produced, even when diagnostics were reported; callers
    decide whether a partially recovered result is usable.
    """
    file, errors = parse(source, filename)
    return generate(file), errors


def compile_files(paths: Iterable[str]) -> ir.Root:
    """Compile and merge *paths* in order.

    Raises:
        CompileError: if any file produced diagnostics.  Every file is
            still parsed so all diagnostics are reported together.
        OSError: if a file cannot be read.
    """
    roots: list[ir.Root] = []
    diagnostics: list[str] = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            source = f.read()
        root, errors = compile_source(source, path)
        if errors:
            logger.warning("%s: %d error(s), skipping", path, len(errors))
            diagnostics.extend(errors)
            continue
        logger.info("compiled %s: %d route(s)", path, len(root.routes))
        roots.append(root)

    if diagnostics:
        raise CompileError(diagnostics)
    return merge_ir(roots, version=IR_VERSION)
