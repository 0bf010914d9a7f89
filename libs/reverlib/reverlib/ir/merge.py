"""Combine the IR of several source files into one document."""

from __future__ import annotations

from collections.abc import Iterable

from reverlib.ir import nodes as ir


def merge_ir(roots: Iterable[ir.Root], version: str | None = None) -> ir.Root:
    """Merge IR documents in order.

    Imports and types are unions where a later alias or type name replaces
    an earlier one.  A later ``defaults`` replaces the earlier one wholesale.
    Routes are concatenated.  The version is taken from the first document
    unless *version* is given.
    """
    imports: dict[str, ir.Import] = {}
    types: dict[str, dict[str, str]] = {}
    defaults: ir.Defaults | None = None
    routes: list[ir.Route] = []
    merged_version = version

    for root in roots:
        if merged_version is None:
            merged_version = root.version
        imports.update(root.imports)
        types.update(root.types)
        if root.defaults is not None:
            defaults = root.defaults
        routes.extend(root.routes)

    return ir.Root(
        version=merged_version or "",
        imports=imports,
        types=types,
        defaults=defaults,
        routes=tuple(routes),
    )
