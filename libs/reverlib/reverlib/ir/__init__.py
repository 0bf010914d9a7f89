"""ReverHTTP intermediate representation (Layer 2 -- no internal dependencies)."""

from reverlib.ir import nodes
from reverlib.ir.merge import merge_ir
from reverlib.ir.serialize import to_dict, to_json, to_yaml

__all__ = [
    "nodes",
    "merge_ir",
    "to_dict",
    "to_json",
    "to_yaml",
]
