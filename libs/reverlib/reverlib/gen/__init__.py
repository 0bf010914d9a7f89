"""ReverHTTP IR generator (Layer 3 -- depends on parser, ir)."""

from reverlib.gen.generator import IR_VERSION, generate

__all__ = ["IR_VERSION", "generate"]
