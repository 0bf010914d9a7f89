"""ReverHTTP parser subpackage (Layer 2 -- depends on core, diagnostics)."""

from reverlib.parser.ast_nodes import (
    DefaultsBlock,
    Directive,
    FileNode,
    ImportDecl,
    MatchArm,
    PipelineStep,
    Route,
    TypeDecl,
)
from reverlib.parser.lexer import Lexer, LexerState
from reverlib.parser.parser import Parser, parse
from reverlib.parser.tokens import KEYWORDS, Token, TokenKind

__all__ = [
    "TokenKind",
    "Token",
    "KEYWORDS",
    "Lexer",
    "LexerState",
    "FileNode",
    "ImportDecl",
    "TypeDecl",
    "DefaultsBlock",
    "Directive",
    "Route",
    "PipelineStep",
    "MatchArm",
    "Parser",
    "parse",
]
