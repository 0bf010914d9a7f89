"""Token definitions for the ReverHTTP lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from reverlib.core.methods import HttpMethod
from reverlib.diagnostics.location import SourceLocation


class TokenKind(Enum):
    """All token types recognized by the ReverHTTP lexer.

    Each member's value is the name used for it in diagnostics.
    """

    # === Special ===
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"
    NEWLINE = "NEWLINE"

    # === Literals ===
    IDENT = "IDENT"  # includes hyphenated names such as redis-cache
    INT = "INT"
    STRING = "STRING"
    REGEX = "REGEX"  # only produced in regex mode

    # === Operators and delimiters ===
    PIPE = "|>"
    ERROR_FLOW = "~>"
    AMPERSAND = "&"
    RANGE = ".."
    COLON = ":"
    COMMA = ","
    DOT = "."
    BANG = "!"
    ASSIGN = "="
    AT = "@"
    SLASH = "/"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    UNDERSCORE = "_"

    # === Keywords ===
    IMPORT = "import"
    TYPE = "type"
    DEFAULTS = "defaults"
    AS = "as"
    MATCH = "match"
    GUARD = "guard"
    RESPOND = "respond"
    INPUT = "input"
    VALIDATE = "validate"
    TRANSFORM = "transform"
    WITH = "with"
    HEADERS = "headers"
    CACHE = "cache"
    CORS = "cors"
    AUTH = "auth"
    NONE = "none"

    # === HTTP methods ===
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    def __str__(self) -> str:
        return self.value


# Keyword string -> TokenKind mapping.
# Identifiers are checked against this table once the identifier is complete.
KEYWORDS: dict[str, TokenKind] = {
    "import": TokenKind.IMPORT,
    "type": TokenKind.TYPE,
    "defaults": TokenKind.DEFAULTS,
    "as": TokenKind.AS,
    "match": TokenKind.MATCH,
    "guard": TokenKind.GUARD,
    "respond": TokenKind.RESPOND,
    "input": TokenKind.INPUT,
    "validate": TokenKind.VALIDATE,
    "transform": TokenKind.TRANSFORM,
    "with": TokenKind.WITH,
    "headers": TokenKind.HEADERS,
    "cache": TokenKind.CACHE,
    "cors": TokenKind.CORS,
    "auth": TokenKind.AUTH,
    "none": TokenKind.NONE,
    "GET": TokenKind.GET,
    "POST": TokenKind.POST,
    "PUT": TokenKind.PUT,
    "DELETE": TokenKind.DELETE,
    "PATCH": TokenKind.PATCH,
    "HEAD": TokenKind.HEAD,
    "OPTIONS": TokenKind.OPTIONS,
}

HTTP_METHODS: frozenset[TokenKind] = frozenset(TokenKind(m.value) for m in HttpMethod)

DIRECTIVES: frozenset[TokenKind] = frozenset({TokenKind.CACHE, TokenKind.CORS, TokenKind.AUTH})

_WORDS: frozenset[TokenKind] = frozenset({TokenKind.IDENT, *KEYWORDS.values()})


def lookup_ident(text: str) -> TokenKind:
    """Return the keyword kind for *text*, or IDENT if it is not a keyword."""
    return KEYWORDS.get(text, TokenKind.IDENT)


@dataclass(frozen=True)
class Token:
    """A single token produced by the ReverHTTP lexer."""

    kind: TokenKind
    literal: str
    location: SourceLocation

    @property
    def is_word(self) -> bool:
        """True for identifiers and keywords, which may both serve as field names."""
        return self.kind in _WORDS

    @property
    def is_http_method(self) -> bool:
        return self.kind in HTTP_METHODS
