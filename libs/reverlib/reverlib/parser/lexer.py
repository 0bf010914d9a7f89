"""Lexer (tokenizer) for ReverHTTP source code."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from reverlib.diagnostics.location import SourceLocation
from reverlib.parser.tokens import Token, TokenKind, lookup_ident


@dataclass(frozen=True)
class LexerState:
    """Snapshot of the lexer cursor, taken with :meth:`Lexer.mark`."""

    pos: int
    line: int
    col: int
    paren_depth: int
    brace_depth: int
    bracket_depth: int


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_alnum(ch: str) -> bool:
    return ch.isalpha() or _is_digit(ch)


def _is_ident_continue(ch: str) -> bool:
    return _is_alnum(ch) or ch == "_" or ch == "-"


class Lexer:
    """Tokenize ReverHTTP source one token at a time.

    Newlines are significant except inside ``()``, ``{}`` or ``[]``; each
    bracket kind has its own depth counter and a newline is only emitted
    when all three are zero.  ``/`` is a path separator unless the parser
    has switched on regex mode, in which case it opens a regex literal.

    The lexer never reports errors itself.  Characters it cannot use come
    back as ``ILLEGAL`` tokens and unterminated literals come back as
    best-effort tokens; the parser decides what to report.
    """

    # Single-character tokens that need no lookahead and touch no state.
    _SINGLE_CHAR: dict[str, TokenKind] = {
        "&": TokenKind.AMPERSAND,
        ":": TokenKind.COLON,
        ",": TokenKind.COMMA,
        "!": TokenKind.BANG,
        "=": TokenKind.ASSIGN,
        "@": TokenKind.AT,
    }

    def __init__(self, source: str, filename: str = "<string>") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._paren_depth = 0
        self._brace_depth = 0
        self._bracket_depth = 0
        self._regex_mode = False

    @property
    def filename(self) -> str:
        return self._filename

    # ------------------------------------------------------------------
    # Mode and state control (used by the parser)
    # ------------------------------------------------------------------

    @property
    def in_regex_mode(self) -> bool:
        return self._regex_mode

    def set_regex_mode(self, on: bool) -> None:
        """Enable or disable regex mode. In regex mode ``/`` starts a regex literal."""
        self._regex_mode = on

    @contextmanager
    def regex_mode(self) -> Iterator[None]:
        """Scope regex mode to a ``with`` block, restoring the previous mode on exit."""
        previous = self._regex_mode
        self._regex_mode = True
        try:
            yield
        finally:
            self._regex_mode = previous

    def mark(self) -> LexerState:
        """Return a snapshot of the current cursor and bracket depths."""
        return LexerState(
            pos=self._pos,
            line=self._line,
            col=self._col,
            paren_depth=self._paren_depth,
            brace_depth=self._brace_depth,
            bracket_depth=self._bracket_depth,
        )

    def reset(self, state: LexerState) -> None:
        """Rewind to a snapshot taken with :meth:`mark`."""
        self._pos = state.pos
        self._line = state.line
        self._col = state.col
        self._paren_depth = state.paren_depth
        self._brace_depth = state.brace_depth
        self._bracket_depth = state.bracket_depth

    # ------------------------------------------------------------------
    # Helper methods
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        """Return character at current position + offset, or '' at EOF."""
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        """Consume and return the current character, updating line/col."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _loc(self, line: int, col: int) -> SourceLocation:
        return SourceLocation(file=self._filename, line=line, column=col)

    def _inside_brackets(self) -> bool:
        return self._paren_depth > 0 or self._brace_depth > 0 or self._bracket_depth > 0

    # ------------------------------------------------------------------
    # Scanning helpers
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip spaces, tabs, carriage returns and ``#`` comments (not newlines)."""
        while not self._at_end():
            ch = self._peek()
            if ch in (" ", "\t", "\r"):
                self._advance()
            elif ch == "#":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            else:
                break

    def _scan_delimited(self, kind: TokenKind, close: str, line: int, col: int) -> Token:
        """Scan a string or regex body. The opening delimiter is already consumed.

        Stops at the closing delimiter, a newline, or EOF; an unterminated
        literal still yields a token with whatever was read.  Escapes are
        kept verbatim in the literal.
        """
        begin = self._pos
        while not self._at_end() and self._peek() not in (close, "\n"):
            if self._peek() == "\\" and self._peek(1) not in ("", "\n"):
                self._advance()
            self._advance()
        literal = self._source[begin : self._pos]
        if self._peek() == close:
            self._advance()
        return Token(kind, literal, self._loc(line, col))

    def _scan_number(self, line: int, col: int) -> Token:
        begin = self._pos
        while _is_digit(self._peek()):
            self._advance()
        return Token(TokenKind.INT, self._source[begin : self._pos], self._loc(line, col))

    def _scan_identifier(self, line: int, col: int) -> Token:
        """Scan an identifier or keyword.

        A hyphen belongs to the identifier only when an alphanumeric
        character follows it, so ``max-age`` is one token but a trailing
        or doubled hyphen is not absorbed.
        """
        begin = self._pos
        self._advance()
        while True:
            ch = self._peek()
            if _is_alnum(ch) or ch == "_":
                self._advance()
            elif ch == "-" and _is_alnum(self._peek(1)):
                self._advance()
                self._advance()
            else:
                break
        literal = self._source[begin : self._pos]
        return Token(lookup_ident(literal), literal, self._loc(line, col))

    # ------------------------------------------------------------------
    # Main entry points
    # ------------------------------------------------------------------

    def next_token(self) -> Token:
        """Return the next token. Once EOF is reached, EOF is returned forever."""
        while True:
            self._skip_whitespace_and_comments()
            line, col = self._line, self._col

            if self._at_end():
                return Token(TokenKind.EOF, "", self._loc(line, col))

            ch = self._peek()

            # --- Newlines (suppressed inside any bracket) ---
            if ch == "\n":
                self._advance()
                if self._inside_brackets():
                    continue
                return Token(TokenKind.NEWLINE, "\n", self._loc(line, col))

            # --- Two-character operators ---
            if ch in ("|", "~"):
                self._advance()
                if self._peek() == ">":
                    self._advance()
                    kind = TokenKind.PIPE if ch == "|" else TokenKind.ERROR_FLOW
                    return Token(kind, ch + ">", self._loc(line, col))
                return Token(TokenKind.ILLEGAL, ch, self._loc(line, col))

            if ch == ".":
                self._advance()
                if self._peek() == ".":
                    self._advance()
                    return Token(TokenKind.RANGE, "..", self._loc(line, col))
                return Token(TokenKind.DOT, ".", self._loc(line, col))

            # --- Path separator or regex literal ---
            if ch == "/":
                self._advance()
                if self._regex_mode:
                    return self._scan_delimited(TokenKind.REGEX, "/", line, col)
                return Token(TokenKind.SLASH, "/", self._loc(line, col))

            # --- Brackets ---
            if ch in "({[":
                self._advance()
                if ch == "(":
                    self._paren_depth += 1
                    kind = TokenKind.LPAREN
                elif ch == "{":
                    self._brace_depth += 1
                    kind = TokenKind.LBRACE
                else:
                    self._bracket_depth += 1
                    kind = TokenKind.LBRACKET
                return Token(kind, ch, self._loc(line, col))

            if ch in ")}]":
                # Depths are clamped at zero so unbalanced input cannot go negative.
                self._advance()
                if ch == ")":
                    self._paren_depth = max(0, self._paren_depth - 1)
                    kind = TokenKind.RPAREN
                elif ch == "}":
                    self._brace_depth = max(0, self._brace_depth - 1)
                    kind = TokenKind.RBRACE
                else:
                    self._bracket_depth = max(0, self._bracket_depth - 1)
                    kind = TokenKind.RBRACKET
                return Token(kind, ch, self._loc(line, col))

            # --- Wildcard or identifier starting with '_' ---
            if ch == "_" and not _is_ident_continue(self._peek(1)):
                self._advance()
                return Token(TokenKind.UNDERSCORE, "_", self._loc(line, col))

            # --- String literal ---
            if ch == '"':
                self._advance()
                return self._scan_delimited(TokenKind.STRING, '"', line, col)

            if _is_digit(ch):
                return self._scan_number(line, col)

            if _is_ident_start(ch):
                return self._scan_identifier(line, col)

            if ch in self._SINGLE_CHAR:
                self._advance()
                return Token(self._SINGLE_CHAR[ch], ch, self._loc(line, col))

            # --- Unknown character ---
            self._advance()
            return Token(TokenKind.ILLEGAL, ch, self._loc(line, col))

    def tokenize(self) -> list[Token]:
        """Tokenize the rest of the source. Returns list ending with an EOF token."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.kind == TokenKind.EOF:
                return tokens
