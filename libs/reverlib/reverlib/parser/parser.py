"""Recursive-descent parser for ReverHTTP source code.

Handles:
- ``import alias = host/path@version`` and ``import alias = @/local/path``
- ``type Name { field: type, ... }``
- ``defaults`` followed by ``cache(...)``, ``cors(...)``, ``auth(...)`` lines
- ``METHOD /path`` routes with optional directives and ``|>`` pipeline steps:
  ``input``, ``validate``, ``transform``, ``guard``, ``match``, ``respond``
  and package calls, each with optional ``as name`` and ``~> status {...}``

The parser never raises on malformed input.  Every problem is recorded in
the :class:`DiagnosticCollector` and parsing resumes at the next safe point,
so one pass reports as many problems as possible and still returns a
best-effort AST.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from reverlib.core.directives import NONE_ARG
from reverlib.core.values import (
    ArgValue,
    FlagValue,
    FuncCallValue,
    IdentValue,
    IntValue,
    ListValue,
    StringValue,
)
from reverlib.diagnostics.collector import DiagnosticCollector
from reverlib.parser.ast_nodes import (
    Arg,
    ArmAction,
    BodyField,
    Constraint,
    DefaultsBlock,
    Directive,
    ErrorFlow,
    ErrorOnly,
    FileNode,
    GuardStep,
    ImportDecl,
    InputField,
    InputStep,
    LiteralPattern,
    MatchArm,
    MatchStep,
    MultiPattern,
    NamedArg,
    ObjectArg,
    PackageCall,
    Pattern,
    PipelineStep,
    PkgArg,
    PositionalArg,
    RangePattern,
    RegexPattern,
    RespondStep,
    Route,
    StepBody,
    TransformField,
    TransformStep,
    TypeDecl,
    TypeField,
    TypeRefArg,
    ValidateRule,
    ValidateStep,
    VarRef,
    WildcardPattern,
)
from reverlib.parser.lexer import Lexer
from reverlib.parser.tokens import DIRECTIVES, Token, TokenKind

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class Parser:
    """Recursive-descent parser for ReverHTTP files.

    The parser holds exactly two tokens: the current token and one token of
    lookahead.  Productions are entered with the current token on their
    introducing keyword and return with it on the first token after the
    construct.
    """

    def __init__(self, lexer: Lexer, diagnostics: DiagnosticCollector | None = None) -> None:
        self._lexer = lexer
        self._diag = diagnostics if diagnostics is not None else DiagnosticCollector()
        self._cur_state = lexer.mark()
        self._cur = lexer.next_token()
        self._peek_state = lexer.mark()
        self._peek = lexer.next_token()
        self._report_illegal(self._cur)

    @property
    def diagnostics(self) -> DiagnosticCollector:
        return self._diag

    @property
    def errors(self) -> list[str]:
        """Diagnostics rendered as ``file:line:column: message``."""
        return self._diag.messages()

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _advance(self) -> Token:
        """Consume and return the current token."""
        tok = self._cur
        self._cur, self._cur_state = self._peek, self._peek_state
        self._peek_state = self._lexer.mark()
        self._peek = self._lexer.next_token()
        self._report_illegal(self._cur)
        return tok

    def _cur_is(self, kind: TokenKind) -> bool:
        return self._cur.kind == kind

    def _peek_is(self, kind: TokenKind) -> bool:
        return self._peek.kind == kind

    def _error(self, message: str, tok: Token | None = None) -> None:
        tok = tok or self._cur
        self._diag.error(message, tok.location)

    def _report_illegal(self, tok: Token) -> None:
        if tok.kind == TokenKind.ILLEGAL:
            self._error(f"illegal token {tok.literal!r}", tok)

    def _expect_peek(self, kind: TokenKind) -> bool:
        """Advance onto the lookahead token if it is *kind*, else report it."""
        if self._peek_is(kind):
            self._advance()
            return True
        self._error(f"expected {kind}, got {self._peek.kind} ({self._peek.literal!r})", self._peek)
        return False

    def _consume(self, kind: TokenKind) -> bool:
        """Consume the current token if it is *kind*, else report it."""
        if self._cur_is(kind):
            self._advance()
            return True
        self._error(f"expected {kind}, got {self._cur.kind} ({self._cur.literal!r})")
        return False

    def _to_int(self, tok: Token) -> int | None:
        """Convert an INT token, reporting literals too long for ``int()``."""
        try:
            return int(tok.literal)
        except ValueError:
            self._error(f"integer literal too large ({len(tok.literal)} digits)", tok)
            return None

    def _unexpected(self, context: str) -> None:
        """Report the current token as out of place and skip it.

        Illegal tokens were already reported when they were scanned.
        """
        tok = self._cur
        if tok.kind != TokenKind.ILLEGAL:
            self._error(f"unexpected token {tok.kind} ({tok.literal!r}) {context}", tok)
        if tok.kind != TokenKind.EOF:
            self._advance()

    def _skip_newlines(self) -> None:
        while self._cur_is(TokenKind.NEWLINE):
            self._advance()

    def _skip_until(self, *kinds: TokenKind) -> None:
        while not self._cur_is(TokenKind.EOF) and self._cur.kind not in kinds:
            self._advance()

    def _at_statement_boundary(self) -> bool:
        return self._cur.kind in (TokenKind.PIPE, TokenKind.NEWLINE, TokenKind.EOF) or (
            self._cur.is_http_method
        )

    def _skip_to_next_statement(self) -> None:
        """Advance to the next ``|>``, newline, HTTP method or EOF (error recovery)."""
        while not self._at_statement_boundary():
            self._advance()

    def _finish_statement(self, context: str, *also: TokenKind) -> None:
        """Report leftover tokens on the current line and recover."""
        if self._at_statement_boundary() or self._cur.kind in also:
            return
        self._unexpected(context)
        self._skip_to_next_statement()

    def _join_until(self, *stops: TokenKind) -> str:
        """Concatenate token literals verbatim until one of *stops* or EOF."""
        parts: list[str] = []
        while not self._cur_is(TokenKind.EOF) and self._cur.kind not in stops:
            parts.append(self._advance().literal)
        return "".join(parts)

    def _rescan_as_regex(self) -> None:
        """Re-read the current token in regex mode if it was scanned as ``/``.

        The lookahead token was scanned before the parser knew a pattern
        was coming, so both tokens are rescanned from the current token's
        start.  Only the pattern token itself is read in regex mode.
        """
        if not self._cur_is(TokenKind.SLASH):
            return
        self._lexer.reset(self._cur_state)
        with self._lexer.regex_mode():
            self._cur = self._lexer.next_token()
        self._peek_state = self._lexer.mark()
        self._peek = self._lexer.next_token()

    # ------------------------------------------------------------------
    # Top-level file parsing
    # ------------------------------------------------------------------

    def parse_file(self) -> FileNode:
        """Parse a complete ``.rever`` file."""
        imports: list[ImportDecl] = []
        types: list[TypeDecl] = []
        routes: list[Route] = []
        defaults: DefaultsBlock | None = None

        self._skip_newlines()
        while not self._cur_is(TokenKind.EOF):
            tok = self._cur
            if tok.kind == TokenKind.IMPORT:
                imp = self.parse_import()
                if imp is not None:
                    imports.append(imp)
            elif tok.kind == TokenKind.TYPE:
                td = self.parse_type()
                if td is not None:
                    types.append(td)
            elif tok.kind == TokenKind.DEFAULTS:
                defaults = self.parse_defaults()
            elif tok.is_http_method:
                routes.append(self.parse_route())
            else:
                if tok.kind != TokenKind.ILLEGAL:
                    self._error(f"unexpected token {tok.kind} ({tok.literal!r})", tok)
                self._advance()
            self._skip_newlines()

        return FileNode(
            imports=tuple(imports),
            types=tuple(types),
            defaults=defaults,
            routes=tuple(routes),
        )

    # ------------------------------------------------------------------
    # import declaration
    # ------------------------------------------------------------------

    def parse_import(self) -> ImportDecl | None:
        """Parse ``import alias = source@version`` or ``import alias = @/path``."""
        import_tok = self._cur
        if not self._expect_peek(TokenKind.IDENT):
            self._skip_to_next_statement()
            return None
        alias = self._cur.literal
        if not self._expect_peek(TokenKind.ASSIGN):
            self._skip_to_next_statement()
            return None
        self._advance()  # consume '='

        if self._cur_is(TokenKind.AT) and self._peek_is(TokenKind.SLASH):
            self._advance()
            self._advance()
            path = self._join_until(TokenKind.NEWLINE)
            return ImportDecl(
                alias=alias,
                source="@/" + path,
                is_local=True,
                location=import_tok.location,
            )

        # The lexer already split the source into IDENT/DOT/SLASH tokens in
        # order, so joining the literals reproduces it exactly.
        source = self._join_until(TokenKind.AT, TokenKind.NEWLINE)
        if not source:
            self._error(f"expected import source for {alias!r}")
        version = ""
        if self._cur_is(TokenKind.AT):
            self._advance()
            version = self._join_until(TokenKind.NEWLINE)
        if not version:
            self._error(f"remote import {alias!r} requires a version", import_tok)
        return ImportDecl(alias=alias, source=source, version=version, location=import_tok.location)

    # ------------------------------------------------------------------
    # type declaration
    # ------------------------------------------------------------------

    def parse_type(self) -> TypeDecl | None:
        """Parse ``type Name { field: type, ... }``."""
        type_tok = self._cur
        if not self._expect_peek(TokenKind.IDENT):
            self._skip_to_next_statement()
            return None
        name = self._cur.literal
        if not self._expect_peek(TokenKind.LBRACE):
            self._skip_to_next_statement()
            return None
        self._advance()  # consume '{'

        fields: list[TypeField] = []
        while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
            if not self._cur.is_word:
                self._unexpected("in type body")
                continue
            field_name = self._advance().literal
            if not self._consume(TokenKind.COLON):
                self._skip_until(TokenKind.COMMA, TokenKind.RBRACE)
            elif self._cur.is_word:
                fields.append(TypeField(name=field_name, type_name=self._advance().literal))
            else:
                self._error(f"expected type name for field {field_name!r}")
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        self._consume(TokenKind.RBRACE)
        self._finish_statement("after type declaration")

        return TypeDecl(name=name, fields=tuple(fields), location=type_tok.location)

    # ------------------------------------------------------------------
    # defaults and directives
    # ------------------------------------------------------------------

    def parse_defaults(self) -> DefaultsBlock:
        """Parse ``defaults`` and the directive lines that follow it."""
        defaults_tok = self._advance()
        self._finish_statement("after 'defaults'")
        self._skip_newlines()
        return DefaultsBlock(
            directives=tuple(self._parse_directives()),
            location=defaults_tok.location,
        )

    def _parse_directives(self) -> list[Directive]:
        directives: list[Directive] = []
        while self._cur.kind in DIRECTIVES:
            directives.append(self.parse_directive())
            self._finish_statement("after directive", *DIRECTIVES)
            self._skip_newlines()
        return directives

    def parse_directive(self) -> Directive:
        """Parse ``cache(...)``, ``cors(...)`` or ``auth(...) as name``."""
        name_tok = self._advance()
        args: list[Arg] = []
        if self._cur_is(TokenKind.LPAREN):
            self._advance()
            args = self._parse_directive_args()
            self._consume(TokenKind.RPAREN)

        return Directive(
            name=name_tok.literal,
            args=tuple(args),
            bind=self._parse_bind(),
            location=name_tok.location,
        )

    def _parse_directive_args(self) -> list[Arg]:
        args: list[Arg] = []
        while not self._cur_is(TokenKind.RPAREN) and not self._cur_is(TokenKind.EOF):
            if self._cur_is(TokenKind.NONE):
                self._advance()
                args.append(Arg(value=FlagValue(NONE_ARG), name=NONE_ARG))
            elif self._cur.is_word and self._peek_is(TokenKind.COLON):
                name = self._advance().literal
                self._advance()  # consume ':'
                args.append(Arg(value=self._parse_value(), name=name))
            elif self._cur.kind in (
                TokenKind.IDENT,
                TokenKind.INT,
                TokenKind.STRING,
                TokenKind.LBRACKET,
            ):
                args.append(Arg(value=self._parse_value(positional=True)))
            else:
                self._unexpected("in directive arguments")
                continue
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        return args

    def _parse_value(self, positional: bool = False) -> ArgValue:
        """Parse a directive argument value.

        A bare positional identifier such as ``public`` is a flag; any
        other identifier is a (possibly dotted) path or a one-argument
        function call such as ``hash(user)``.
        """
        tok = self._cur
        if tok.kind == TokenKind.STRING:
            self._advance()
            return StringValue(tok.literal)
        if tok.kind == TokenKind.INT:
            self._advance()
            number = self._to_int(tok)
            return StringValue(tok.literal) if number is None else IntValue(number)
        if tok.kind == TokenKind.LBRACKET:
            return self._parse_list()
        if tok.kind == TokenKind.IDENT:
            self._advance()
            if self._cur_is(TokenKind.LPAREN):
                self._advance()
                arg = ""
                if self._cur.is_word:
                    arg = self._advance().literal
                else:
                    self._error(f"expected argument for {tok.literal!r}")
                self._consume(TokenKind.RPAREN)
                return FuncCallValue(func=tok.literal, arg=arg)
            if self._cur_is(TokenKind.DOT):
                return IdentValue(self._parse_dotted_name(tok.literal))
            return FlagValue(tok.literal) if positional else IdentValue(tok.literal)

        if tok.kind != TokenKind.ILLEGAL:
            self._error(f"expected value, got {tok.kind} ({tok.literal!r})", tok)
        if tok.kind not in (TokenKind.RPAREN, TokenKind.COMMA, TokenKind.EOF):
            self._advance()
        return StringValue("")

    def _parse_list(self) -> ListValue:
        """Parse ``["a", "b"]``."""
        self._advance()  # consume '['
        items: list[str] = []
        while not self._cur_is(TokenKind.RBRACKET) and not self._cur_is(TokenKind.EOF):
            if self._cur.kind in (TokenKind.STRING, TokenKind.INT) or self._cur.is_word:
                items.append(self._advance().literal)
            else:
                self._unexpected("in list")
                continue
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        self._consume(TokenKind.RBRACKET)
        return ListValue(tuple(items))

    def _parse_bind(self) -> str | None:
        """Parse an optional ``as name``."""
        if not self._cur_is(TokenKind.AS):
            return None
        self._advance()
        if self._cur_is(TokenKind.IDENT):
            return self._advance().literal
        self._error(f"expected identifier after 'as', got {self._cur.kind} ({self._cur.literal!r})")
        return None

    # ------------------------------------------------------------------
    # Routes and pipeline steps
    # ------------------------------------------------------------------

    def parse_route(self) -> Route:
        """Parse ``METHOD /path``, its directives and its ``|>`` steps."""
        method_tok = self._advance()
        path = self._join_until(TokenKind.NEWLINE)
        if not path:
            self._error(f"expected path after {method_tok.literal}", method_tok)
        self._skip_newlines()

        directives = self._parse_directives()

        steps: list[PipelineStep] = []
        while self._cur_is(TokenKind.PIPE):
            step = self.parse_pipeline_step()
            if step is not None:
                steps.append(step)
            self._finish_statement("after pipeline step")
            self._skip_newlines()

        return Route(
            method=method_tok.literal,
            path=path,
            directives=tuple(directives),
            steps=tuple(steps),
            location=method_tok.location,
        )

    def parse_pipeline_step(self) -> PipelineStep | None:
        """Parse one ``|> step [as name] [~> status {...}]``."""
        pipe_tok = self._advance()
        kind = self._cur.kind

        body: StepBody
        if kind == TokenKind.INPUT:
            body = InputStep(tuple(self._parse_entries("input", self._parse_input_field)))
        elif kind == TokenKind.VALIDATE:
            body = ValidateStep(tuple(self._parse_entries("validate", self._parse_validate_rule)))
        elif kind == TokenKind.TRANSFORM:
            body = TransformStep(
                tuple(self._parse_entries("transform", self._parse_transform_field))
            )
        elif kind == TokenKind.GUARD:
            body = self._parse_guard()
        elif kind == TokenKind.MATCH:
            body = self._parse_match()
        elif kind == TokenKind.RESPOND:
            body = self._parse_respond()
        elif kind == TokenKind.IDENT:
            body = self._parse_package_call()
        else:
            if kind != TokenKind.ILLEGAL:
                self._error(f"expected step keyword, got {kind} ({self._cur.literal!r})")
            self._skip_to_next_statement()
            return None

        bind = self._parse_bind()
        error_flow = self._parse_error_flow() if self._cur_is(TokenKind.ERROR_FLOW) else None
        return PipelineStep(body=body, bind=bind, error_flow=error_flow, location=pipe_tok.location)

    def _parse_entries(self, keyword: str, parse_entry: Callable[[], _T | None]) -> list[_T]:
        """Parse ``keyword(entry, entry, ...)`` where each entry starts with a field name."""
        if not self._expect_peek(TokenKind.LPAREN):
            self._advance()
            self._skip_to_next_statement()
            return []
        self._advance()  # consume '('

        entries: list[_T] = []
        while not self._cur_is(TokenKind.RPAREN) and not self._cur_is(TokenKind.EOF):
            if not self._cur.is_word:
                self._unexpected(f"in {keyword}(...)")
                continue
            entry = parse_entry()
            if entry is not None:
                entries.append(entry)
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        self._consume(TokenKind.RPAREN)
        return entries

    def _parse_field_colon(self, field_name: str) -> bool:
        """Consume the ``:`` after a field name, skipping the entry if it is missing."""
        if self._cur_is(TokenKind.COLON):
            self._advance()
            return True
        self._error(
            f"expected ':' after {field_name!r}, got {self._cur.kind} ({self._cur.literal!r})"
        )
        self._skip_until(TokenKind.COMMA, TokenKind.RPAREN)
        return False

    def _parse_input_field(self) -> InputField | None:
        """Parse ``name: source.path``."""
        name = self._advance().literal
        if not self._parse_field_colon(name):
            return None
        source = self._parse_dotted_name()
        if not source:
            self._error(f"expected input source for {name!r}")
            return None
        return InputField(name=name, source=source)

    def _parse_validate_rule(self) -> ValidateRule | None:
        """Parse ``field: constraint & constraint(args) ...``."""
        field = self._advance().literal
        if not self._parse_field_colon(field):
            return None
        constraints: list[Constraint] = []
        while True:
            constraint = self._parse_constraint()
            if constraint is not None:
                constraints.append(constraint)
            if not self._cur_is(TokenKind.AMPERSAND):
                break
            self._advance()
        return ValidateRule(field=field, constraints=tuple(constraints))

    def _parse_constraint(self) -> Constraint | None:
        if not self._cur.is_word:
            self._error(f"expected constraint, got {self._cur.kind} ({self._cur.literal!r})")
            return None
        name = self._advance().literal
        args: list[ArgValue] = []
        if self._cur_is(TokenKind.LPAREN):
            self._advance()
            while not self._cur_is(TokenKind.RPAREN) and not self._cur_is(TokenKind.EOF):
                tok = self._cur
                if tok.kind == TokenKind.INT:
                    number = self._to_int(tok)
                    args.append(StringValue(tok.literal) if number is None else IntValue(number))
                elif tok.kind == TokenKind.STRING:
                    args.append(StringValue(tok.literal))
                elif tok.is_word:
                    args.append(IdentValue(tok.literal))
                else:
                    self._unexpected(f"in arguments of {name!r}")
                    continue
                self._advance()
                if self._cur_is(TokenKind.COMMA):
                    self._advance()
            self._consume(TokenKind.RPAREN)
        return Constraint(name=name, args=tuple(args))

    def _parse_transform_field(self) -> TransformField | None:
        """Parse ``name: fn(source)`` or ``name: fn``."""
        name = self._advance().literal
        if not self._parse_field_colon(name):
            return None
        if not self._cur.is_word:
            self._error(f"expected function for {name!r}, got {self._cur.kind} ({self._cur.literal!r})")
            return None
        func = self._advance().literal
        source: str | None = None
        if self._cur_is(TokenKind.LPAREN):
            self._advance()
            source = self._parse_dotted_name() or None
            if source is None:
                self._error(f"expected source variable for {func!r}")
            self._consume(TokenKind.RPAREN)
        return TransformField(name=name, func=func, source=source)

    def _parse_guard(self) -> GuardStep:
        """Parse ``guard expr`` or ``guard !expr``."""
        self._advance()  # consume 'guard'
        negated = False
        if self._cur_is(TokenKind.BANG):
            negated = True
            self._advance()
        expression = self._parse_dotted_name()
        if not expression:
            self._error(f"expected guard expression, got {self._cur.kind} ({self._cur.literal!r})")
        return GuardStep(expression=expression, negated=negated)

    def _parse_respond(self) -> RespondStep:
        """Parse ``respond status [{ body }] [with headers { ... }]``."""
        self._advance()  # consume 'respond'
        status = self._parse_status("respond")
        body: tuple[BodyField, ...] = ()
        headers: tuple[BodyField, ...] = ()
        if self._cur_is(TokenKind.LBRACE):
            body = self._parse_body_fields()
        if self._cur_is(TokenKind.WITH):
            self._advance()
            if self._consume(TokenKind.HEADERS):
                if self._cur_is(TokenKind.LBRACE):
                    headers = self._parse_body_fields()
                else:
                    self._consume(TokenKind.LBRACE)
        return RespondStep(status=status, body=body, headers=headers)

    def _parse_error_flow(self) -> ErrorFlow:
        """Parse ``~> status [{ body }]``."""
        arrow_tok = self._advance()
        status = self._parse_status("'~>'")
        body: tuple[BodyField, ...] = ()
        if self._cur_is(TokenKind.LBRACE):
            body = self._parse_body_fields()
        return ErrorFlow(status=status, body=body, location=arrow_tok.location)

    def _parse_status(self, after: str) -> int | None:
        if self._cur_is(TokenKind.INT):
            return self._to_int(self._advance())
        self._error(
            f"expected status code after {after}, got {self._cur.kind} ({self._cur.literal!r})"
        )
        return None

    def _parse_body_fields(self) -> tuple[BodyField, ...]:
        """Parse ``{ key: value, ... }`` where values are strings or dotted paths."""
        self._advance()  # consume '{'
        fields: list[BodyField] = []
        while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
            if not self._cur.is_word:
                self._unexpected("in body")
                continue
            key = self._advance().literal
            if self._consume(TokenKind.COLON):
                fields.append(BodyField(key=key, value=self._parse_scalar(key)))
            else:
                self._skip_until(TokenKind.COMMA, TokenKind.RBRACE)
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        self._consume(TokenKind.RBRACE)
        return tuple(fields)

    def _parse_scalar(self, key: str) -> str:
        """Parse a string literal, integer, or dotted path and return its text."""
        if self._cur.kind in (TokenKind.STRING, TokenKind.INT):
            return self._advance().literal
        if self._cur.is_word:
            return self._parse_dotted_name()
        self._error(f"expected value for {key!r}, got {self._cur.kind} ({self._cur.literal!r})")
        return ""

    def _parse_dotted_name(self, first: str | None = None) -> str:
        """Parse ``a.b.c``; *first* is the already-consumed leading segment, if any."""
        parts: list[str] = []
        if first is not None:
            parts.append(first)
        elif self._cur.is_word:
            parts.append(self._advance().literal)
        else:
            return ""
        while self._cur_is(TokenKind.DOT):
            self._advance()
            if not self._cur.is_word:
                self._error(f"expected identifier after '.', got {self._cur.kind} ({self._cur.literal!r})")
                break
            parts.append(self._advance().literal)
        return ".".join(parts)

    # ------------------------------------------------------------------
    # Package calls
    # ------------------------------------------------------------------

    def _parse_package_call(self) -> PackageCall:
        """Parse ``pkg(User, id, key: "value", { name, email })``."""
        package = self._advance().literal
        if not self._cur_is(TokenKind.LPAREN):
            return PackageCall(package=package)
        self._advance()

        args: list[PkgArg] = []
        while not self._cur_is(TokenKind.RPAREN) and not self._cur_is(TokenKind.EOF):
            tok = self._cur
            arg: PkgArg
            if tok.is_word and self._peek_is(TokenKind.COLON):
                self._advance()
                self._advance()  # consume ':'
                arg = NamedArg(name=tok.literal, value=self._parse_scalar(tok.literal))
            elif tok.kind == TokenKind.LBRACE:
                arg = ObjectArg(self._parse_object_fields())
            elif tok.kind == TokenKind.IDENT:
                text = self._parse_dotted_name()
                if text[:1].isupper() and "." not in text:
                    arg = TypeRefArg(text)
                else:
                    arg = PositionalArg(text)
            elif tok.kind in (TokenKind.INT, TokenKind.STRING):
                arg = PositionalArg(self._advance().literal)
            else:
                self._unexpected(f"in arguments of {package!r}")
                continue
            args.append(arg)
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        self._consume(TokenKind.RPAREN)
        return PackageCall(package=package, args=tuple(args))

    def _parse_object_fields(self) -> tuple[str, ...]:
        """Parse the ``{ name, email }`` shorthand."""
        self._advance()  # consume '{'
        fields: list[str] = []
        while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
            if self._cur.is_word:
                fields.append(self._advance().literal)
            else:
                self._unexpected("in object shorthand")
                continue
            if self._cur_is(TokenKind.COMMA):
                self._advance()
        self._consume(TokenKind.RBRACE)
        return tuple(fields)

    # ------------------------------------------------------------------
    # match
    # ------------------------------------------------------------------

    def _parse_match(self) -> MatchStep:
        """Parse ``match expr { pattern: action ... }``."""
        self._advance()  # consume 'match'
        scrutinee = self._parse_dotted_name()
        if not scrutinee:
            self._error(f"expected match expression, got {self._cur.kind} ({self._cur.literal!r})")
        if not self._consume(TokenKind.LBRACE):
            return MatchStep(scrutinee=scrutinee)

        arms: list[MatchArm] = []
        while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
            start = self._cur
            arm = self._parse_match_arm()
            if arm is not None:
                if arms and arms[-1].is_default:
                    if arm.is_default:
                        self._diag.error("duplicate wildcard arm in match block", arm.location)
                    else:
                        self._diag.error(
                            "wildcard arm must be the last arm in a match block",
                            arms[-1].location,
                        )
                arms.append(arm)
            elif self._cur is start:
                self._unexpected("in match block")
        self._consume(TokenKind.RBRACE)
        return MatchStep(scrutinee=scrutinee, arms=tuple(arms))

    def _skip_to_next_arm(self) -> None:
        """Skip to the next ``pattern:`` start, ``}`` or EOF (arms have no separator)."""
        while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
            # A regex arm's '/' was scanned as a path separator.
            self._rescan_as_regex()
            if self._peek_is(TokenKind.COLON) and (
                self._cur.kind
                in (TokenKind.STRING, TokenKind.INT, TokenKind.REGEX, TokenKind.UNDERSCORE)
                or self._cur.is_word
            ):
                return
            self._advance()

    def _parse_match_arm(self) -> MatchArm | None:
        start = self._cur
        pattern: Pattern | None
        if self._cur_is(TokenKind.UNDERSCORE):
            self._advance()
            pattern = WildcardPattern()
        else:
            pattern = self._parse_pattern()
        if pattern is None:
            self._skip_to_next_arm()
            return None

        if not self._cur_is(TokenKind.COLON):
            self._error(
                f"expected ':' after match pattern, got {self._cur.kind} ({self._cur.literal!r})"
            )
            self._skip_to_next_arm()
            return None
        self._advance()

        if self._cur_is(TokenKind.ERROR_FLOW):
            return MatchArm(
                pattern=pattern,
                action=ErrorOnly(),
                error_flow=self._parse_error_flow(),
                location=start.location,
            )

        action: ArmAction
        if self._cur_is(TokenKind.IDENT):
            if self._peek_is(TokenKind.LPAREN):
                action = self._parse_package_call()
            else:
                action = VarRef(self._advance().literal)
        else:
            self._error(
                f"expected match arm action, got {self._cur.kind} ({self._cur.literal!r})"
            )
            self._skip_to_next_arm()
            return None

        error_flow = self._parse_error_flow() if self._cur_is(TokenKind.ERROR_FLOW) else None
        return MatchArm(pattern=pattern, action=action, error_flow=error_flow, location=start.location)

    def _parse_pattern(self) -> Pattern | None:
        """Parse one match pattern: regex, string(s), integer or range, or bare word."""
        self._rescan_as_regex()
        tok = self._cur

        if tok.kind == TokenKind.REGEX:
            self._advance()
            return RegexPattern(tok.literal)

        if tok.kind == TokenKind.STRING:
            self._advance()
            if not self._cur_is(TokenKind.COMMA):
                return LiteralPattern(tok.literal)
            values = [tok.literal]
            while self._cur_is(TokenKind.COMMA):
                self._advance()
                if self._cur_is(TokenKind.STRING):
                    values.append(self._advance().literal)
                else:
                    self._error(
                        f"expected string in multi-value pattern, got {self._cur.kind} ({self._cur.literal!r})"
                    )
                    break
            return MultiPattern(tuple(values))

        if tok.kind == TokenKind.INT:
            self._advance()
            low = self._to_int(tok)
            if self._cur_is(TokenKind.RANGE):
                self._advance()
                if self._cur_is(TokenKind.INT):
                    high = self._to_int(self._advance())
                    if low is not None and high is not None:
                        return RangePattern(min=low, max=high)
                else:
                    self._error(f"expected integer after '..', got {self._cur.kind} ({self._cur.literal!r})")
            return LiteralPattern(tok.literal)

        if tok.is_word:
            # Bare words such as true, false and null are literals.
            self._advance()
            return LiteralPattern(tok.literal)

        if tok.kind != TokenKind.ILLEGAL:
            self._error(f"expected match pattern, got {tok.kind} ({tok.literal!r})", tok)
        return None


# ------------------------------------------------------------------
# Convenience function
# ------------------------------------------------------------------


def parse(source: str, filename: str = "<string>") -> tuple[FileNode, list[str]]:
    """Parse ReverHTTP source code.

    Returns:
        A ``(file_ast, diagnostics)`` tuple; each diagnostic is a string of
        the form ``file:line:column: message``.
    """
    parser = Parser(Lexer(source, filename))
    file = parser.parse_file()
    logger.debug(
        "parsed %s: %d route(s), %d diagnostic(s)",
        filename,
        len(file.routes),
        len(parser.diagnostics),
    )
    return file, parser.errors
