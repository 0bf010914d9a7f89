"""Tests for the ReverHTTP parser."""

from __future__ import annotations

import sys

import pytest

from reverlib.core.values import FlagValue, FuncCallValue, IdentValue, IntValue, ListValue, StringValue
from reverlib.diagnostics import parse_diagnostic
from reverlib.parser.ast_nodes import (
    ErrorOnly,
    FileNode,
    GuardStep,
    InputStep,
    LiteralPattern,
    MatchStep,
    MultiPattern,
    NamedArg,
    ObjectArg,
    PackageCall,
    PositionalArg,
    RangePattern,
    RegexPattern,
    RespondStep,
    Route,
    TransformStep,
    TypeRefArg,
    ValidateStep,
    VarRef,
    WildcardPattern,
)
from reverlib.parser.parser import parse

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_ok(source: str) -> FileNode:
    """Parse *source* and assert no errors."""
    file, errors = parse(source, "<test>")
    assert errors == [], "\n".join(errors)
    return file


def parse_route(source: str) -> Route:
    """Parse a file holding exactly one route and return it."""
    file = parse_ok(source)
    assert len(file.routes) == 1
    return file.routes[0]


def parse_errors(source: str) -> list[str]:
    _, errors = parse(source, "<test>")
    return errors


USER_ROUTE = """\
GET /users/{id}
  |> input(id: path.id)
  |> validate(id: int & min(1))  ~> 400 { error: "invalid id" }
  |> respond 200 { id: user.id }
"""


# ---------------------------------------------------------------------------
# Imports and types
# ---------------------------------------------------------------------------


class TestImports:
    def test_remote_import(self) -> None:
        file = parse_ok("import db = github.com/reverhttp/postgres@v1.2.0\n")
        imp = file.imports[0]
        assert imp.alias == "db"
        assert imp.source == "github.com/reverhttp/postgres"
        assert imp.version == "v1.2.0"
        assert not imp.is_local

    def test_latest_version(self) -> None:
        file = parse_ok("import redis-cache = github.com/reverhttp/redis-cache@latest")
        assert file.imports[0].alias == "redis-cache"
        assert file.imports[0].version == "latest"

    def test_local_import(self) -> None:
        file = parse_ok("import helpers = @/lib/auth\n")
        imp = file.imports[0]
        assert imp.source == "@/lib/auth"
        assert imp.is_local
        assert imp.version == ""

    def test_remote_import_without_version(self) -> None:
        file, errors = parse("import db = github.com/x/db\n", "<test>")
        assert file.imports[0].version == ""
        assert any("remote import 'db' requires a version" in e for e in errors)

    def test_missing_alias(self) -> None:
        errors = parse_errors("import = github.com/x@v1\n")
        assert errors == ["<test>:1:8: expected IDENT, got = ('=')"]

    def test_import_order_preserved(self) -> None:
        file = parse_ok("import a = x.com/a@v1\nimport b = x.com/b@v2\n")
        assert [i.alias for i in file.imports] == ["a", "b"]


class TestTypes:
    def test_type_declaration(self) -> None:
        file = parse_ok("type User { id: int, name: string }")
        td = file.types[0]
        assert td.name == "User"
        assert [(f.name, f.type_name) for f in td.fields] == [("id", "int"), ("name", "string")]

    def test_multiline_type(self) -> None:
        file = parse_ok("type User {\n  id: int\n  email: string\n}\n")
        assert [f.name for f in file.types[0].fields] == ["id", "email"]

    def test_keyword_as_field_name(self) -> None:
        file = parse_ok("type Event { type: string }")
        assert file.types[0].fields[0].name == "type"

    def test_missing_colon_recovers(self) -> None:
        file, errors = parse("type User { id int, name: string }", "<test>")
        assert len(errors) == 1
        assert [f.name for f in file.types[0].fields] == ["name"]


# ---------------------------------------------------------------------------
# Defaults and directives
# ---------------------------------------------------------------------------


class TestDirectives:
    def test_defaults_block(self) -> None:
        file = parse_ok(
            "defaults\n"
            "  cache(public, max-age: 60)\n"
            '  cors(origins: ["*"], credentials)\n'
            "  auth(bearer)\n"
        )
        assert file.defaults is not None
        assert [d.name for d in file.defaults.directives] == ["cache", "cors", "auth"]

    def test_cache_arguments(self) -> None:
        route = parse_route(
            "GET /a\n  cache(public, max-age: 3600, etag: hash(user), vary: [\"Accept\"])\n"
            "  |> respond 200\n"
        )
        args = route.directives[0].args
        assert args[0].name is None and args[0].value == FlagValue("public")
        assert args[1].name == "max-age" and args[1].value == IntValue(3600)
        assert args[2].value == FuncCallValue("hash", "user")
        assert args[3].value == ListValue(("Accept",))

    def test_dotted_named_value(self) -> None:
        route = parse_route("GET /a\n  cache(last-modified: user.updated_at)\n")
        assert route.directives[0].args[0].value == IdentValue("user.updated_at")

    def test_string_value(self) -> None:
        route = parse_route('GET /a\n  cache(etag: "v1")\n')
        assert route.directives[0].args[0].value == StringValue("v1")

    def test_keyword_named_argument(self) -> None:
        route = parse_route('GET /a\n  cors(headers: ["Authorization"], max-age: 600)\n')
        args = route.directives[0].args
        assert args[0].name == "headers"
        assert args[0].value == ListValue(("Authorization",))

    def test_none_argument(self) -> None:
        route = parse_route("GET /a\n  cors(none)\n  auth(none)\n")
        assert all(d.args[0].name == "none" for d in route.directives)

    def test_auth_bind(self) -> None:
        route = parse_route('GET /a\n  auth(bearer, roles: ["admin"]) as user\n')
        directive = route.directives[0]
        assert directive.bind == "user"
        assert directive.args[1].value == ListValue(("admin",))

    def test_multiline_arguments(self) -> None:
        route = parse_route('GET /a\n  cors(\n    origins: ["a", "b"],\n    credentials\n  )\n')
        assert len(route.directives[0].args) == 2


# ---------------------------------------------------------------------------
# Routes and pipeline steps
# ---------------------------------------------------------------------------


class TestRoutes:
    def test_user_route(self) -> None:
        route = parse_route(USER_ROUTE)
        assert route.method == "GET"
        assert route.path == "/users/{id}"
        assert len(route.steps) == 3

        inp = route.steps[0].body
        assert isinstance(inp, InputStep)
        assert [(f.name, f.source) for f in inp.fields] == [("id", "path.id")]

        validate = route.steps[1]
        assert isinstance(validate.body, ValidateStep)
        constraints = validate.body.rules[0].constraints
        assert [c.name for c in constraints] == ["int", "min"]
        assert constraints[1].args == (IntValue(1),)
        assert validate.error_flow is not None
        assert validate.error_flow.status == 400
        assert [(f.key, f.value) for f in validate.error_flow.body] == [("error", "invalid id")]

        respond = route.steps[2].body
        assert isinstance(respond, RespondStep)
        assert respond.status == 200
        assert [(f.key, f.value) for f in respond.body] == [("id", "user.id")]

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"])
    def test_all_methods(self, method: str) -> None:
        assert parse_route(f"{method} /x\n  |> respond 204\n").method == method

    def test_step_count_matches_pipes(self) -> None:
        source = "POST /a\n  |> input(a: body.a)\n  |> guard a\n  |> store(a)\n  |> respond 201\n"
        assert len(parse_route(source).steps) == source.count("|>")

    def test_steps_on_one_line(self) -> None:
        route = parse_route("GET /a\n  |> guard ok |> respond 200\n")
        assert len(route.steps) == 2

    def test_multiple_routes(self) -> None:
        file = parse_ok("GET /a\n  |> respond 200\n\nPOST /b\n  |> respond 201\n")
        assert [(r.method, r.path) for r in file.routes] == [("GET", "/a"), ("POST", "/b")]

    def test_route_location(self) -> None:
        file = parse_ok("\n\nGET /a\n")
        loc = file.routes[0].location
        assert loc is not None
        assert (loc.line, loc.column) == (3, 1)

    def test_transform(self) -> None:
        route = parse_route("POST /a\n  |> transform(id: int(id), name: trim(name), now: timestamp)\n")
        body = route.steps[0].body
        assert isinstance(body, TransformStep)
        assert [(f.name, f.func, f.source) for f in body.fields] == [
            ("id", "int", "id"),
            ("name", "trim", "name"),
            ("now", "timestamp", None),
        ]

    def test_validate_format_and_max(self) -> None:
        route = parse_route("POST /a\n  |> validate(email: string & format(email), age: int & max(150))\n")
        body = route.steps[0].body
        assert isinstance(body, ValidateStep)
        assert body.rules[0].constraints[1].args == (IdentValue("email"),)
        assert body.rules[1].constraints[1].args == (IntValue(150),)

    def test_guard(self) -> None:
        route = parse_route('POST /a\n  |> guard !existing ~> 409 { error: "exists" }\n')
        step = route.steps[0]
        assert step.body == GuardStep(expression="existing", negated=True)
        assert step.error_flow is not None and step.error_flow.status == 409

    def test_guard_dotted(self) -> None:
        route = parse_route("POST /a\n  |> guard user.active\n")
        assert route.steps[0].body == GuardStep(expression="user.active")

    def test_respond_with_headers(self) -> None:
        route = parse_route(
            'POST /users\n  |> respond 201 { id: user.id } with headers { location: "/users" }\n'
        )
        body = route.steps[0].body
        assert isinstance(body, RespondStep)
        assert [(f.key, f.value) for f in body.headers] == [("location", "/users")]

    def test_error_flow_without_body(self) -> None:
        route = parse_route("GET /a\n  |> fetch(User, id) ~> 404\n")
        flow = route.steps[0].error_flow
        assert flow is not None
        assert flow.status == 404
        assert flow.body == ()


class TestPackageCalls:
    def test_type_ref_and_positional(self) -> None:
        route = parse_route('GET /a\n  |> fetch(User, id) as user ~> 404 { error: "not found" }\n')
        step = route.steps[0]
        assert step.body == PackageCall("fetch", (TypeRefArg("User"), PositionalArg("id")))
        assert step.bind == "user"

    def test_object_shorthand(self) -> None:
        route = parse_route("POST /a\n  |> create(User, { name, email }) as user\n")
        body = route.steps[0].body
        assert isinstance(body, PackageCall)
        assert body.args[1] == ObjectArg(("name", "email"))

    def test_named_arguments(self) -> None:
        route = parse_route('GET /a\n  |> redis-cache(key: "user", ttl: 60, from: user.id)\n')
        body = route.steps[0].body
        assert isinstance(body, PackageCall)
        assert body.package == "redis-cache"
        assert body.args == (
            NamedArg("key", "user"),
            NamedArg("ttl", "60"),
            NamedArg("from", "user.id"),
        )

    def test_literal_positionals(self) -> None:
        route = parse_route('GET /a\n  |> log("hit", 3)\n')
        body = route.steps[0].body
        assert isinstance(body, PackageCall)
        assert body.args == (PositionalArg("hit"), PositionalArg("3"))


# ---------------------------------------------------------------------------
# Match
# ---------------------------------------------------------------------------

MATCH_ROUTE = """\
GET /dashboard
  |> match user.role {
    /^admin/: admin-view(user)
    "user", "member": fetch(Profile, id)
    200..299: ok
    null: ~> 404
    _: ~> 403 { error: "forbidden" }
  } as view
  |> respond 200
"""


class TestMatch:
    def test_arms(self) -> None:
        route = parse_route(MATCH_ROUTE)
        step = route.steps[0]
        assert step.bind == "view"
        body = step.body
        assert isinstance(body, MatchStep)
        assert body.scrutinee == "user.role"
        patterns = [arm.pattern for arm in body.arms]
        assert patterns == [
            RegexPattern("^admin"),
            MultiPattern(("user", "member")),
            RangePattern(200, 299),
            LiteralPattern("null"),
            WildcardPattern(),
        ]

    def test_arm_actions(self) -> None:
        body = parse_route(MATCH_ROUTE).steps[0].body
        assert isinstance(body, MatchStep)
        assert body.arms[0].action == PackageCall("admin-view", (PositionalArg("user"),))
        assert body.arms[2].action == VarRef("ok")
        assert body.arms[3].action == ErrorOnly()
        default = body.arms[4]
        assert default.is_default
        assert default.error_flow is not None and default.error_flow.status == 403

    def test_regex_as_first_and_later_arm(self) -> None:
        route = parse_route('GET /a\n  |> match path {\n    "x": a\n    /[a-z]{2}\\/.*/: b\n  }\n')
        body = route.steps[0].body
        assert isinstance(body, MatchStep)
        assert body.arms[1].pattern == RegexPattern("[a-z]{2}\\/.*")

    def test_arm_error_flow(self) -> None:
        route = parse_route('GET /a\n  |> match kind {\n    "a": fetch(A, id) ~> 404\n  }\n')
        body = route.steps[0].body
        assert isinstance(body, MatchStep)
        assert body.arms[0].error_flow is not None

    def test_integer_literal_pattern(self) -> None:
        route = parse_route("GET /a\n  |> match code {\n    404: missing\n  }\n")
        body = route.steps[0].body
        assert isinstance(body, MatchStep)
        assert body.arms[0].pattern == LiteralPattern("404")

    def test_wildcard_not_last(self) -> None:
        errors = parse_errors('GET /a\n  |> match r {\n    _: ~> 400\n    "a": fetch(A)\n  }\n')
        assert any("wildcard arm must be the last arm in a match block" in e for e in errors)

    def test_duplicate_wildcard(self) -> None:
        errors = parse_errors("GET /a\n  |> match r {\n    _: a\n    _: b\n  }\n")
        assert any("duplicate wildcard arm" in e for e in errors)


# ---------------------------------------------------------------------------
# Diagnostics and recovery
# ---------------------------------------------------------------------------


class TestDiagnostics:
    def test_diagnostic_format(self) -> None:
        _, errors = parse("GET\n", "api.rever")
        assert errors
        parsed = parse_diagnostic(errors[0])
        assert parsed is not None
        assert (parsed.line, parsed.column) == (1, 1)
        assert errors[0].startswith("api.rever:1:1: ")

    def test_unknown_step(self) -> None:
        errors = parse_errors("GET /a\n  |> 123\n")
        assert errors == ["<test>:2:6: expected step keyword, got INT ('123')"]

    def test_illegal_token_reported_once(self) -> None:
        errors = parse_errors("GET /a$b\n  |> respond 200\n")
        assert errors == ["<test>:1:7: illegal token '$'"]

    def test_malformed_directive_then_valid_route(self) -> None:
        source = "GET /a\n  cache max-age 60\n  |> respond 200\n\nGET /b\n  |> respond 200\n"
        file, errors = parse(source, "<test>")
        assert [r.path for r in file.routes] == ["/a", "/b"]
        assert len(errors) == 1
        parsed = parse_diagnostic(errors[0])
        assert parsed is not None and parsed.line == 2

    def test_missing_directive_value(self) -> None:
        file, errors = parse("GET /a\n  cache(max-age: )\n  |> respond 200\n", "<test>")
        assert len(errors) == 1
        assert len(file.routes[0].steps) == 1

    def test_leftover_tokens_after_step(self) -> None:
        file, errors = parse("GET /a\n  |> guard ok extra\n  |> respond 200\n", "<test>")
        assert len(errors) == 1
        assert "unexpected token IDENT ('extra')" in errors[0]
        assert len(file.routes[0].steps) == 2

    def test_missing_status(self) -> None:
        errors = parse_errors("GET /a\n  |> respond\n")
        assert any("expected status code after respond" in e for e in errors)

    def test_unclosed_body_terminates(self) -> None:
        file, errors = parse("GET /a\n  |> respond 200 { id: x\n", "<test>")
        assert errors
        assert len(file.routes) == 1

    def test_garbage_never_hangs(self) -> None:
        source = "GET /a\n  |> input(id: path.id, 42, ] )\n  |> match x { ) ( : }\n  |> respond 200 { : }\n"
        file, errors = parse(source, "<test>")
        assert errors
        assert len(file.routes) == 1

    def test_stray_top_level_token(self) -> None:
        file, errors = parse("respond 200\nGET /a\n", "<test>")
        assert len(file.routes) == 1
        assert errors[0].startswith("<test>:1:1: unexpected token respond")

    def test_multiple_errors_collected(self) -> None:
        source = "import = x\ntype { }\nGET /a\n  |> 42\n"
        assert len(parse_errors(source)) == 3

    def test_regex_arm_after_malformed_arm(self) -> None:
        source = 'GET /a\n  |> match r {\n    "a" x\n    /^b$/: y\n    "c": z\n  }\n'
        file, errors = parse(source, "<test>")
        assert len(errors) == 1
        assert "expected ':' after match pattern" in errors[0]
        step = file.routes[0].steps[0].body
        assert isinstance(step, MatchStep)
        assert [arm.pattern for arm in step.arms] == [RegexPattern("^b$"), LiteralPattern("c")]


# ---------------------------------------------------------------------------
# Integer literals beyond int()'s string conversion limit
# ---------------------------------------------------------------------------

HUGE = "9" * 5000


@pytest.fixture
def int_digit_limit():
    if not hasattr(sys, "set_int_max_str_digits"):
        pytest.skip("interpreter has no integer string conversion limit")
    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(4300)
    yield
    sys.set_int_max_str_digits(previous)


@pytest.mark.usefixtures("int_digit_limit")
class TestIntegerLimits:
    def test_status(self) -> None:
        file, errors = parse(f"GET /a\n  |> respond {HUGE}\n", "<test>")
        assert errors == ["<test>:2:14: integer literal too large (5000 digits)"]
        body = file.routes[0].steps[0].body
        assert isinstance(body, RespondStep)
        assert body.status is None

    def test_error_flow_status(self) -> None:
        file, errors = parse(f"GET /a\n  |> guard ok ~> {HUGE}\n", "<test>")
        assert len(errors) == 1
        assert file.routes[0].steps[0].error_flow is not None
        assert file.routes[0].steps[0].error_flow.status is None

    def test_directive_argument(self) -> None:
        file, errors = parse(f"GET /a\n  cache(max-age: {HUGE})\n", "<test>")
        assert len(errors) == 1
        assert file.routes[0].directives[0].args[0].value == StringValue(HUGE)

    def test_constraint_argument(self) -> None:
        file, errors = parse(f"POST /a\n  |> validate(x: int & max({HUGE}))\n", "<test>")
        assert len(errors) == 1
        body = file.routes[0].steps[0].body
        assert isinstance(body, ValidateStep)
        assert body.rules[0].constraints[1].args == (StringValue(HUGE),)

    def test_range_bound(self) -> None:
        file, errors = parse(f"GET /a\n  |> match x {{\n    1..{HUGE}: y\n  }}\n", "<test>")
        assert len(errors) == 1
        assert "integer literal too large" in errors[0]
        body = file.routes[0].steps[0].body
        assert isinstance(body, MatchStep)
        assert body.arms[0].pattern == LiteralPattern("1")
        assert body.arms[0].action == VarRef("y")

    def test_literal_pattern(self) -> None:
        file, errors = parse(f"GET /a\n  |> match x {{\n    {HUGE}: y\n  }}\n", "<test>")
        assert len(errors) == 1
        body = file.routes[0].steps[0].body
        assert isinstance(body, MatchStep)
        assert body.arms[0].pattern == LiteralPattern(HUGE)
