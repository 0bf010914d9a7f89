"""AST to IR lowering for ReverHTTP.

:func:`generate` is total: it accepts any AST the parser can produce,
including partially recovered ones, and never raises.  Missing or
unrecognized pieces are dropped rather than reported; reporting is the
parser's job.
"""

from __future__ import annotations

import logging
import re

from reverlib.core.directives import NONE_ARG, DirectiveKind
from reverlib.core.types import PrimitiveType
from reverlib.core.values import (
    FuncCallValue,
    IdentValue,
    IntValue,
    ListValue,
    StringValue,
    value_text,
)
from reverlib.ir import nodes as ir
from reverlib.parser import ast_nodes as ast

logger = logging.getLogger(__name__)

IR_VERSION = "0.1"

_INTEGER = re.compile(r"^[+-]?[0-9]+$")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def generate(file: ast.FileNode) -> ir.Root:
    """Lower a parsed file to an IR document."""
    imports: dict[str, ir.Import] = {}
    for imp in file.imports:
        if imp.is_local:
            imports[imp.alias] = ir.Import(source=imp.source, local=True)
        else:
            imports[imp.alias] = ir.Import(source=imp.source, version=imp.version)

    types = {td.name: {f.name: f.type_name for f in td.fields} for td in file.types}

    defaults = _gen_defaults(file.defaults) if file.defaults is not None else None
    routes = tuple(_gen_route(route) for route in file.routes)

    logger.debug("generated IR for %d route(s)", len(routes))
    return ir.Root(
        version=IR_VERSION,
        imports=imports,
        types=types,
        defaults=defaults,
        routes=routes,
    )


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


def _is_none(directive: ast.Directive) -> bool:
    return any(arg.name == NONE_ARG for arg in directive.args)


def _list(value: ast.ArgValue) -> tuple[str, ...]:
    return value.items if isinstance(value, ListValue) else ()


def _int(value: ast.ArgValue) -> int | None:
    return value.value if isinstance(value, IntValue) else None


def _gen_cache(directive: ast.Directive) -> ir.Cache:
    max_age: int | None = None
    s_maxage: int | None = None
    visibility = ""
    no_cache: bool | None = None
    no_store: bool | None = None
    etag: str | ir.EtagFunction | None = None
    last_modified = ""
    vary: tuple[str, ...] = ()

    for arg in directive.args:
        if arg.name == "max-age":
            max_age = _int(arg.value)
        elif arg.name == "s-maxage":
            s_maxage = _int(arg.value)
        elif arg.name == "etag":
            if isinstance(arg.value, FuncCallValue):
                etag = ir.EtagFunction(fn=arg.value.func, from_=arg.value.arg)
            else:
                etag = value_text(arg.value) or None
        elif arg.name == "last-modified":
            last_modified = value_text(arg.value)
        elif arg.name == "vary":
            vary = _list(arg.value)
        elif arg.name is None:
            flag = value_text(arg.value)
            if flag in ("public", "private"):
                visibility = flag
            elif flag == "no-cache":
                no_cache = True
            elif flag == "no-store":
                no_store = True

    return ir.Cache(
        max_age=max_age,
        s_maxage=s_maxage,
        visibility=visibility,
        no_cache=no_cache,
        no_store=no_store,
        etag=etag,
        last_modified=last_modified,
        vary=vary,
    )


def _gen_cors(directive: ast.Directive) -> ir.Cors:
    lists: dict[str, tuple[str, ...]] = {}
    max_age: int | None = None
    credentials: bool | None = None

    for arg in directive.args:
        if arg.name in ("origins", "methods", "headers", "expose-headers"):
            lists[arg.name] = _list(arg.value)
        elif arg.name == "max-age":
            max_age = _int(arg.value)
        elif arg.name is None and value_text(arg.value) == "credentials":
            credentials = True

    return ir.Cors(
        origins=lists.get("origins", ()),
        methods=lists.get("methods", ()),
        headers=lists.get("headers", ()),
        expose_headers=lists.get("expose-headers", ()),
        max_age=max_age,
        credentials=credentials,
    )


def _gen_auth(directive: ast.Directive) -> ir.Auth:
    method = ""
    roles: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()

    for arg in directive.args:
        if arg.name == "roles":
            roles = _list(arg.value)
        elif arg.name == "permissions":
            permissions = _list(arg.value)
        elif arg.name is None and not method:
            # The first positional argument names the scheme.
            method = value_text(arg.value)

    return ir.Auth(
        method=method,
        roles=roles,
        permissions=permissions,
        bind=directive.bind or "",
    )


def _gen_defaults(block: ast.DefaultsBlock) -> ir.Defaults:
    # ``none`` has no meaning here; every directive lowers to its object.
    cache: ir.Cache | None = None
    cors: ir.Cors | None = None
    auth: ir.Auth | None = None
    for directive in block.directives:
        kind = DirectiveKind.from_name(directive.name)
        if kind is DirectiveKind.CACHE:
            cache = _gen_cache(directive)
        elif kind is DirectiveKind.CORS:
            cors = _gen_cors(directive)
        elif kind is DirectiveKind.AUTH:
            auth = _gen_auth(directive)
    return ir.Defaults(cache=cache, cors=cors, auth=auth)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _gen_route(route: ast.Route) -> ir.Route:
    auth: ir.Auth | None = None
    cache: ir.Cache | None = None
    cors: ir.Cors | ir.CorsDisabled | None = None

    for directive in route.directives:
        kind = DirectiveKind.from_name(directive.name)
        if kind is DirectiveKind.CACHE:
            cache = _gen_cache(directive)
        elif kind is DirectiveKind.CORS:
            cors = ir.CorsDisabled() if _is_none(directive) else _gen_cors(directive)
        elif kind is DirectiveKind.AUTH:
            # auth(none) drops auth for the route instead of emitting null.
            auth = None if _is_none(directive) else _gen_auth(directive)

    inputs: dict[str, ir.InputSource] = {}
    validate: ir.Validate | None = None
    transform_in: dict[str, ir.Transform] = {}
    output = ir.Output()
    steps: list[ir.ProcessStep] = []

    for step in route.steps:
        body = step.body
        if isinstance(body, ast.InputStep):
            inputs = {f.name: ir.InputSource(from_=f.source) for f in body.fields}
        elif isinstance(body, ast.ValidateStep):
            validate = _gen_validate(body, step.error_flow)
        elif isinstance(body, ast.TransformStep):
            transform_in = {f.name: _gen_transform(f) for f in body.fields}
        elif isinstance(body, ast.RespondStep):
            output = ir.Output(
                status=body.status or 0,
                body=_fields(body.body),
                headers=_fields(body.headers),
            )
        elif isinstance(body, ast.GuardStep):
            guard: str | ir.NotExpr = ir.NotExpr(body.expression) if body.negated else body.expression
            steps.append(ir.GuardStep(guard=guard, error=_gen_error(step.error_flow)))
        elif isinstance(body, ast.MatchStep):
            steps.append(
                ir.MatchStep(
                    match=_gen_match(body),
                    bind=step.bind or "",
                    error=_gen_error(step.error_flow),
                )
            )
        elif isinstance(body, ast.PackageCall):
            steps.append(
                ir.PackageStep(
                    use=body.package,
                    input=_gen_package_input(body),
                    bind=step.bind or "",
                    error=_gen_error(step.error_flow),
                )
            )

    return ir.Route(
        method=route.method,
        path=route.path,
        auth=auth,
        cache=cache,
        cors=cors,
        input=inputs,
        validate=validate,
        transform_in=transform_in,
        process=ir.Process(steps=tuple(steps)) if steps else None,
        output=output,
    )


def _fields(fields: tuple[ast.BodyField, ...]) -> dict[str, str]:
    return {f.key: f.value for f in fields}


def _gen_error(flow: ast.ErrorFlow | None) -> ir.ErrorResponse | None:
    if flow is None:
        return None
    return ir.ErrorResponse(status=flow.status or 0, body=_fields(flow.body))


def _gen_validate(step: ast.ValidateStep, flow: ast.ErrorFlow | None) -> ir.Validate:
    rules: dict[str, ir.ValidateRule] = {}
    for rule in step.rules:
        type_name = ""
        minimum: int | None = None
        maximum: int | None = None
        fmt = ""
        for constraint in rule.constraints:
            first = constraint.args[0] if constraint.args else None
            if PrimitiveType.is_primitive(constraint.name):
                type_name = constraint.name
            elif constraint.name == "min" and isinstance(first, IntValue):
                minimum = first.value
            elif constraint.name == "max" and isinstance(first, IntValue):
                maximum = first.value
            elif constraint.name == "format" and isinstance(first, (StringValue, IdentValue)):
                fmt = value_text(first)
        rules[rule.field] = ir.ValidateRule(type=type_name, min=minimum, max=maximum, format=fmt)
    return ir.Validate(rules=rules, error=_gen_error(flow))


def _gen_transform(f: ast.TransformField) -> ir.Transform:
    if PrimitiveType.is_primitive(f.func):
        return ir.Transform(cast=f.func, from_=f.source or "")
    return ir.Transform(fn=f.func, from_=f.source or "")


# ---------------------------------------------------------------------------
# Package calls and match
# ---------------------------------------------------------------------------


def _gen_package_input(call: ast.PackageCall) -> ir.PackageInput:
    """Key package-call arguments for the IR.

    A positional value after a type reference is keyed ``id``; any other
    positional value is keyed by its own text.  Calls with several untyped
    positional values are not disambiguated further.
    """
    data: ir.PackageInput = {}
    for arg in call.args:
        if isinstance(arg, ast.NamedArg):
            data[arg.name] = arg.value
        elif isinstance(arg, ast.TypeRefArg):
            data["type"] = arg.name
        elif isinstance(arg, ast.ObjectArg):
            if arg.fields:
                data["data"] = {name: name for name in arg.fields}
        elif arg.value:
            if "type" in data:
                data["id"] = arg.value
            else:
                data[arg.value] = arg.value
    return data


def _gen_pattern(pattern: ast.Pattern) -> ir.Pattern | None:
    if isinstance(pattern, ast.LiteralPattern):
        text = pattern.value
        if _INTEGER.match(text):
            try:
                return ir.ValuePattern(int(text))
            except ValueError:
                # Past int()'s digit limit; kept as text.
                return ir.ValuePattern(text)
        if text in ("true", "false"):
            return ir.ValuePattern(text == "true")
        if text == "null":
            return ir.ValuePattern(None)
        return ir.ValuePattern(text)
    if isinstance(pattern, ast.MultiPattern):
        return ir.InPattern(pattern.values)
    if isinstance(pattern, ast.RangePattern):
        return ir.RangePattern(min=pattern.min, max=pattern.max)
    if isinstance(pattern, ast.RegexPattern):
        return ir.RegexPattern(pattern.source)
    return None


def _gen_default(arm: ast.MatchArm) -> ir.MatchDefault | None:
    error = _gen_error(arm.error_flow)
    action = arm.action
    if isinstance(action, ast.ErrorOnly):
        return ir.DefaultError(error) if error is not None else None
    if isinstance(action, ast.VarRef):
        return ir.DefaultRef(ref=action.name, error=error)
    if isinstance(action, ast.PackageCall):
        return ir.MatchArm(use=action.package, input=_gen_package_input(action), error=error)
    return None


def _gen_match(step: ast.MatchStep) -> ir.MatchBlock:
    arms: list[ir.MatchArm] = []
    default: ir.MatchDefault | None = None
    for arm in step.arms:
        if arm.is_default:
            default = _gen_default(arm)
            continue
        action = arm.action
        use = ""
        data: ir.PackageInput = {}
        ref = ""
        if isinstance(action, ast.PackageCall):
            use = action.package
            data = _gen_package_input(action)
        elif isinstance(action, ast.VarRef):
            ref = action.name
        arms.append(
            ir.MatchArm(
                pattern=_gen_pattern(arm.pattern),
                use=use,
                input=data,
                ref=ref,
                error=_gen_error(arm.error_flow),
            )
        )
    return ir.MatchBlock(on=step.scrutinee, arms=tuple(arms), default=default)
