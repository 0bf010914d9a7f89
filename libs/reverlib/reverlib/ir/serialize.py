"""Render the IR tree as plain data, JSON text or YAML text.

Field presence follows "omit if empty": optional fields that are None,
empty strings or empty collections are left out.  The exceptions are
``routes`` and each route's ``output`` (always present), the required keys
of steps and match blocks, and a route's ``cors`` when it was explicitly
disabled, which is emitted as ``null``.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from reverlib.ir import nodes as ir


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    """Set *key* unless *value* is absent or empty."""
    if value is None or value == "" or value == {} or value == [] or value == ():
        return
    out[key] = value


def _error(err: ir.ErrorResponse | None) -> dict[str, Any] | None:
    if err is None:
        return None
    out: dict[str, Any] = {"status": err.status}
    _put(out, "body", dict(err.body))
    return out


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


def _cache(cache: ir.Cache) -> dict[str, Any]:
    out: dict[str, Any] = {}
    _put(out, "max_age", cache.max_age)
    _put(out, "s_maxage", cache.s_maxage)
    _put(out, "visibility", cache.visibility)
    _put(out, "no_cache", cache.no_cache)
    _put(out, "no_store", cache.no_store)
    if isinstance(cache.etag, ir.EtagFunction):
        out["etag"] = {"fn": cache.etag.fn, "from": cache.etag.from_}
    else:
        _put(out, "etag", cache.etag)
    _put(out, "last_modified", cache.last_modified)
    _put(out, "vary", list(cache.vary))
    return out


def _cors(cors: ir.Cors) -> dict[str, Any]:
    out: dict[str, Any] = {}
    _put(out, "origins", list(cors.origins))
    _put(out, "methods", list(cors.methods))
    _put(out, "headers", list(cors.headers))
    _put(out, "expose_headers", list(cors.expose_headers))
    _put(out, "max_age", cors.max_age)
    _put(out, "credentials", cors.credentials)
    return out


def _auth(auth: ir.Auth) -> dict[str, Any]:
    out: dict[str, Any] = {}
    _put(out, "method", auth.method)
    _put(out, "roles", list(auth.roles))
    _put(out, "permissions", list(auth.permissions))
    _put(out, "bind", auth.bind)
    return out


def _defaults(defaults: ir.Defaults) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if defaults.cache is not None:
        out["cache"] = _cache(defaults.cache)
    if defaults.cors is not None:
        out["cors"] = _cors(defaults.cors)
    if defaults.auth is not None:
        out["auth"] = _auth(defaults.auth)
    return out


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def _validate(validate: ir.Validate) -> dict[str, Any]:
    rules: dict[str, Any] = {}
    for name, rule in validate.rules.items():
        entry: dict[str, Any] = {}
        _put(entry, "type", rule.type)
        _put(entry, "min", rule.min)
        _put(entry, "max", rule.max)
        _put(entry, "format", rule.format)
        rules[name] = entry
    out: dict[str, Any] = {"rules": rules}
    _put(out, "error", _error(validate.error))
    return out


def _transform(transform: ir.Transform) -> dict[str, Any]:
    out: dict[str, Any] = {}
    _put(out, "cast", transform.cast)
    _put(out, "fn", transform.fn)
    _put(out, "from", transform.from_)
    return out


def _package_input(data: ir.PackageInput) -> dict[str, Any]:
    return {key: dict(value) if isinstance(value, dict) else value for key, value in data.items()}


def _pattern(pattern: ir.Pattern) -> dict[str, Any]:
    if isinstance(pattern, ir.ValuePattern):
        return {"value": pattern.value}
    if isinstance(pattern, ir.InPattern):
        return {"in": list(pattern.values)}
    if isinstance(pattern, ir.RangePattern):
        return {"range": {"min": pattern.min, "max": pattern.max}}
    return {"regex": pattern.regex}


def _arm(arm: ir.MatchArm) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if arm.pattern is not None:
        out["pattern"] = _pattern(arm.pattern)
    _put(out, "use", arm.use)
    _put(out, "input", _package_input(arm.input))
    _put(out, "ref", arm.ref)
    _put(out, "error", _error(arm.error))
    return out


def _match_default(default: ir.MatchDefault) -> dict[str, Any]:
    if isinstance(default, ir.DefaultError):
        return {"error": _error(default.error)}
    if isinstance(default, ir.DefaultRef):
        out: dict[str, Any] = {"ref": default.ref}
        _put(out, "error", _error(default.error))
        return out
    return _arm(default)


def _step(step: ir.ProcessStep) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if isinstance(step, ir.PackageStep):
        _put(out, "bind", step.bind)
        out["use"] = step.use
        out["input"] = _package_input(step.input)
    elif isinstance(step, ir.GuardStep):
        if isinstance(step.guard, ir.NotExpr):
            out["guard"] = {"not": step.guard.expr}
        else:
            out["guard"] = step.guard
    else:
        _put(out, "bind", step.bind)
        match: dict[str, Any] = {
            "on": step.match.on,
            "arms": [_arm(arm) for arm in step.match.arms],
        }
        if step.match.default is not None:
            match["default"] = _match_default(step.match.default)
        out["match"] = match
    _put(out, "error", _error(step.error))
    return out


def _output(output: ir.Output) -> dict[str, Any]:
    out: dict[str, Any] = {"status": output.status}
    _put(out, "body", dict(output.body))
    _put(out, "headers", dict(output.headers))
    return out


def _route(route: ir.Route) -> dict[str, Any]:
    out: dict[str, Any] = {"route": {"method": route.method, "path": route.path}}
    if route.auth is not None:
        out["auth"] = _auth(route.auth)
    if route.cache is not None:
        out["cache"] = _cache(route.cache)
    if isinstance(route.cors, ir.CorsDisabled):
        out["cors"] = None
    elif route.cors is not None:
        out["cors"] = _cors(route.cors)
    _put(out, "input", {name: {"from": src.from_} for name, src in route.input.items()})
    if route.validate is not None:
        out["validate"] = _validate(route.validate)
    _put(out, "transform_in", {name: _transform(t) for name, t in route.transform_in.items()})
    if route.process is not None:
        out["process"] = {"steps": [_step(s) for s in route.process.steps]}
    out["output"] = _output(route.output)
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def to_dict(root: ir.Root) -> dict[str, Any]:
    """Render *root* as JSON-compatible plain data in document key order."""
    out: dict[str, Any] = {"version": root.version}
    imports: dict[str, Any] = {}
    for alias, imp in root.imports.items():
        entry: dict[str, Any] = {"source": imp.source}
        _put(entry, "version", imp.version)
        if imp.local:
            entry["local"] = True
        imports[alias] = entry
    _put(out, "imports", imports)
    _put(out, "types", {name: dict(fields) for name, fields in root.types.items()})
    if root.defaults is not None:
        out["defaults"] = _defaults(root.defaults)
    out["routes"] = [_route(r) for r in root.routes]
    return out


def to_json(root: ir.Root, indent: int | None = 2) -> str:
    """Render *root* as JSON text ending in a newline.

    ``indent=None`` or ``0`` produces compact single-line output.
    """
    if not indent:
        return json.dumps(to_dict(root), ensure_ascii=False, separators=(",", ":")) + "\n"
    return json.dumps(to_dict(root), ensure_ascii=False, indent=indent) + "\n"


def to_yaml(root: ir.Root) -> str:
    """Render *root* as YAML text, keeping document key order."""
    return yaml.safe_dump(to_dict(root), sort_keys=False, allow_unicode=True)
