"""Load a BuildPlan from a declarative YAML/JSON document."""

from __future__ import annotations

import os
from string import Template
from typing import Any, Mapping, Optional

import yaml

from boxplan.errors import PlanValidationError

from .build_plan import BuildPlan
from .builder import PlanBuilder
from .guards import Guard

_GUARD_KEYS: dict[str, str] = {
    "unless_dir": "dir_missing",
    "if_dir": "dir_exists",
    "unless_path": "path_missing",
    "if_path": "path_exists",
}

_TOP_LEVEL_KEYS = {"from", "vars", "steps"}


def load_plan_file(
    path: str,
    *,
    overrides: Optional[Mapping[str, str]] = None,
) -> BuildPlan:
    """
    Read a plan document from disk. JSON is accepted too (it is valid YAML).

    Raises:
        PlanValidationError: if the file is unreadable or the document invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as exc:
        raise PlanValidationError(
            f"Cannot read plan file: {path}",
            details={"path": os.fspath(path)},
            cause=exc,
        ) from exc
    return load_plan(content, overrides=overrides)


def load_plan(
    content: str,
    *,
    overrides: Optional[Mapping[str, str]] = None,
) -> BuildPlan:
    """Parse plan document text."""
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise PlanValidationError("Plan document is not valid YAML", cause=exc) from exc
    return plan_from_document(doc, overrides=overrides)


def plan_from_document(
    doc: Any,
    *,
    overrides: Optional[Mapping[str, str]] = None,
) -> BuildPlan:
    """Build a plan from an already-parsed document (dict)."""
    if not isinstance(doc, dict):
        raise PlanValidationError("Plan document must be a mapping")

    unknown = set(doc) - _TOP_LEVEL_KEYS
    if unknown:
        raise PlanValidationError(
            "Unknown top-level keys in plan document",
            details={"keys": sorted(str(k) for k in unknown)},
        )

    variables = _read_vars(doc.get("vars"))
    if overrides:
        variables.update({str(k): str(v) for k, v in overrides.items()})

    base_image = doc.get("from")
    if not isinstance(base_image, str):
        raise PlanValidationError("Plan document requires 'from' (base image)")

    builder = PlanBuilder(_subst(base_image, variables))

    steps = doc.get("steps")
    if steps is None:
        steps = []
    if not isinstance(steps, list):
        raise PlanValidationError("'steps' must be a list")

    for index, item in enumerate(steps):
        try:
            _add_step(builder, item, variables)
        except PlanValidationError as exc:
            exc.details.setdefault("index", index)
            raise

    return builder.build()


def _read_vars(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise PlanValidationError("'vars' must be a mapping")
    variables: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, (dict, list)) or value is None:
            raise PlanValidationError(f"Variable {key} must be a scalar")
        # Earlier variables may be referenced by later ones.
        variables[str(key)] = _subst(str(value), variables)
    return variables


def _add_step(builder: PlanBuilder, item: Any, variables: dict[str, str]) -> None:
    if not isinstance(item, dict) or len(item) != 1:
        raise PlanValidationError("Each step must be a mapping with exactly one directive")

    (name, body), = item.items()

    if name == "copy":
        if isinstance(body, list) and len(body) == 2:
            src, dst = body
        elif isinstance(body, dict):
            src, dst = body.get("src"), body.get("dst")
        else:
            raise PlanValidationError("copy expects {src, dst} or [src, dst]")
        builder.copy(
            _subst(_str(src, "copy.src"), variables),
            _subst(_str(dst, "copy.dst"), variables),
        )
        return

    if name == "workdir":
        path = body.get("path") if isinstance(body, dict) else body
        builder.workdir(_subst(_str(path, "workdir.path"), variables))
        return

    if name == "run":
        if isinstance(body, str):
            builder.run(_subst(body, variables))
            return
        if not isinstance(body, dict):
            raise PlanValidationError("run expects a command string or a mapping")
        command = _subst(_str(body.get("command"), "run.command"), variables)
        builder.run(
            command,
            guard=_read_guard(body, variables),
            env=_read_env(body.get("env"), variables),
            note=body.get("note"),
        )
        return

    if name == "set_exec":
        if not isinstance(body, dict):
            raise PlanValidationError("set_exec expects a mapping with entrypoint/cmd")
        builder.set_exec(
            entrypoint=_str_list(body.get("entrypoint"), "set_exec.entrypoint", variables),
            cmd=_str_list(body.get("cmd"), "set_exec.cmd", variables),
        )
        return

    raise PlanValidationError(f"Unknown directive: {name}", details={"directive": str(name)})


def _read_guard(body: dict[str, Any], variables: dict[str, str]) -> Guard:
    present = [k for k in _GUARD_KEYS if k in body]
    if not present:
        return Guard()
    if len(present) > 1:
        raise PlanValidationError(
            "run accepts at most one guard",
            details={"guards": present},
        )
    key = present[0]
    path = _subst(_str(body[key], f"run.{key}"), variables)
    return Guard(_GUARD_KEYS[key], path)  # type: ignore[arg-type]


def _read_env(raw: Any, variables: dict[str, str]) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise PlanValidationError("run.env must be a mapping")
    return {str(k): _subst(str(v), variables) for k, v in raw.items()}


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise PlanValidationError(f"{what} must be a string")
    return value


def _str_list(value: Any, what: str, variables: dict[str, str]) -> Optional[list[str]]:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PlanValidationError(f"{what} must be a list of strings")
    return [_subst(v, variables) for v in value]


def _subst(value: str, variables: dict[str, str]) -> str:
    try:
        return Template(value).substitute(variables)
    except KeyError as exc:
        raise PlanValidationError(
            f"Undefined variable: {exc.args[0]}",
            details={"variable": exc.args[0]},
            cause=exc,
        ) from exc
    except ValueError as exc:
        raise PlanValidationError(
            f"Invalid variable reference in: {value}",
            cause=exc,
        ) from exc
