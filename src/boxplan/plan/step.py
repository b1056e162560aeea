"""Build step model (explicit fields; no args dict)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .directives import Directive
from .guards import ALWAYS, Guard


@dataclass(slots=True)
class BuildStep:
    """
    A single step within a BuildPlan.

    Which fields are meaningful depends on `directive`:
        - COPY: src, dst
        - WORKDIR: path
        - RUN: command, guard
        - SET_EXEC: entrypoint, cmd
    """

    step_id: str
    seq: int
    directive: Directive

    note: Optional[str] = None

    src: Optional[str] = None
    dst: Optional[str] = None
    path: Optional[str] = None

    command: Optional[str] = None
    guard: Guard = ALWAYS

    entrypoint: Optional[list[str]] = None
    cmd: Optional[list[str]] = None
    env: dict[str, str] = field(default_factory=dict)

    def validate_required_fields(self) -> None:
        """Validate required fields according to directive. Raises ValueError."""
        if self.directive is Directive.COPY:
            _require(self.src, "src")
            _require(self.dst, "dst")
            return

        if self.directive is Directive.WORKDIR:
            _require(self.path, "path")
            return

        if self.directive is Directive.RUN:
            _require(self.command, "command")
            self.guard.validate()
            return

        if self.directive is Directive.SET_EXEC:
            if self.entrypoint is None and self.cmd is None:
                raise ValueError("Missing required field: entrypoint or cmd")
            _require_str_list(self.entrypoint, "entrypoint")
            _require_str_list(self.cmd, "cmd")
            return

        raise ValueError(f"Unsupported directive: {self.directive}")

    def describe(self) -> str:
        """One-line human readable form, e.g. for logs and `boxplan show`."""
        d = self.directive
        if d is Directive.COPY:
            return f"COPY {self.src} -> {self.dst}"
        if d is Directive.WORKDIR:
            return f"WORKDIR {self.path}"
        if d is Directive.RUN:
            if self.guard.kind == "always":
                return f"RUN {self.command}"
            return f"RUN [{self.guard.describe()}] {self.command}"
        return f"SET_EXEC entrypoint={self.entrypoint} cmd={self.cmd}"


def _require(value: object, field_name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required field: {field_name}")


def _require_str_list(value: object, field_name: str) -> None:
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Field {field_name} must be a list of strings")
