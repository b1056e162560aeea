"""PlanBuilder: records directives in order and produces a BuildPlan."""

from __future__ import annotations

from typing import Optional, Sequence

from boxplan.errors import PlanValidationError
from boxplan.util.identity import new_plan_id, new_step_id, now_utc

from .build_plan import BuildPlan
from .directives import Directive
from .guards import ALWAYS, Guard
from .step import BuildStep


class PlanBuilder:
    """
    Fluent builder mirroring the descriptor verbs: from/copy/workdir/run/set_exec.

    Each call appends one step with the next sequence number and is validated
    immediately, so a finished builder always yields a well-formed plan.
    """

    def __init__(self, base_image: str) -> None:
        if not isinstance(base_image, str) or not base_image.strip():
            raise PlanValidationError("base_image must be a non-empty string")
        self.base_image = base_image.strip()
        self._steps: list[BuildStep] = []

    def copy(self, src: str, dst: str, *, note: Optional[str] = None) -> PlanBuilder:
        return self._add(Directive.COPY, note=note, src=src, dst=dst)

    def workdir(self, path: str, *, note: Optional[str] = None) -> PlanBuilder:
        return self._add(Directive.WORKDIR, note=note, path=path)

    def run(
        self,
        command: str,
        *,
        guard: Guard = ALWAYS,
        env: Optional[dict[str, str]] = None,
        note: Optional[str] = None,
    ) -> PlanBuilder:
        return self._add(
            Directive.RUN,
            note=note,
            command=command,
            guard=guard,
            env=dict(env or {}),
        )

    def set_exec(
        self,
        *,
        entrypoint: Optional[Sequence[str]] = None,
        cmd: Optional[Sequence[str]] = None,
        note: Optional[str] = None,
    ) -> PlanBuilder:
        return self._add(
            Directive.SET_EXEC,
            note=note,
            entrypoint=list(entrypoint) if entrypoint is not None else None,
            cmd=list(cmd) if cmd is not None else None,
        )

    def list_steps(self) -> list[BuildStep]:
        return list(self._steps)

    def build(self) -> BuildPlan:
        """Build a BuildPlan from the recorded steps."""
        return BuildPlan(
            plan_id=new_plan_id(),
            base_image=self.base_image,
            created_at=now_utc(),
            steps=list(self._steps),
        )

    def _add(self, directive: Directive, **fields: object) -> PlanBuilder:
        step = BuildStep(
            step_id=new_step_id(),
            seq=len(self._steps),
            directive=directive,
            **fields,  # type: ignore[arg-type]
        )
        try:
            step.validate_required_fields()
        except ValueError as exc:
            raise PlanValidationError(
                str(exc),
                details={"seq": step.seq, "directive": directive.value},
                cause=exc,
            ) from exc
        self._steps.append(step)
        return self
