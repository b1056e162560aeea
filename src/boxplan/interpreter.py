"""BuildInterpreter: applies a BuildPlan step by step against a BuildEngine."""

from __future__ import annotations

import logging
from typing import Optional

from boxplan.engine import BuildContext, BuildEngine
from boxplan.errors import (
    STEP_ERRORS,
    BoxPlanError,
    CommandError,
    InvalidStateError,
    PlanValidationError,
)
from boxplan.models import Artifact, BuildResult, StepResult
from boxplan.plan import BuildPlan, BuildStep, Directive
from boxplan.util.paths import resolve_container_path

logger = logging.getLogger(__name__)


class BuildInterpreter:
    """
    Sequential, fail-fast executor for build plans.

    Policy:
        - Steps apply in seq order; each step sees the effects of the previous.
        - A guarded RUN whose guard does not hold is recorded as skipped.
        - The first CopyError/PathError/CommandError stops the plan. By default
          it is re-raised; with raise_on_error=False a failed BuildResult is
          returned instead.
        - Engine/validation/state errors always raise.
        - engine.cleanup() runs after every apply attempt and is told whether
          the build was committed.
    """

    def __init__(self, engine: BuildEngine) -> None:
        self._engine = engine
        self._applied: set[str] = set()

    def execute(self, plan: BuildPlan) -> Artifact:
        """Apply the plan and return its artifact. Raises on the first failure."""
        result = self.apply_plan(plan)
        return result.artifact  # type: ignore[return-value]

    def apply_plan(self, plan: BuildPlan, *, raise_on_error: bool = True) -> BuildResult:
        if plan.plan_id in self._applied:
            raise InvalidStateError(
                "Plan has already been applied",
                details={"plan_id": plan.plan_id},
            )

        steps = plan.step_order()
        _validate_steps(steps)
        self._applied.add(plan.plan_id)

        ctx = BuildContext(base_image=plan.base_image)
        results: list[StepResult] = []
        stopped: Optional[BoxPlanError] = None
        stopped_step_id: Optional[str] = None
        artifact: Optional[Artifact] = None
        succeeded = False

        logger.info(
            "Applying plan %s | base=%s | steps=%d | engine=%s",
            plan.plan_id,
            plan.base_image,
            len(steps),
            self._engine.name,
        )

        try:
            self._engine.prepare(plan.base_image)

            for step in steps:
                try:
                    results.append(self._apply_one(step, ctx))
                except STEP_ERRORS as exc:
                    exc.details.update(
                        {
                            "step_id": step.step_id,
                            "seq": step.seq,
                            "directive": step.directive.value,
                        }
                    )
                    logger.error("Step %d failed: %s | %s", step.seq, step.describe(), exc)
                    results.append(_failed_result(step, exc))
                    stopped = exc
                    stopped_step_id = step.step_id
                    break

            if stopped is None:
                artifact = self._engine.commit(ctx)
                succeeded = True
        finally:
            self._engine.cleanup(succeeded=succeeded)

        if stopped is not None and raise_on_error:
            raise stopped

        status = "failed" if stopped is not None else "success"
        logger.info("Plan %s finished | status=%s", plan.plan_id, status)
        return BuildResult(
            plan_id=plan.plan_id,
            status=status,  # type: ignore[arg-type]
            stopped_step_id=stopped_step_id,
            results=results,
            artifact=artifact,
            summary=_summarize_results(results),
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _apply_one(self, step: BuildStep, ctx: BuildContext) -> StepResult:
        """Apply one step, mutating ctx. Raises step errors on failure."""
        logger.info("Step %d: %s", step.seq, step.describe())

        if step.directive is Directive.COPY:
            dst = resolve_container_path(step.dst, ctx.workdir)  # type: ignore[arg-type]
            # A trailing slash means "into this directory".
            if step.dst.endswith("/") and dst != "/":  # type: ignore[union-attr]
                dst += "/"
            self._engine.copy(step.src, dst)  # type: ignore[arg-type]
            return _result(step, "success")

        if step.directive is Directive.WORKDIR:
            path = resolve_container_path(step.path, ctx.workdir)  # type: ignore[arg-type]
            self._engine.make_dir(path)
            ctx.workdir = path
            return _result(step, "success")

        if step.directive is Directive.RUN:
            cwd = ctx.workdir
            holds = step.guard.holds(
                is_dir=lambda p: self._engine.is_dir(resolve_container_path(p, cwd)),
                exists=lambda p: self._engine.exists(resolve_container_path(p, cwd)),
            )
            if not holds:
                logger.info("Step %d skipped: guard %s not met", step.seq, step.guard.describe())
                return _result(step, "skipped")

            out = self._engine.run(step.command, cwd=cwd, env=step.env or None)  # type: ignore[arg-type]
            if out.exit_code != 0:
                raise CommandError(
                    f"Command exited with status {out.exit_code}",
                    exit_code=out.exit_code,
                    output=out.output,
                    details={"command": step.command, "cwd": cwd},
                )
            logger.debug("Step %d output:\n%s", step.seq, out.output)
            result = _result(step, "success")
            result.exit_code = out.exit_code
            result.output = out.output
            return result

        if step.directive is Directive.SET_EXEC:
            # Each field is optional; an omitted one keeps the previous value.
            if step.entrypoint is not None:
                ctx.entrypoint = list(step.entrypoint)
            if step.cmd is not None:
                ctx.cmd = list(step.cmd)
            return _result(step, "success")

        raise PlanValidationError(
            "Unsupported directive",
            details={"directive": step.directive},
        )


def _validate_steps(steps: list[BuildStep]) -> None:
    seen: set[str] = set()
    for step in steps:
        if step.step_id in seen:
            raise PlanValidationError(
                "Duplicate step_id in plan",
                details={"step_id": step.step_id},
            )
        seen.add(step.step_id)
        try:
            step.validate_required_fields()
        except ValueError as exc:
            raise PlanValidationError(
                "Invalid step: missing required fields",
                details={"step_id": step.step_id, "directive": step.directive.value},
                cause=exc,
            ) from exc


def _result(step: BuildStep, status: str) -> StepResult:
    return StepResult(
        step_id=step.step_id,
        seq=step.seq,
        directive=step.directive.value,
        status=status,  # type: ignore[arg-type]
    )


def _failed_result(step: BuildStep, exc: BoxPlanError) -> StepResult:
    result = _result(step, "failed")
    result.error_type = exc.__class__.__name__
    result.error_message = str(exc)
    result.error_details = dict(exc.details)
    if isinstance(exc, CommandError):
        result.exit_code = exc.exit_code
        result.output = exc.output
    return result


def _summarize_results(results: list[StepResult]) -> dict[str, int]:
    summary: dict[str, int] = {"success": 0, "failed": 0, "skipped": 0}
    for r in results:
        summary[r.status] = summary.get(r.status, 0) + 1
    return summary
