"""Result models for plan application."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from .artifact import Artifact

StepStatus = Literal["success", "failed", "skipped"]
BuildStatus = Literal["success", "failed"]


@dataclass(slots=True)
class StepResult:
    """Result for a single BuildStep."""

    step_id: str
    seq: int
    directive: str
    status: StepStatus

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    exit_code: Optional[int] = None
    output: Optional[str] = None


@dataclass(slots=True)
class BuildResult:
    """Aggregate result for BuildInterpreter.apply_plan."""

    plan_id: str
    status: BuildStatus
    stopped_step_id: Optional[str]
    results: list[StepResult]

    artifact: Optional[Artifact] = None
    summary: dict[str, int] = field(default_factory=dict)
