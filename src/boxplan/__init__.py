"""boxplan public API."""

from __future__ import annotations

from boxplan.engine import BuildContext, BuildEngine, LocalEngine, create_engine
from boxplan.errors import (
    BoxPlanError,
    CommandError,
    CopyError,
    EngineError,
    InvalidStateError,
    PathError,
    PlanValidationError,
)
from boxplan.interpreter import BuildInterpreter
from boxplan.models import Artifact, BuildResult, StepResult
from boxplan.plan import (
    BuildPlan,
    BuildStep,
    Directive,
    Guard,
    PlanBuilder,
    load_plan,
    load_plan_file,
    vendor_missing,
)

__all__ = [
    # High-level
    "BuildInterpreter",
    # Engines
    "BuildEngine",
    "BuildContext",
    "LocalEngine",
    "create_engine",
    # Plan / Models
    "Directive",
    "BuildStep",
    "BuildPlan",
    "PlanBuilder",
    "Guard",
    "vendor_missing",
    "load_plan",
    "load_plan_file",
    "Artifact",
    "StepResult",
    "BuildResult",
    # Errors
    "BoxPlanError",
    "PlanValidationError",
    "InvalidStateError",
    "CopyError",
    "PathError",
    "CommandError",
    "EngineError",
]
