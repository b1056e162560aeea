"""Public error exports for boxplan."""

from __future__ import annotations

from .exceptions import (
    STEP_ERRORS,
    BoxPlanError,
    CommandError,
    CopyError,
    EngineError,
    InvalidStateError,
    PathError,
    PlanValidationError,
)

__all__ = [
    "BoxPlanError",
    "PlanValidationError",
    "InvalidStateError",
    "CopyError",
    "PathError",
    "CommandError",
    "EngineError",
    "STEP_ERRORS",
]
