"""Public model exports for boxplan."""

from __future__ import annotations

from .artifact import Artifact
from .results import BuildResult, BuildStatus, StepResult, StepStatus

__all__ = [
    "Artifact",
    "StepStatus",
    "BuildStatus",
    "StepResult",
    "BuildResult",
]
