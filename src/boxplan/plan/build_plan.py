"""BuildPlan model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .step import BuildStep


@dataclass(slots=True)
class BuildPlan:
    """An ordered list of build steps on top of a base image."""

    plan_id: str
    base_image: str
    created_at: datetime
    steps: list[BuildStep]

    def step_order(self) -> list[BuildStep]:
        """Steps in apply order: seq ascending, ties keep declaration order."""
        return sorted(self.steps, key=lambda s: s.seq)
