"""Public plan exports for boxplan."""

from __future__ import annotations

from .build_plan import BuildPlan
from .builder import PlanBuilder
from .directives import Directive
from .guards import ALWAYS, GUARD_KINDS, Guard, vendor_missing
from .loader import load_plan, load_plan_file, plan_from_document
from .step import BuildStep

__all__ = [
    "Directive",
    "BuildStep",
    "BuildPlan",
    "PlanBuilder",
    "Guard",
    "ALWAYS",
    "GUARD_KINDS",
    "vendor_missing",
    "load_plan",
    "load_plan_file",
    "plan_from_document",
]
