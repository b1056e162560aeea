"""Identifiers and timestamps attached to plans, steps and build containers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

CONTAINER_PREFIX = "boxplan-build"


def new_uuid() -> str:
    return str(uuid.uuid4())


def new_plan_id() -> str:
    return new_uuid()


def new_step_id() -> str:
    return new_uuid()


def new_container_name(prefix: str = CONTAINER_PREFIX) -> str:
    """Unique per call, so concurrent builds on one daemon never collide."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def now_utc() -> datetime:
    """Plan creation time, always tz-aware UTC."""
    return datetime.now(timezone.utc)
