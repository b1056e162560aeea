"""Artifact produced by applying a BuildPlan."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(slots=True)
class Artifact:
    """
    The finished environment plus the metadata needed to invoke it later.

    Notes:
        - `image_id` is engine-specific: the host root directory for
          LocalEngine, the committed image id for DockerEngine.
        - `entrypoint`/`cmd` are the last values recorded by SET_EXEC.
    """

    base_image: str
    workdir: str
    entrypoint: list[str] = field(default_factory=list)
    cmd: list[str] = field(default_factory=list)

    image_id: Optional[str] = None
    engine: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
