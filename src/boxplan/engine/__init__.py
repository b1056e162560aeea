"""Build engines for boxplan."""

from __future__ import annotations

from typing import Any, Optional

from boxplan.errors import PlanValidationError

from .base import BuildContext, BuildEngine, CommandOutput
from .local import LocalEngine

ENGINE_NAMES: tuple[str, ...] = ("local", "docker")


def create_engine(
    name: str,
    *,
    context_dir: str = ".",
    root: Optional[str] = None,
    shell: str = "/bin/sh",
    timeout_seconds: Optional[float] = None,
    repository: str = "boxplan",
    tag: str = "latest",
    client: Any = None,
) -> BuildEngine:
    """Construct an engine by name ("local" or "docker")."""
    if name == "local":
        return LocalEngine(
            root,
            context_dir=context_dir,
            shell=shell,
            timeout_seconds=timeout_seconds,
        )
    if name == "docker":
        # Imported lazily so the local engine works without a docker install.
        from .docker_engine import DockerEngine

        return DockerEngine(
            context_dir=context_dir,
            repository=repository,
            tag=tag,
            shell=shell,
            client=client,
        )
    raise PlanValidationError(f"Unknown engine: {name}", details={"engine": name})


__all__ = [
    "BuildEngine",
    "BuildContext",
    "CommandOutput",
    "LocalEngine",
    "ENGINE_NAMES",
    "create_engine",
]
