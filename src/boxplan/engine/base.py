"""Engine interface: the environment the interpreter applies steps to."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from boxplan.errors import CopyError
from boxplan.models import Artifact
from boxplan.util.paths import resolve_context_source


@dataclass(slots=True)
class CommandOutput:
    """Outcome of one shell command run by an engine."""

    exit_code: int
    output: str = ""


@dataclass(slots=True)
class BuildContext:
    """
    Mutable state threaded through step execution.

    `workdir` is a container path. `entrypoint`/`cmd` stay None until a
    SET_EXEC records them; None means "inherit from the base image", while
    an empty list explicitly clears the value.
    """

    base_image: str
    workdir: str = "/"
    entrypoint: Optional[list[str]] = None
    cmd: Optional[list[str]] = None


class BuildEngine(ABC):
    """
    Applies primitive filesystem/command operations to a target environment.

    All paths passed in are absolute container paths, already resolved by the
    interpreter. Implementations raise boxplan errors:
        - copy -> CopyError
        - make_dir -> PathError
        - run -> returns CommandOutput (non-zero exit is not an exception here)
        - anything infrastructural -> EngineError
    """

    name: str = "engine"

    @abstractmethod
    def prepare(self, base_image: str) -> None:
        """Materialize the base environment. Called once before the first step."""

    @abstractmethod
    def copy(self, src: str, dst: str) -> None:
        """Copy host `src` (file or directory contents) into container `dst`."""

    @abstractmethod
    def make_dir(self, path: str) -> None:
        """Create `path` and missing parents; no-op if it is a directory."""

    @abstractmethod
    def is_dir(self, path: str) -> bool: ...

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def run(
        self,
        command: str,
        *,
        cwd: str,
        env: Optional[dict[str, str]] = None,
    ) -> CommandOutput:
        """Run a shell command with `cwd` as working directory."""

    @abstractmethod
    def commit(self, context: BuildContext) -> Artifact:
        """Freeze the environment into an Artifact. Called only on success."""

    def cleanup(self, *, succeeded: bool = True) -> None:
        """Release transient resources. Always called after apply."""

    def _context_source(self, context_dir: str, src: str) -> str:
        """Host path of a COPY source; CopyError if outside the context or missing."""
        try:
            path = resolve_context_source(context_dir, src)
        except ValueError as exc:
            raise CopyError(
                f"Copy source is outside the build context: {src}",
                details={"src": src, "context_dir": context_dir},
                cause=exc,
            ) from exc
        if not os.path.lexists(path):
            raise CopyError(
                f"Copy source does not exist: {src}",
                details={"src": src, "context_dir": context_dir},
            )
        return path
