"""LocalEngine: a reproducible environment rooted in a host directory."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from typing import Optional

from boxplan.errors import CommandError, CopyError, EngineError, PathError
from boxplan.models import Artifact
from boxplan.util.paths import host_path

from .base import BuildContext, BuildEngine, CommandOutput

logger = logging.getLogger(__name__)


class LocalEngine(BuildEngine):
    """
    Applies steps to a directory on the host that stands in for "/".

    Container paths are mapped under `root`; RUN commands execute with the
    host shell and the mapped working directory. The base image is recorded
    on the artifact but not materialized.
    """

    name = "local"

    def __init__(
        self,
        root: Optional[str] = None,
        *,
        context_dir: str = ".",
        shell: str = "/bin/sh",
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._root = os.path.abspath(root) if root else None
        self._context_dir = os.path.abspath(context_dir)
        self._shell = shell
        self._timeout = timeout_seconds
        self._base_image: Optional[str] = None
        self._owns_root = False

    @property
    def root(self) -> str:
        if self._root is None:
            raise EngineError("LocalEngine root is not initialized. Call prepare() first.")
        return self._root

    def prepare(self, base_image: str) -> None:
        if self._root is None:
            self._root = tempfile.mkdtemp(prefix="boxplan-")
            self._owns_root = True
        try:
            os.makedirs(self._root, exist_ok=True)
        except OSError as exc:
            raise EngineError(
                "Cannot create engine root",
                details={"root": self._root},
                cause=exc,
            ) from exc
        self._base_image = base_image
        logger.info("Local engine ready | root=%s | base=%s", self._root, base_image)

    def copy(self, src: str, dst: str) -> None:
        src_host = self._context_source(self._context_dir, src)
        dst_host = host_path(self.root, dst)
        try:
            if os.path.isdir(src_host):
                shutil.copytree(
                    src_host,
                    dst_host,
                    symlinks=True,
                    dirs_exist_ok=True,
                    ignore=self._ignore_root,
                )
            else:
                if dst.endswith("/") or os.path.isdir(dst_host):
                    dst_host = os.path.join(dst_host, os.path.basename(os.path.normpath(src)))
                os.makedirs(os.path.dirname(dst_host), exist_ok=True)
                shutil.copy2(src_host, dst_host)
        except (OSError, shutil.Error) as exc:
            raise CopyError(
                f"Cannot copy {src} to {dst}",
                details={"src": src, "dst": dst},
                cause=exc,
            ) from exc

    def make_dir(self, path: str) -> None:
        try:
            os.makedirs(host_path(self.root, path), exist_ok=True)
        except OSError as exc:
            raise PathError(
                f"Cannot create directory: {path}",
                details={"path": path},
                cause=exc,
            ) from exc

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(host_path(self.root, path))

    def exists(self, path: str) -> bool:
        return os.path.lexists(host_path(self.root, path))

    def run(
        self,
        command: str,
        *,
        cwd: str,
        env: Optional[dict[str, str]] = None,
    ) -> CommandOutput:
        run_env = dict(os.environ)
        run_env["BOXPLAN_ROOT"] = self.root
        if env:
            run_env.update(env)

        try:
            proc = subprocess.run(
                [self._shell, "-c", command],
                cwd=host_path(self.root, cwd),
                env=run_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            output = exc.output.decode("utf-8", errors="replace") if exc.output else ""
            raise CommandError(
                f"Command timed out after {self._timeout}s",
                exit_code=None,
                output=output,
                details={"command": command, "timeout": self._timeout},
                cause=exc,
            ) from exc
        except OSError as exc:
            raise EngineError(
                "Cannot start command",
                details={"command": command, "shell": self._shell},
                cause=exc,
            ) from exc

        return CommandOutput(
            exit_code=proc.returncode,
            output=proc.stdout.decode("utf-8", errors="replace"),
        )

    def commit(self, context: BuildContext) -> Artifact:
        return Artifact(
            base_image=context.base_image,
            workdir=context.workdir,
            entrypoint=list(context.entrypoint or []),
            cmd=list(context.cmd or []),
            image_id=self.root,
            engine=self.name,
        )

    def cleanup(self, *, succeeded: bool = True) -> None:
        # A caller-supplied root is never deleted; a temp root only on failure.
        if succeeded or not self._owns_root or self._root is None:
            return
        logger.info("Removing partial build root %s", self._root)
        shutil.rmtree(self._root, ignore_errors=True)
        self._root = None
        self._owns_root = False

    def _ignore_root(self, directory: str, names: list[str]) -> list[str]:
        # Copying a context that contains the engine root must not recurse into it.
        if self._root is None:
            return []
        root = os.path.realpath(self._root)
        return [n for n in names if os.path.realpath(os.path.join(directory, n)) == root]
