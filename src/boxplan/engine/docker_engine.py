"""DockerEngine: applies steps inside a container and commits an image."""

from __future__ import annotations

import io
import json
import logging
import os
import posixpath
import tarfile
from typing import Any, Optional

import docker
from docker.errors import APIError, DockerException, ImageNotFound

from boxplan.errors import CopyError, EngineError, PathError
from boxplan.models import Artifact
from boxplan.util.identity import new_container_name

from .base import BuildContext, BuildEngine, CommandOutput

logger = logging.getLogger(__name__)

# Keeps the build container alive between exec calls.
_IDLE_COMMAND = "trap 'exit 0' TERM; while :; do sleep 3600; done"


class DockerEngine(BuildEngine):
    """
    Build engine backed by a Docker daemon.

    Lifecycle:
        1. prepare: pull base image if missing, start an idle container
        2. steps: copy via put_archive, mkdir/test/run via exec_run
        3. commit: snapshot container with WORKDIR/ENTRYPOINT/CMD changes
        4. cleanup: force-remove the container
    """

    name = "docker"

    def __init__(
        self,
        *,
        context_dir: str = ".",
        repository: str = "boxplan",
        tag: str = "latest",
        shell: str = "/bin/sh",
        client: Any = None,
    ) -> None:
        self._context_dir = os.path.abspath(context_dir)
        self._repository = repository
        self._tag = tag
        self._shell = shell
        self._client = client
        self._container: Any = None
        self._base_entrypoint: list[str] = []
        self._base_cmd: list[str] = []

    @classmethod
    def from_client(cls, client: Any, **kwargs: Any) -> "DockerEngine":
        """Create engine with an injected docker client (useful for tests)."""
        return cls(client=client, **kwargs)

    @property
    def container(self) -> Any:
        if self._container is None:
            raise EngineError("No build container. Call prepare() first.")
        return self._container

    def prepare(self, base_image: str) -> None:
        try:
            if self._client is None:
                self._client = docker.from_env()
            image = self._ensure_image(base_image)
            self._base_entrypoint, self._base_cmd = _image_exec_config(image)
            self._container = self._client.containers.create(
                image=base_image,
                entrypoint=[self._shell, "-c"],
                command=[_IDLE_COMMAND],
                name=new_container_name(),
                labels={"project": "boxplan", "role": "build"},
                detach=True,
            )
            self._container.start()
        except ImageNotFound as exc:
            raise EngineError(
                f"Docker image '{base_image}' not found",
                details={"image": base_image},
                cause=exc,
            ) from exc
        except DockerException as exc:
            raise EngineError(
                f"Docker error while preparing build container: {exc}",
                details={"image": base_image},
                cause=exc,
            ) from exc

        logger.info(
            "Build container started | image=%s | container=%s",
            base_image,
            self._container.short_id,
        )

    def copy(self, src: str, dst: str) -> None:
        src_host = self._context_source(self._context_dir, src)

        if os.path.isdir(src_host):
            target_dir = dst
            archive = build_tar(src_host)
        else:
            if dst.endswith("/") or self.is_dir(dst):
                target_dir = dst
                arcname = os.path.basename(os.path.normpath(src))
            else:
                target_dir = posixpath.dirname(dst) or "/"
                arcname = posixpath.basename(dst)
            archive = build_tar(src_host, arcname=arcname)

        mkdir = self._exec(["mkdir", "-p", target_dir])
        if mkdir.exit_code != 0:
            raise CopyError(
                f"Copy destination is not writable: {dst}",
                details={"dst": dst, "output": mkdir.output},
            )

        try:
            ok = self.container.put_archive(target_dir, archive)
        except APIError as exc:
            raise CopyError(
                f"Cannot copy {src} to {dst}",
                details={"src": src, "dst": dst},
                cause=exc,
            ) from exc
        if not ok:
            raise CopyError(
                f"Cannot copy {src} to {dst}",
                details={"src": src, "dst": dst},
            )

    def make_dir(self, path: str) -> None:
        result = self._exec(["mkdir", "-p", path])
        if result.exit_code != 0:
            raise PathError(
                f"Cannot create directory: {path}",
                details={"path": path, "output": result.output},
            )

    def is_dir(self, path: str) -> bool:
        return self._exec(["test", "-d", path]).exit_code == 0

    def exists(self, path: str) -> bool:
        return self._exec(["test", "-e", path]).exit_code == 0

    def run(
        self,
        command: str,
        *,
        cwd: str,
        env: Optional[dict[str, str]] = None,
    ) -> CommandOutput:
        return self._exec([self._shell, "-c", command], workdir=cwd, env=env)

    def commit(self, context: BuildContext) -> Artifact:
        # Both are always written: the idle loop from prepare must not leak
        # into the image. Unset fields fall back to the base image config.
        entrypoint = context.entrypoint if context.entrypoint is not None else self._base_entrypoint
        cmd = context.cmd if context.cmd is not None else self._base_cmd
        changes = [
            f"WORKDIR {context.workdir}",
            f"ENTRYPOINT {json.dumps(entrypoint)}",
            f"CMD {json.dumps(cmd)}",
        ]
        try:
            image = self.container.commit(
                repository=self._repository,
                tag=self._tag,
                changes=changes,
            )
        except DockerException as exc:
            raise EngineError("Docker commit failed", cause=exc) from exc

        logger.info("Committed image %s:%s | id=%s", self._repository, self._tag, image.id)
        return Artifact(
            base_image=context.base_image,
            workdir=context.workdir,
            entrypoint=list(entrypoint),
            cmd=list(cmd),
            image_id=image.id,
            engine=self.name,
        )

    def cleanup(self, *, succeeded: bool = True) -> None:
        if self._container is None:
            return
        try:
            self._container.remove(force=True)
            logger.info("Build container %s removed", self._container.short_id)
        except DockerException:
            logger.warning("Failed to remove build container", exc_info=True)
        finally:
            self._container = None

    # ----------------------------
    # Internals
    # ----------------------------
    def _ensure_image(self, image: str) -> Any:
        try:
            return self._client.images.get(image)
        except ImageNotFound:
            logger.info("Pulling base image %s", image)
            return self._client.images.pull(image)

    def _exec(
        self,
        cmd: list[str],
        *,
        workdir: Optional[str] = None,
        env: Optional[dict[str, str]] = None,
    ) -> CommandOutput:
        try:
            result = self.container.exec_run(cmd, workdir=workdir, environment=env)
        except DockerException as exc:
            raise EngineError(
                "Docker exec failed",
                details={"cmd": cmd},
                cause=exc,
            ) from exc

        raw = result.output or b""
        output = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
        return CommandOutput(exit_code=int(result.exit_code), output=output)


def build_tar(src: str, *, arcname: Optional[str] = None) -> bytes:
    """
    Pack `src` into an in-memory tar stream for put_archive.

    Directories are packed by contents (entries relative to `src`) so they
    land directly inside the destination; files are packed under `arcname`.
    """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        if os.path.isdir(src):
            for entry in sorted(os.listdir(src)):
                tar.add(os.path.join(src, entry), arcname=entry)
        else:
            tar.add(src, arcname=arcname or os.path.basename(src))
    return buf.getvalue()


def _image_exec_config(image: Any) -> tuple[list[str], list[str]]:
    """Entrypoint and Cmd from an image's config; missing or null become []."""
    attrs = getattr(image, "attrs", None)
    config = attrs.get("Config") if isinstance(attrs, dict) else None
    if not isinstance(config, dict):
        return [], []

    def _as_list(value: Any) -> list[str]:
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(v) for v in value]
        return []

    return _as_list(config.get("Entrypoint")), _as_list(config.get("Cmd"))
