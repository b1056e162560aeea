"""Path helpers for container-side (POSIX) paths."""

from __future__ import annotations

import os
import posixpath

ROOT = "/"


def resolve_container_path(path: str, cwd: str) -> str:
    """
    Resolve a container path against the current working directory.

    Absolute paths are normalized as-is; relative ones are joined onto cwd.
    The result is always absolute and never climbs above "/".
    """
    if not isinstance(path, str) or not path.strip():
        raise ValueError("path must be a non-empty string")
    joined = path if path.startswith("/") else posixpath.join(cwd or ROOT, path)
    norm = posixpath.normpath(joined)
    # normpath keeps a leading "//"; collapse it.
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    return norm


def host_path(root: str, container_path: str) -> str:
    """Map an absolute container path onto a host directory used as "/"."""
    if not container_path.startswith("/"):
        raise ValueError(f"container path must be absolute: {container_path}")
    rel = container_path.lstrip("/")
    if not rel:
        return os.path.abspath(root)
    return os.path.join(os.path.abspath(root), *rel.split("/"))


def resolve_context_source(context_dir: str, src: str) -> str:
    """
    Resolve a COPY source to a real host path inside the build context.

    Symlinks are followed before the check. Raises ValueError if the result
    lies outside `context_dir`.
    """
    context = os.path.realpath(context_dir)
    resolved = os.path.realpath(os.path.join(context, src))
    if resolved != context and os.path.commonpath([context, resolved]) != context:
        raise ValueError(f"copy source escapes the build context: {src}")
    return resolved
