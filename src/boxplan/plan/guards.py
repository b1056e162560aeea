"""RUN guards: filesystem conditions evaluated at execution time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

GuardKind = Literal["always", "dir_missing", "dir_exists", "path_missing", "path_exists"]

GUARD_KINDS: tuple[str, ...] = (
    "always",
    "dir_missing",
    "dir_exists",
    "path_missing",
    "path_exists",
)


@dataclass(frozen=True, slots=True)
class Guard:
    """
    Condition deciding whether a RUN step executes.

    `path` is resolved against the working directory current at the time the
    step runs. `always` ignores `path`.
    """

    kind: GuardKind = "always"
    path: str = ""

    def validate(self) -> None:
        """Raises ValueError if the guard is malformed."""
        if self.kind not in GUARD_KINDS:
            raise ValueError(f"Unsupported guard kind: {self.kind}")
        if self.kind != "always" and not self.path.strip():
            raise ValueError(f"Guard '{self.kind}' requires a path")

    def holds(
        self,
        is_dir: Callable[[str], bool],
        exists: Callable[[str], bool],
    ) -> bool:
        """Evaluate the guard using engine-provided path checks."""
        if self.kind == "always":
            return True
        if self.kind == "dir_missing":
            return not is_dir(self.path)
        if self.kind == "dir_exists":
            return is_dir(self.path)
        if self.kind == "path_missing":
            return not exists(self.path)
        if self.kind == "path_exists":
            return exists(self.path)
        raise ValueError(f"Unsupported guard kind: {self.kind}")

    def describe(self) -> str:
        if self.kind == "always":
            return "always"
        return f"{self.kind}({self.path})"


ALWAYS = Guard()


def vendor_missing() -> Guard:
    """The classic vendoring guard: run only when ./vendor is not a directory."""
    return Guard("dir_missing", "vendor")
