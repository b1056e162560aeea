"""Exception hierarchy for boxplan."""

from __future__ import annotations

from typing import Any, Optional


class BoxPlanError(Exception):
    """
    Base exception for boxplan.

    Attributes:
        details: Optional structured information (e.g., step_id, path).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class PlanValidationError(BoxPlanError):
    """Raised when a plan or plan document is malformed."""


class InvalidStateError(BoxPlanError):
    """Raised when the library is used in an invalid state (e.g., plan re-applied)."""


class CopyError(BoxPlanError):
    """Raised when a COPY source is missing or its destination is not writable."""


class PathError(BoxPlanError):
    """Raised when a WORKDIR path cannot be created."""


class CommandError(BoxPlanError):
    """
    Raised when a RUN command exits non-zero.

    Attributes:
        exit_code: Process exit status (None if the command never finished).
        output: Combined stdout/stderr captured from the command.
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: Optional[int] = None,
        output: str = "",
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        merged: dict[str, Any] = {"exit_code": exit_code}
        if details:
            merged.update(details)
        super().__init__(message, details=merged, cause=cause)
        self.exit_code = exit_code
        self.output = output


class EngineError(BoxPlanError):
    """Raised when the build engine itself fails (daemon, image, I/O setup)."""


STEP_ERRORS: tuple[type[BoxPlanError], ...] = (CopyError, PathError, CommandError)
