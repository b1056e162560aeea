"""Plan directives for boxplan."""

from __future__ import annotations

from enum import Enum


class Directive(str, Enum):
    """Supported build directives."""

    COPY = "COPY"
    WORKDIR = "WORKDIR"
    RUN = "RUN"
    SET_EXEC = "SET_EXEC"
