"""
Configuration
=============
Loads settings from environment variables, optionally via a .env file
(python-dotenv).

Environment Variables:
    BOXPLAN_ENGINE            Build engine: "local" or "docker" (default: local)
    BOXPLAN_ROOT              LocalEngine root directory (default: fresh temp dir)
    BOXPLAN_SHELL             Shell used for RUN commands (default: /bin/sh)
    BOXPLAN_COMMAND_TIMEOUT   Per-command timeout in seconds (default: none)
    BOXPLAN_IMAGE_REPOSITORY  Repository for committed images (default: boxplan)
    BOXPLAN_IMAGE_TAG         Tag for committed images (default: latest)
    BOXPLAN_LOG_LEVEL         Logging level name (default: INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from boxplan.engine import ENGINE_NAMES
from boxplan.errors import PlanValidationError


@dataclass(frozen=True)
class Settings:
    engine: str = "local"
    root: Optional[str] = None
    shell: str = "/bin/sh"
    command_timeout: Optional[float] = None
    image_repository: str = "boxplan"
    image_tag: str = "latest"
    log_level: str = "INFO"


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    dotenv: bool = True,
) -> Settings:
    """
    Read Settings from `environ` (default: os.environ).

    When reading os.environ and `dotenv` is True, a .env file in the current
    directory is loaded first; existing variables win.

    Raises:
        PlanValidationError: on invalid values.
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    engine = environ.get("BOXPLAN_ENGINE", "local").strip().lower() or "local"
    if engine not in ENGINE_NAMES:
        raise PlanValidationError(
            f"BOXPLAN_ENGINE must be one of {', '.join(ENGINE_NAMES)}",
            details={"value": engine},
        )

    timeout: Optional[float] = None
    raw_timeout = environ.get("BOXPLAN_COMMAND_TIMEOUT", "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise PlanValidationError(
                "BOXPLAN_COMMAND_TIMEOUT must be a number",
                details={"value": raw_timeout},
                cause=exc,
            ) from exc
        if timeout <= 0:
            raise PlanValidationError(
                "BOXPLAN_COMMAND_TIMEOUT must be positive",
                details={"value": raw_timeout},
            )

    log_level = environ.get("BOXPLAN_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(log_level), int):
        raise PlanValidationError(
            "BOXPLAN_LOG_LEVEL is not a valid logging level",
            details={"value": log_level},
        )

    return Settings(
        engine=engine,
        root=environ.get("BOXPLAN_ROOT", "").strip() or None,
        shell=environ.get("BOXPLAN_SHELL", "/bin/sh").strip() or "/bin/sh",
        command_timeout=timeout,
        image_repository=environ.get("BOXPLAN_IMAGE_REPOSITORY", "boxplan").strip() or "boxplan",
        image_tag=environ.get("BOXPLAN_IMAGE_TAG", "latest").strip() or "latest",
        log_level=log_level,
    )
