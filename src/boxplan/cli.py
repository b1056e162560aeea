"""Command-line entry point: `boxplan show` / `boxplan build`."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from boxplan.config import Settings, load_settings
from boxplan.engine import ENGINE_NAMES, create_engine
from boxplan.errors import BoxPlanError, CommandError, PlanValidationError
from boxplan.interpreter import BuildInterpreter
from boxplan.logging_config import setup_logging
from boxplan.plan import BuildPlan, load_plan_file

logger = logging.getLogger(__name__)

# Same convention as `docker run`: 125 is the tool's own failure; a failing
# RUN command passes its status through.
EXIT_BOXPLAN_ERROR = 125

EPILOG = """\
exit status:
  0    success
  N    a RUN command failed with status N (1 if it had no status, e.g. timeout)
  2    command-line usage error (reported by argparse before anything runs)
  125  boxplan itself failed: invalid plan or --var, config, engine error

A RUN status can equal 2 or 125; stderr then reports "error: Command ...".
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boxplan",
        description="Apply declarative build plans step by step.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="print the resolved steps of a plan")
    show.add_argument("plan", help="path to a YAML/JSON plan document")
    show.add_argument("--var", action="append", default=[], metavar="NAME=VALUE")

    build = sub.add_parser("build", help="apply a plan and print the artifact")
    build.add_argument("plan", help="path to a YAML/JSON plan document")
    build.add_argument("--context", default=".", help="directory COPY sources are relative to")
    build.add_argument("--engine", choices=ENGINE_NAMES, default=None)
    build.add_argument("--root", default=None, help="local engine root directory")
    build.add_argument("--tag", default=None, metavar="NAME[:TAG]", help="docker image name")
    build.add_argument("--var", action="append", default=[], metavar="NAME=VALUE")
    build.add_argument("--log-level", default=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        setup_logging((getattr(args, "log_level", None) or settings.log_level).upper())
        overrides = _parse_vars(args.var)
        plan = load_plan_file(args.plan, overrides=overrides)

        if args.command == "show":
            _print_plan(plan)
            return 0

        return _build(plan, args, settings)
    except CommandError as exc:
        print(f"error: {exc}", file=sys.stderr)
        if exc.output:
            print(exc.output, file=sys.stderr)
        return exc.exit_code if exc.exit_code else 1
    except BoxPlanError as exc:
        print(f"error: {exc}", file=sys.stderr)
        if exc.details:
            print(json.dumps(exc.details, default=str), file=sys.stderr)
        return EXIT_BOXPLAN_ERROR


def _build(plan: BuildPlan, args: argparse.Namespace, settings: Settings) -> int:
    repository, tag = settings.image_repository, settings.image_tag
    if args.tag:
        repository, _, explicit_tag = args.tag.partition(":")
        tag = explicit_tag or "latest"

    engine = create_engine(
        args.engine or settings.engine,
        context_dir=args.context,
        root=args.root or settings.root,
        shell=settings.shell,
        timeout_seconds=settings.command_timeout,
        repository=repository,
        tag=tag,
    )
    artifact = BuildInterpreter(engine).execute(plan)
    print(json.dumps(artifact.to_dict(), indent=2))
    return 0


def _print_plan(plan: BuildPlan) -> None:
    print(f"FROM {plan.base_image}")
    for step in plan.step_order():
        print(f"{step.seq:>3}  {step.describe()}")


def _parse_vars(raw: Sequence[str]) -> dict[str, str]:
    variables: dict[str, str] = {}
    for item in raw:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise PlanValidationError(f"--var expects NAME=VALUE, got: {item}")
        variables[name.strip()] = value
    return variables


if __name__ == "__main__":
    sys.exit(main())
