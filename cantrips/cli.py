#!/usr/bin/env python3
"""
cantrips command-line entry point
"""

import sys
import argparse
import logging
from typing import List, Optional

from . import __version__
from .config import Settings, configure_logging
from .context import CantripsContext
from .errors import CantripsError
from .tasks import TASKS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cantrips", description="Many generators and quick helpers")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--project-root", help="Project directory (default: current directory)")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="task", metavar="<task>")
    subparsers.required = True
    for name in sorted(TASKS):
        task = TASKS[name]
        subparser = subparsers.add_parser(name, help=task.description, description=task.description)
        for flags, kwargs in task.arguments:
            subparser.add_argument(*flags, **kwargs)
    return parser


def run_task(name: str, context: CantripsContext, args: argparse.Namespace) -> bool:
    """
    Runs a task, reporting (not raising) its failure.

    Returns:
        Whether the task succeeded
    """
    task = TASKS[name]
    try:
        task.action(context, args)
        return True
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        if task.failure_message:
            logger.error(task.failure_message)
        logger.error(f"{type(e).__name__}: {e}")
        logger.debug("Task failure details", exc_info=True)
    return False


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = Settings.from_env(args.project_root)
    except CantripsError as e:
        logger.error(f"Invalid configuration: {e}")
        return
    run_task(args.task, CantripsContext(settings), args)


if __name__ == "__main__":
    main(sys.argv[1:])
