from __future__ import annotations

import argparse
import logging

from cli.commands.browse import run_branches, run_projects
from cli.commands.generate import run_generate
from cli.commands.history import run_history
from cli.common import EXIT_FAILED, EXIT_USAGE, fail
from sonar_report.config import AppConfig, ConfigError
from tools.sonar.api import SonarAPIError

logger = logging.getLogger(__name__)

_COMMANDS = {
    "generate": run_generate,
    "projects": run_projects,
    "branches": run_branches,
    "history": run_history,
}


def dispatch(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Run the selected sub-command and map library errors to exit codes."""
    handler = _COMMANDS.get(args.command)
    if handler is None:
        return fail(f"Unknown command: {args.command}", EXIT_USAGE)

    try:
        return int(handler(args, cfg))
    except ConfigError as e:
        return fail(str(e), EXIT_USAGE)
    except SonarAPIError as e:
        logger.debug("SonarQube call failed", exc_info=True)
        return fail(str(e), EXIT_FAILED)
    except OSError as e:
        logger.debug("Filesystem operation failed", exc_info=True)
        return fail(str(e), EXIT_FAILED)
