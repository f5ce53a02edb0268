#!/usr/bin/env python3
"""
CLI for the SonarQube report generator.

Commands:
  generate  - build a Markdown/HTML report for one project/branch
  projects  - list projects visible to the configured token
  branches  - list branches of a project
  history   - list/show/delete/clear/clean saved reports

Usage:
  python report_cli.py generate --project-key my-app
  python report_cli.py generate --project-key my-app --branch develop --format html --no-snippets
  python report_cli.py generate                       # pick a project from a menu
  python report_cli.py projects --filter api
  python report_cli.py history list
  python report_cli.py history clean --days 7

Settings come from the environment (or .env at the repo root):
  SONARQUBE_URL, SONARQUBE_TOKEN, SONARQUBE_TIMEOUT,
  REPORT_STORAGE_PATH, REPORT_RETENTION_DAYS
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cli.args.base import add_global_args
from cli.args.browse import add_browse_args
from cli.args.generate import add_generate_args
from cli.args.history import add_history_args
from cli.common import EXIT_USAGE, fail
from cli.dispatch import dispatch
from sonar_report.config import ENV_PATH, ConfigError, load_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Markdown/HTML reports from SonarQube analysis results.")
    add_global_args(parser, env_path=ENV_PATH)

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    add_generate_args(sub.add_parser("generate", help="Generate a report for a project."))
    add_browse_args(
        sub.add_parser("projects", help="List SonarQube projects."),
        sub.add_parser("branches", help="List branches of a project."),
    )
    add_history_args(sub.add_parser("history", help="Manage saved reports."))

    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        # requests/urllib3 are chatty at INFO
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    _configure_logging(bool(args.verbose))

    env_file = Path(args.env_file).expanduser() if args.env_file else None
    try:
        cfg = load_config(env_file)
    except ConfigError as e:
        return fail(str(e), EXIT_USAGE)

    return dispatch(args, cfg)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
