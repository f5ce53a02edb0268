from __future__ import annotations

import argparse


def add_history_args(parser: argparse.ArgumentParser) -> None:
    """Register ``history list|show|delete|clear|clean``."""

    actions = parser.add_subparsers(dest="history_action", metavar="ACTION")
    actions.required = True

    ls = actions.add_parser("list", help="List saved reports, newest first.")
    ls.add_argument("--project-key", dest="project_key", default=None, help="Only this project.")

    show = actions.add_parser("show", help="Print a saved report to stdout.")
    show.add_argument("report_id", help="Report id (see 'history list').")
    show.add_argument("--path", action="store_true", help="Print the file path instead of the content.")

    delete = actions.add_parser("delete", help="Delete one saved report.")
    delete.add_argument("report_id", help="Report id (see 'history list').")

    clear = actions.add_parser("clear", help="Delete every saved report.")
    clear.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation.")

    clean = actions.add_parser("clean", help="Delete reports older than the retention period.")
    clean.add_argument(
        "--days",
        type=int,
        default=None,
        help="Age limit in days (default: REPORT_RETENTION_DAYS, 30).",
    )
