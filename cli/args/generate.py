from __future__ import annotations

import argparse

from sonar_report.config import REPORT_FORMATS


def add_generate_args(parser: argparse.ArgumentParser) -> None:
    """Register flags for ``generate``.

    Flags left unset fall back to the YAML report defaults (``--config``),
    then to built-in defaults.
    """

    parser.add_argument(
        "--project-key",
        dest="project_key",
        help="SonarQube project key. If omitted, pick from a menu of visible projects.",
    )
    parser.add_argument(
        "--branch",
        default="",
        help="Branch to report on (default: the project's main branch).",
    )
    parser.add_argument(
        "--format",
        dest="format",
        choices=list(REPORT_FORMATS),
        default=None,
        help="Output format (default: md, or 'format' from --config).",
    )
    parser.add_argument(
        "--no-snippets",
        dest="include_code_snippets",
        action="store_false",
        default=None,
        help="Skip fetching source snippets for findings.",
    )
    parser.add_argument(
        "--no-how-to-fix",
        dest="include_how_to_fix",
        action="store_false",
        default=None,
        help="Skip fetching rule remediation guidance.",
    )
    parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Also write the rendered report to this path.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML file with report defaults (include_code_snippets, include_how_to_fix, format).",
    )
    parser.add_argument(
        "--no-save",
        dest="no_save",
        action="store_true",
        help="Do not add the report to the history index.",
    )
