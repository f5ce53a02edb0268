from __future__ import annotations

import argparse


def add_browse_args(projects: argparse.ArgumentParser, branches: argparse.ArgumentParser) -> None:
    """Register flags for the read-only ``projects`` and ``branches`` commands."""

    projects.add_argument(
        "--filter",
        dest="name_filter",
        default="",
        help="Only list projects whose key or name contains this text (case-insensitive).",
    )
    branches.add_argument(
        "--project-key",
        dest="project_key",
        required=True,
        help="SonarQube project key.",
    )
