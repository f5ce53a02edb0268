from __future__ import annotations

import argparse
from pathlib import Path


def add_global_args(parser: argparse.ArgumentParser, *, env_path: Path) -> None:
    """Register flags shared by every sub-command."""

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging (HTTP calls, enrichment progress).",
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        default=str(env_path),
        help=f"Path to a .env file with SONARQUBE_* settings (default: {env_path}).",
    )
