from __future__ import annotations

"""cli.common

Small shared helpers for CLI command modules.
"""

import sys

from sonar_report.config import AppConfig
from sonar_report.io import ReportHistory
from tools.sonar.api import SonarClient

# Exit codes
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_client(cfg: AppConfig) -> SonarClient:
    return SonarClient(cfg.sonar)


def open_history(cfg: AppConfig) -> ReportHistory:
    return ReportHistory(cfg.storage_path)


def fail(message: str, code: int = EXIT_FAILED) -> int:
    """Print a one-line error to stderr and return *code*."""
    print(f"❌ {message}", file=sys.stderr)
    return code
