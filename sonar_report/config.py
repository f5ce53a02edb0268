"""sonar_report.config

Runtime configuration.

Sources, lowest to highest precedence:
  1) built-in defaults
  2) ``.env`` at the repo root (loaded at runtime, never at import time;
     already-exported variables win)
  3) process environment
  4) an optional YAML file for report defaults (``--config``), then CLI flags

Environment variables
---------------------
SONARQUBE_URL          SonarQube base URL (default: http://localhost:9000)
SONARQUBE_TOKEN        user token; empty means anonymous access
SONARQUBE_TIMEOUT      per-request timeout in seconds (default: 30)
REPORT_STORAGE_PATH    where rendered reports + index.json live (default: ./reports)
REPORT_RETENTION_DAYS  age limit used by ``history clean`` (default: 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from tools.sonar.types import SonarConfig

# Repo root = parent of sonar_report/
ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"

SONARQUBE_URL_DEFAULT = "http://localhost:9000"
REPORT_FORMATS = ("md", "html", "json")


class ConfigError(RuntimeError):
    """Configuration is missing or malformed."""


@dataclass(frozen=True)
class AppConfig:
    sonar: SonarConfig
    storage_path: Path
    retention_days: int = 30


@dataclass(frozen=True)
class ReportDefaults:
    """Report knobs that can be pinned in a YAML file."""

    include_code_snippets: bool = True
    include_how_to_fix: bool = True
    format: str = "md"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def load_config(env_path: Optional[Path] = ENV_PATH) -> AppConfig:
    """Build AppConfig from .env + environment."""
    if env_path is not None:
        load_dotenv(env_path, override=False)

    host = os.environ.get("SONARQUBE_URL", "").strip() or SONARQUBE_URL_DEFAULT
    if not host.startswith(("http://", "https://")):
        raise ConfigError(f"SONARQUBE_URL must start with http:// or https://, got {host!r}")

    sonar = SonarConfig(
        host=host.rstrip("/"),
        token=os.environ.get("SONARQUBE_TOKEN", "").strip(),
        timeout_seconds=_env_int("SONARQUBE_TIMEOUT", 30),
    )
    storage = os.environ.get("REPORT_STORAGE_PATH", "").strip() or "./reports"
    return AppConfig(
        sonar=sonar,
        storage_path=Path(storage).expanduser(),
        retention_days=_env_int("REPORT_RETENTION_DAYS", 30),
    )


def _as_bool(raw: Any, key: str) -> bool:
    if isinstance(raw, bool):
        return raw
    raise ConfigError(f"'{key}' must be true or false, got {raw!r}")


def load_report_defaults(path: str | Path) -> ReportDefaults:
    """Load report defaults from YAML.

    Example::

        include_code_snippets: true
        include_how_to_fix: false
        format: html
    """
    import yaml

    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise ConfigError(f"Report config not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Report config must be a mapping/object at top level: {p}")

    d: Dict[str, Any] = dict(raw)
    defaults = ReportDefaults()
    fmt = str(d.get("format", defaults.format)).lower()
    if fmt not in REPORT_FORMATS:
        raise ConfigError(f"'format' must be one of {', '.join(REPORT_FORMATS)}, got {fmt!r}")

    return ReportDefaults(
        include_code_snippets=_as_bool(d.get("include_code_snippets", defaults.include_code_snippets), "include_code_snippets"),
        include_how_to_fix=_as_bool(d.get("include_how_to_fix", defaults.include_how_to_fix), "include_how_to_fix"),
        format=fmt,
    )
