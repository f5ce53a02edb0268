from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SonarConfig:
    """Connection settings for SonarQube API calls."""
    host: str
    token: str = ""
    timeout_seconds: int = 30
