"""sonar_report

Core package for the SonarQube report generator.

It owns:

* domain types (the report model every renderer consumes)
* configuration loading
* IO/layout rules (atomic writes, the report history index)

The SonarQube HTTP client lives in ``tools.sonar`` and the synthesis
pipeline in ``pipeline.report``; the CLI (``report_cli.py`` + ``cli/``) is a
thin composition root that wires them together.
"""

from __future__ import annotations

__version__ = "0.1.0"
