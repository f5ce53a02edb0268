"""JSON dump of a ReportModel for scripts and CI artifacts."""

from __future__ import annotations

import json

from sonar_report.domain import ReportModel


def render_json(report: ReportModel, *, indent: int = 2) -> str:
    return json.dumps(report.to_dict(), indent=indent, ensure_ascii=False) + "\n"
