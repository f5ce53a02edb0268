from __future__ import annotations

"""pipeline.report

Feature package for SonarQube report synthesis.

Public API:
- ReportGenerator(client).generate(...)
- render_report(report, fmt)
- render_markdown(...)
- render_html(...)
- render_json(...)

The implementation is split into small modules:
- generator.py: upstream calls -> ReportModel
- metrics.py: measure formatting (debt, ratings, percentages)
- locations.py: snippet range resolution + formatting
- enrichment.py: bounded-concurrency snippet/guidance fetches
- labels.py: display labels shared by renderers
- render_md.py: markdown formatting
- render_html.py: HTML formatting
- render_json.py: machine-readable dump
"""

from sonar_report.domain import ReportModel

from .generator import ReportGenerationError, ReportGenerator
from .render_html import render_html
from .render_json import render_json
from .render_md import render_markdown

__all__ = [
    "ReportGenerationError",
    "ReportGenerator",
    "render_html",
    "render_json",
    "render_markdown",
    "render_report",
]


def render_report(report: ReportModel, fmt: str) -> str:
    """Render *report* in the requested format ('md', 'html' or 'json')."""
    if fmt == "html":
        return render_html(report)
    if fmt == "md":
        return render_markdown(report)
    if fmt == "json":
        return render_json(report)
    raise ValueError(f"Unsupported report format: {fmt!r}")
