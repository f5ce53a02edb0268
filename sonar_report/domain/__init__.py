"""sonar_report.domain

Domain objects that form the *contract* between the report generator and its
consumers (renderers, history index, CLI).

Key idea
--------
SonarQube returns loosely-typed JSON. The generator converts it once into
these dataclasses so renderers never need to know API field names.
"""

from __future__ import annotations

from .finding import SEVERITY_ORDER, Finding, Hotspot, severity_rank
from .report import ConditionResult, MetricsSummary, ReportModel, ReportOptions

__all__ = [
    "SEVERITY_ORDER",
    "ConditionResult",
    "Finding",
    "Hotspot",
    "MetricsSummary",
    "ReportModel",
    "ReportOptions",
    "severity_rank",
]
