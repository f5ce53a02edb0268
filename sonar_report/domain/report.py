"""sonar_report.domain.report

The report model handed to renderers and to the history index.

A ReportModel is built once per generation request by
:class:`pipeline.report.generator.ReportGenerator` and is read-only
afterwards: the generator hands out read-only mappings and tuples. It
carries no renderer-specific fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .finding import Finding, Hotspot, severity_rank


@dataclass(frozen=True)
class ReportOptions:
    """Which optional enrichments to run."""

    include_code_snippets: bool = True
    include_how_to_fix: bool = True

    @property
    def enrichment_enabled(self) -> bool:
        return self.include_code_snippets or self.include_how_to_fix


@dataclass(frozen=True)
class ConditionResult:
    """One quality gate condition outcome."""

    metric: str
    status: str
    actual_value: str
    error_threshold: str
    comparator: str

    @classmethod
    def from_api(cls, cond: Mapping[str, Any]) -> "ConditionResult":
        return cls(
            metric=str(cond.get("metricKey") or ""),
            status=str(cond.get("status") or ""),
            actual_value=str(cond.get("actualValue") or ""),
            error_threshold=str(cond.get("errorThreshold") or ""),
            comparator=str(cond.get("comparator") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric": self.metric,
            "status": self.status,
            "actual_value": self.actual_value,
            "error_threshold": self.error_threshold,
            "comparator": self.comparator,
        }


@dataclass(frozen=True)
class MetricsSummary:
    """Formatted project metrics (strings, ready to display)."""

    bugs: str = "0"
    vulnerabilities: str = "0"
    code_smells: str = "0"
    coverage: str = "0%"
    duplicated_lines_density: str = "0%"
    lines_of_code: str = "0"
    technical_debt: str = "0min"

    # Ratings (A-E)
    reliability_rating: str = "A"
    security_rating: str = "A"
    maintainability_rating: str = "A"

    # New code period; empty when the server reports none.
    new_bugs: str = ""
    new_vulnerabilities: str = ""
    new_code_smells: str = ""
    new_coverage: str = ""
    new_duplicated_lines: str = ""

    @property
    def has_new_code(self) -> bool:
        return bool(self.new_bugs or self.new_vulnerabilities or self.new_code_smells)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bugs": self.bugs,
            "vulnerabilities": self.vulnerabilities,
            "code_smells": self.code_smells,
            "coverage": self.coverage,
            "duplicated_lines_density": self.duplicated_lines_density,
            "lines_of_code": self.lines_of_code,
            "technical_debt": self.technical_debt,
            "reliability_rating": self.reliability_rating,
            "security_rating": self.security_rating,
            "maintainability_rating": self.maintainability_rating,
            "new_bugs": self.new_bugs,
            "new_vulnerabilities": self.new_vulnerabilities,
            "new_code_smells": self.new_code_smells,
            "new_coverage": self.new_coverage,
            "new_duplicated_lines": self.new_duplicated_lines,
        }


@dataclass(frozen=True)
class ReportModel:
    """Everything needed to render a report for one project/branch."""

    # ---- Project ----
    project_key: str
    project_name: str
    branch: str
    generated_at: datetime
    analysis_date: Optional[str] = None

    # ---- Quality gate ----
    quality_gate_status: str = ""
    quality_gate_conditions: Tuple[ConditionResult, ...] = ()

    metrics: MetricsSummary = field(default_factory=MetricsSummary)

    # ---- Issues ----
    total_issues: int = 0
    issues_by_type: Mapping[str, int] = field(default_factory=dict)
    issues_by_severity: Mapping[str, Sequence[Finding]] = field(default_factory=dict)

    # ---- Hotspots ----
    total_hotspots: int = 0
    hotspots: Tuple[Hotspot, ...] = ()
    hotspots_by_priority: Mapping[str, int] = field(default_factory=dict)

    def sorted_severities(self) -> List[str]:
        """Severity keys present in the report, most severe first."""
        return sorted(self.issues_by_severity.keys(), key=severity_rank)

    def all_findings(self) -> List[Finding]:
        """Flattened findings, severity order then upstream order."""
        out: List[Finding] = []
        for sev in self.sorted_severities():
            out.extend(self.issues_by_severity[sev])
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_key": self.project_key,
            "project_name": self.project_name,
            "branch": self.branch,
            "generated_at": self.generated_at.isoformat(),
            "analysis_date": self.analysis_date,
            "quality_gate_status": self.quality_gate_status,
            "quality_gate_conditions": [c.to_dict() for c in self.quality_gate_conditions],
            "metrics": self.metrics.to_dict(),
            "total_issues": self.total_issues,
            "issues_by_type": dict(self.issues_by_type),
            "issues_by_severity": {
                sev: [f.to_dict() for f in items] for sev, items in self.issues_by_severity.items()
            },
            "total_hotspots": self.total_hotspots,
            "hotspots": [h.to_dict() for h in self.hotspots],
            "hotspots_by_priority": dict(self.hotspots_by_priority),
        }
