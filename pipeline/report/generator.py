"""Report generator: orchestrates SonarQube calls into a ReportModel.

Usage:
    generator = ReportGenerator(SonarClient(cfg))
    report = generator.generate("my-project", branch="", options=ReportOptions())

Fatal vs tolerated upstream failures
------------------------------------
- projects, quality gate, measures, issues: fatal. ReportGenerationError is
  raised naming the stage; no partial report is returned.
- branches, hotspots, analysis history: tolerated. The report degrades to
  the default branch, zero hotspots, or no analysis date.
- snippets / rule guidance: best effort, see pipeline.report.enrichment.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from sonar_report.domain import (
    ConditionResult,
    Finding,
    Hotspot,
    ReportModel,
    ReportOptions,
)
from sonar_report.domain.finding import optional_str
from tools.sonar.api import DEFAULT_METRIC_KEYS

from .enrichment import MAX_WORKERS, EnrichmentClient, RuleGuidanceCache, enrich_issues, select_candidates
from .metrics import build_metrics_summary

logger = logging.getLogger(__name__)

MAX_ISSUES = 500
MAX_HOTSPOTS = 100
MAX_ENRICHED_PER_SEVERITY = 10


class ReportClient(EnrichmentClient, Protocol):
    def get_projects(self) -> List[Dict[str, Any]]: ...

    def get_branches(self, project_key: str) -> List[Dict[str, Any]]: ...

    def get_quality_gate_status(self, project_key: str, branch: str = "") -> Dict[str, Any]: ...

    def get_measures(self, project_key: str, branch: str = "", metric_keys: Sequence[str] = ...) -> List[Dict[str, Any]]: ...

    def get_issues(self, project_key: str, branch: str = "", max_results: int = ...) -> Tuple[List[Dict[str, Any]], int]: ...

    def get_hotspots(self, project_key: str, branch: str = "", max_results: int = ...) -> Tuple[List[Dict[str, Any]], int]: ...

    def get_analyses(self, project_key: str, branch: str = "", limit: int = ...) -> List[Dict[str, Any]]: ...


class ReportGenerationError(RuntimeError):
    """A required SonarQube call failed; *stage* names which one."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"failed to get {stage.replace('_', ' ')}: {cause}")


class ReportGenerator:
    """Builds a ReportModel for one project/branch."""

    def __init__(self, client: ReportClient, *, max_workers: int = MAX_WORKERS) -> None:
        self.client = client
        self.max_workers = max_workers

    def generate(
        self,
        project_key: str,
        branch: str = "",
        options: Optional[ReportOptions] = None,
    ) -> ReportModel:
        options = options or ReportOptions()

        project_name = self._project_name(project_key)
        if not branch:
            branch = self._main_branch(project_key)

        qg = self._fatal("quality_gate", self.client.get_quality_gate_status, project_key, branch)
        measures = self._fatal("measures", self.client.get_measures, project_key, branch, DEFAULT_METRIC_KEYS)
        issues, total_issues = self._fatal("issues", self.client.get_issues, project_key, branch, MAX_ISSUES)
        hotspots_raw, total_hotspots = self._hotspots(project_key, branch)
        analysis_date = self._analysis_date(project_key, branch)

        findings = self._findings(issues, options)

        issues_by_type: Counter[str] = Counter(f.type for f in findings)
        issues_by_severity: Dict[str, List[Finding]] = {}
        for f in findings:
            issues_by_severity.setdefault(f.severity, []).append(f)

        hotspots = tuple(Hotspot.from_api(h) for h in hotspots_raw)
        hotspots_by_priority: Counter[str] = Counter(h.vulnerability_probability for h in hotspots)

        report = ReportModel(
            project_key=project_key,
            project_name=project_name,
            branch=branch,
            generated_at=datetime.now(timezone.utc),
            analysis_date=analysis_date,
            quality_gate_status=str(qg.get("status") or ""),
            quality_gate_conditions=tuple(ConditionResult.from_api(c) for c in qg.get("conditions") or []),
            metrics=build_metrics_summary(measures),
            total_issues=total_issues,
            issues_by_type=MappingProxyType(dict(issues_by_type)),
            issues_by_severity=MappingProxyType({sev: tuple(items) for sev, items in issues_by_severity.items()}),
            total_hotspots=total_hotspots,
            hotspots=hotspots,
            hotspots_by_priority=MappingProxyType(dict(hotspots_by_priority)),
        )
        logger.info(
            "Report data assembled: project=%s branch=%s gate=%s issues=%d/%d hotspots=%d/%d",
            project_key,
            branch or "(default)",
            report.quality_gate_status,
            len(findings),
            total_issues,
            len(hotspots),
            total_hotspots,
        )
        return report

    # -------------------------
    # upstream stages
    # -------------------------

    @staticmethod
    def _fatal(stage: str, fn, *args):
        try:
            return fn(*args)
        except Exception as e:
            raise ReportGenerationError(stage, e) from e

    def _project_name(self, project_key: str) -> str:
        projects = self._fatal("projects", self.client.get_projects)
        for p in projects:
            if p.get("key") == project_key and p.get("name"):
                return str(p["name"])
        return project_key

    def _main_branch(self, project_key: str) -> str:
        try:
            branches = self.client.get_branches(project_key)
        except Exception as e:
            logger.debug("Branch list unavailable for %s, using default branch: %s", project_key, e)
            return ""
        for b in branches:
            if b.get("isMain"):
                return str(b.get("name") or "")
        return ""

    def _hotspots(self, project_key: str, branch: str) -> Tuple[List[Dict[str, Any]], int]:
        try:
            return self.client.get_hotspots(project_key, branch, MAX_HOTSPOTS)
        except Exception as e:
            # Some editions/versions don't expose the hotspots API.
            logger.warning("Hotspots unavailable for %s, reporting none: %s", project_key, e)
            return [], 0

    def _analysis_date(self, project_key: str, branch: str) -> Optional[str]:
        try:
            analyses = self.client.get_analyses(project_key, branch, 1)
        except Exception as e:
            logger.debug("Analysis history unavailable for %s: %s", project_key, e)
            return None
        if not analyses:
            return None
        return optional_str(analyses[0].get("date"))

    # -------------------------
    # findings + enrichment
    # -------------------------

    def _findings(self, issues: Sequence[Mapping[str, Any]], options: ReportOptions) -> List[Finding]:
        findings = [Finding.from_issue(i) for i in issues]
        if not options.enrichment_enabled:
            return findings

        candidates = select_candidates(issues, MAX_ENRICHED_PER_SEVERITY)
        if not candidates:
            return findings

        results = enrich_issues(
            self.client,
            [issue for _, issue in candidates],
            options,
            cache=RuleGuidanceCache(),
            max_workers=self.max_workers,
        )
        for (index, _), res in zip(candidates, results):
            findings[index] = findings[index].with_enrichment(
                code_snippet=res.code_snippet,
                how_to_fix=res.how_to_fix,
            )
        return findings
