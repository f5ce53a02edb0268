from __future__ import annotations

"""pipeline.report.render_md

Markdown rendering for SonarQube analysis reports.

This module contains formatting logic only (no file I/O, no network).
"""

from typing import List, Sequence

from sonar_report.domain import Finding, ReportModel

from .labels import (
    format_time,
    line_range,
    priority_emoji,
    quality_gate_text,
    rating_emoji,
    severity_badge,
    status_emoji,
    truncate,
    type_emoji,
)
from .metrics import type_percentage

DETAILED_PER_SEVERITY = 10
LISTED_PER_SEVERITY = 25
HOTSPOTS_SHOWN = 20
HOW_TO_FIX_MAX_CHARS = 500
TABLE_MESSAGE_MAX_CHARS = 60

FOOTER = "*Report generated by **SonarQube Report Generator***"


def _cell(value: object) -> str:
    # Pipes and newlines would break a table row.
    return str(value).replace("|", "\\|").replace("\n", " ")


def render_markdown(report: ReportModel) -> str:
    """Render a ReportModel as a standalone markdown document."""

    lines: List[str] = []

    lines.append("# 📊 SonarQube Analysis Report")
    lines.append("")
    lines.append("### Code Quality Analysis Summary")
    lines.append("")
    lines.append("---")
    lines.append("")

    _project_info(lines, report)
    _quality_gate(lines, report)
    _metrics(lines, report)
    _issues(lines, report)
    _hotspots(lines, report)
    _summary(lines, report)

    lines.append("---")
    lines.append("")
    lines.append(FOOTER + "  ")
    lines.append(f"*{format_time(report.generated_at)}*")
    lines.append("")
    return "\n".join(lines)


def _project_info(lines: List[str], report: ReportModel) -> None:
    lines.append("## 📋 Project Information")
    lines.append("")
    lines.append("| | |")
    lines.append("|---|---|")
    lines.append(f"| **Project Name** | {_cell(report.project_name)} |")
    lines.append(f"| **Project Key** | `{report.project_key}` |")
    lines.append(f"| **Branch** | `{report.branch}` |")
    lines.append(f"| **Report Generated** | {format_time(report.generated_at)} |")
    if report.analysis_date:
        lines.append(f"| **Last Analysis** | {_cell(report.analysis_date)} |")
    lines.append("")
    lines.append("---")
    lines.append("")


def _quality_gate(lines: List[str], report: ReportModel) -> None:
    lines.append("## 🚦 Quality Gate")
    lines.append("")
    status = report.quality_gate_status
    if status == "OK":
        lines.append("### ✅ PASSED")
        lines.append("")
        lines.append("> **Congratulations!** Your code meets all quality standards.")
    elif status == "WARN":
        lines.append("### ⚠️ WARNING")
        lines.append("")
        lines.append("> **Attention needed.** Some quality thresholds are close to failing.")
    else:
        lines.append("### ❌ FAILED")
        lines.append("")
        lines.append("> **Action required!** Your code does not meet quality standards.")
    lines.append("")

    if report.quality_gate_conditions:
        lines.append("### Quality Gate Conditions")
        lines.append("")
        lines.append("| Metric | Status | Actual Value | Threshold |")
        lines.append("|:-------|:------:|:------------:|:----------|")
        for c in report.quality_gate_conditions:
            lines.append(
                f"| {_cell(c.metric)} | {status_emoji(c.status)} | **{_cell(c.actual_value)}** "
                f"| {_cell(c.comparator)} {_cell(c.error_threshold)} |"
            )
        lines.append("")

    lines.append("---")
    lines.append("")


def _metrics(lines: List[str], report: ReportModel) -> None:
    m = report.metrics

    lines.append("## 📈 Metrics Overview")
    lines.append("")
    lines.append("### Code Health Dashboard")
    lines.append("")
    lines.append("<table>")
    lines.append("<tr>")
    for title, value, rating in (
        ("🐛 Bugs", m.bugs, m.reliability_rating),
        ("🔓 Vulnerabilities", m.vulnerabilities, m.security_rating),
        ("🧹 Code Smells", m.code_smells, m.maintainability_rating),
    ):
        lines.append('<td align="center" width="33%">')
        lines.append("")
        lines.append(f"### {title}")
        lines.append(f"# {value}")
        lines.append(f"{rating_emoji(rating)} Rating: **{rating}**")
        lines.append("")
        lines.append("</td>")
    lines.append("</tr>")
    lines.append("</table>")
    lines.append("")

    lines.append("### Additional Metrics")
    lines.append("")
    lines.append("| Metric | Value | Description |")
    lines.append("|:-------|:-----:|:------------|")
    lines.append(f"| 📏 **Lines of Code** | {m.lines_of_code} | Total lines analyzed |")
    lines.append(f"| 📊 **Coverage** | {m.coverage} | Test coverage percentage |")
    lines.append(f"| 📑 **Duplications** | {m.duplicated_lines_density} | Duplicated code percentage |")
    lines.append(f"| ⏱️ **Technical Debt** | {m.technical_debt} | Estimated time to fix all issues |")
    lines.append("")

    if m.has_new_code:
        lines.append("### 🆕 New Code Analysis")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|:-------|:-----:|")
        for label, value in (
            ("🐛 New Bugs", m.new_bugs),
            ("🔓 New Vulnerabilities", m.new_vulnerabilities),
            ("🧹 New Code Smells", m.new_code_smells),
            ("📊 New Coverage", m.new_coverage),
            ("📑 New Duplications", m.new_duplicated_lines),
        ):
            if value:
                lines.append(f"| {label} | **{value}** |")
        lines.append("")

    lines.append("---")
    lines.append("")


def _issues(lines: List[str], report: ReportModel) -> None:
    lines.append("## 🔍 Issues Analysis")
    lines.append("")
    lines.append(f"### Total Issues: **{report.total_issues}**")
    lines.append("")

    lines.append("### Issues by Type")
    lines.append("")
    lines.append("| Type | Count | Percentage |")
    lines.append("|:-----|:-----:|:----------:|")
    for issue_type in sorted(report.issues_by_type):
        count = report.issues_by_type[issue_type]
        lines.append(
            f"| {type_emoji(issue_type)} {issue_type} | **{count}** | {type_percentage(count, report.total_issues)} |"
        )
    lines.append("")

    severities = report.sorted_severities()

    lines.append("### Issues by Severity")
    lines.append("")
    lines.append("| Severity | Count |")
    lines.append("|:---------|:-----:|")
    for sev in severities:
        lines.append(f"| {severity_badge(sev)} | **{len(report.issues_by_severity[sev])}** |")
    lines.append("")

    for sev in severities:
        findings = report.issues_by_severity[sev]
        if findings:
            _severity_details(lines, sev, findings)

    lines.append("---")
    lines.append("")


def _severity_details(lines: List[str], sev: str, findings: Sequence[Finding]) -> None:
    lines.append("---")
    lines.append("")
    lines.append(f"### {severity_badge(sev)} Issues ({len(findings)})")
    lines.append("")
    lines.append("<details>")
    lines.append(f"<summary>Click to expand {sev} issues</summary>")
    lines.append("")

    for idx, f in enumerate(findings[:DETAILED_PER_SEVERITY], start=1):
        lines.append(f"#### {idx}. {f.message}")
        lines.append("")
        lines.append("| Property | Value |")
        lines.append("|:---------|:------|")
        lines.append(f"| **File** | `{f.component}` |")
        lines.append(f"| **Line** | {line_range(f.line, f.end_line)} |")
        lines.append(f"| **Type** | {f.type} |")
        lines.append(f"| **Rule** | `{f.rule}` |")
        if f.effort:
            lines.append(f"| **Effort** | {f.effort} |")
        lines.append("")

        if f.code_snippet:
            lines.append("**📝 Problematic Code:**")
            lines.append("")
            lines.append(f"```{f.language}")
            lines.append(f.code_snippet)
            lines.append("```")
            lines.append("")

        if f.how_to_fix:
            lines.append("**💡 How to Fix:**")
            lines.append("")
            for text_line in truncate(f.how_to_fix, HOW_TO_FIX_MAX_CHARS).splitlines():
                lines.append(f"> {text_line}".rstrip())
            lines.append("")

        lines.append("---")
        lines.append("")

    if len(findings) > DETAILED_PER_SEVERITY:
        lines.append(
            f"> **Note:** Showing detailed view for first {DETAILED_PER_SEVERITY} of {len(findings)} {sev} issues."
        )
        lines.append("")
        lines.append(f"**Additional {sev} Issues:**")
        lines.append("")
        lines.append("| # | File | Line | Message |")
        lines.append("|:-:|:-----|:----:|:--------|")
        extra = findings[DETAILED_PER_SEVERITY:LISTED_PER_SEVERITY]
        for idx, f in enumerate(extra, start=DETAILED_PER_SEVERITY + 1):
            lines.append(
                f"| {idx} | `{f.component}` | {f.line} | {_cell(truncate(f.message, TABLE_MESSAGE_MAX_CHARS))} |"
            )
        lines.append("")
        if len(findings) > LISTED_PER_SEVERITY:
            lines.append(
                f"> Showing {LISTED_PER_SEVERITY} of {len(findings)} {sev} issues. See SonarQube for full list."
            )
            lines.append("")

    lines.append("</details>")
    lines.append("")


def _hotspots(lines: List[str], report: ReportModel) -> None:
    lines.append("## 🛡️ Security Hotspots")
    lines.append("")

    if report.total_hotspots <= 0:
        lines.append("### ✅ No Security Hotspots Found")
        lines.append("")
        lines.append("> Great job! No security hotspots detected in this analysis.")
        lines.append("")
        lines.append("---")
        lines.append("")
        return

    lines.append(f"### Total Hotspots: **{report.total_hotspots}**")
    lines.append("")
    lines.append("### Hotspots by Priority")
    lines.append("")
    lines.append("| Priority | Count |")
    lines.append("|:---------|:-----:|")
    for priority in sorted(report.hotspots_by_priority):
        lines.append(f"| {priority_emoji(priority)} {priority} | **{report.hotspots_by_priority[priority]}** |")
    lines.append("")

    if report.hotspots:
        lines.append("### Hotspot Details")
        lines.append("")
        lines.append("<details>")
        lines.append("<summary>Click to expand security hotspots</summary>")
        lines.append("")
        lines.append("| # | Priority | Category | Location | Status |")
        lines.append("|:-:|:--------:|:---------|:---------|:------:|")
        for idx, h in enumerate(report.hotspots[:HOTSPOTS_SHOWN], start=1):
            p = h.vulnerability_probability
            lines.append(
                f"| {idx} | {priority_emoji(p)} {p} | {_cell(h.security_category)} "
                f"| `{h.component}:{h.line}` | {h.status} |"
            )
        lines.append("")
        if len(report.hotspots) > HOTSPOTS_SHOWN:
            lines.append(f"> **Note:** Showing first {HOTSPOTS_SHOWN} of {len(report.hotspots)} hotspots.")
            lines.append("")
        lines.append("</details>")
        lines.append("")

    lines.append("---")
    lines.append("")


def _summary(lines: List[str], report: ReportModel) -> None:
    m = report.metrics
    lines.append("## 📝 Summary")
    lines.append("")
    if report.quality_gate_status == "OK":
        lines.append("| Status | Result |")
        lines.append("|:------:|:------:|")
        lines.append("| Quality Gate | ✅ **PASSED** |")
        lines.append(f"| Bugs | {m.bugs} ({m.reliability_rating}) |")
        lines.append(f"| Vulnerabilities | {m.vulnerabilities} ({m.security_rating}) |")
        lines.append(f"| Code Smells | {m.code_smells} ({m.maintainability_rating}) |")
    else:
        lines.append("| ⚠️ **Action Required** |")
        lines.append("|:----------------------:|")
        lines.append(f"| Quality Gate: **{quality_gate_text(report.quality_gate_status)}** |")
        lines.append("| Please review and fix the issues above |")
    lines.append("")
