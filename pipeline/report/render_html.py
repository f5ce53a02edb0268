from __future__ import annotations

"""pipeline.report.render_html

HTML rendering for SonarQube analysis reports.

Produces a single self-contained, printable HTML document (inline CSS, no
scripts, no external assets) with the same sections as the markdown report.
Printing it from a browser gives the shareable PDF-style artifact.
"""

from html import escape
from typing import List, Optional, Sequence

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
from .render_md import (
    DETAILED_PER_SEVERITY,
    HOTSPOTS_SHOWN,
    HOW_TO_FIX_MAX_CHARS,
    LISTED_PER_SEVERITY,
    TABLE_MESSAGE_MAX_CHARS,
)


def render_html(report: ReportModel, *, title: Optional[str] = None) -> str:
    """Render a ReportModel as a standalone HTML document."""

    doc_title = title or f"SonarQube Analysis Report: {report.project_name}"

    parts: List[str] = []
    parts.append("<!doctype html>")
    parts.append("<html lang='en'>")
    parts.append("<head>")
    parts.append("  <meta charset='utf-8'>")
    parts.append("  <meta name='viewport' content='width=device-width,initial-scale=1'>")
    parts.append(f"  <title>{escape(doc_title)}</title>")
    parts.append("  <style>")
    parts.append(_CSS)
    parts.append("  </style>")
    parts.append("</head>")
    parts.append("<body>")
    parts.append("<main class='container'>")

    parts.append("<header class='header'>")
    parts.append("  <h1>📊 SonarQube Analysis Report</h1>")
    parts.append("  <div class='subhead'>Code Quality Analysis Summary</div>")
    parts.append("</header>")

    # Project information
    parts.append("<section>")
    parts.append("  <h2>📋 Project Information</h2>")
    parts.append("  <table class='kv'>")
    parts.append(_kv("Project Name", escape(report.project_name)))
    parts.append(_kv("Project Key", f"<code>{escape(report.project_key)}</code>"))
    parts.append(_kv("Branch", f"<code>{escape(report.branch)}</code>"))
    parts.append(_kv("Report Generated", escape(format_time(report.generated_at))))
    if report.analysis_date:
        parts.append(_kv("Last Analysis", escape(report.analysis_date)))
    parts.append("  </table>")
    parts.append("</section>")

    # Quality gate
    status = report.quality_gate_status
    gate_cls = {"OK": "gate gate-ok", "WARN": "gate gate-warn"}.get(status, "gate gate-error")
    gate_text = quality_gate_text(status) if status in ("OK", "WARN") else "FAILED"
    parts.append("<section>")
    parts.append("  <h2>🚦 Quality Gate</h2>")
    parts.append(f"  <div class='{gate_cls}'>{status_emoji(status)} {escape(gate_text)}</div>")
    if report.quality_gate_conditions:
        parts.append("  <h3>Quality Gate Conditions</h3>")
        parts.append("  <table>")
        parts.append("    <thead><tr><th>Metric</th><th>Status</th><th>Actual Value</th><th>Threshold</th></tr></thead>")
        parts.append("    <tbody>")
        for c in report.quality_gate_conditions:
            parts.append(
                "      <tr>"
                f"<td>{escape(c.metric)}</td>"
                f"<td class='center'>{status_emoji(c.status)}</td>"
                f"<td class='center'><strong>{escape(c.actual_value)}</strong></td>"
                f"<td>{escape(c.comparator)} {escape(c.error_threshold)}</td>"
                "</tr>"
            )
        parts.append("    </tbody>")
        parts.append("  </table>")
    parts.append("</section>")

    # Metrics
    m = report.metrics
    parts.append("<section>")
    parts.append("  <h2>📈 Metrics Overview</h2>")
    parts.append("  <div class='kpi-grid'>")
    parts.append(_kpi("🐛 Bugs", m.bugs, m.reliability_rating))
    parts.append(_kpi("🔓 Vulnerabilities", m.vulnerabilities, m.security_rating))
    parts.append(_kpi("🧹 Code Smells", m.code_smells, m.maintainability_rating))
    parts.append("  </div>")
    parts.append("  <h3>Additional Metrics</h3>")
    parts.append("  <table class='kv'>")
    parts.append(_kv("📏 Lines of Code", escape(m.lines_of_code)))
    parts.append(_kv("📊 Coverage", escape(m.coverage)))
    parts.append(_kv("📑 Duplications", escape(m.duplicated_lines_density)))
    parts.append(_kv("⏱️ Technical Debt", escape(m.technical_debt)))
    parts.append("  </table>")
    if m.has_new_code:
        parts.append("  <h3>🆕 New Code Analysis</h3>")
        parts.append("  <table class='kv'>")
        for label, value in (
            ("🐛 New Bugs", m.new_bugs),
            ("🔓 New Vulnerabilities", m.new_vulnerabilities),
            ("🧹 New Code Smells", m.new_code_smells),
            ("📊 New Coverage", m.new_coverage),
            ("📑 New Duplications", m.new_duplicated_lines),
        ):
            if value:
                parts.append(_kv(label, f"<strong>{escape(value)}</strong>"))
        parts.append("  </table>")
    parts.append("</section>")

    # Issues
    parts.append("<section>")
    parts.append("  <h2>🔍 Issues Analysis</h2>")
    parts.append(f"  <p>Total Issues: <strong>{report.total_issues}</strong></p>")
    parts.append("  <h3>Issues by Type</h3>")
    parts.append("  <table>")
    parts.append("    <thead><tr><th>Type</th><th>Count</th><th>Percentage</th></tr></thead>")
    parts.append("    <tbody>")
    for issue_type in sorted(report.issues_by_type):
        count = report.issues_by_type[issue_type]
        parts.append(
            "      <tr>"
            f"<td>{type_emoji(issue_type)} {escape(issue_type)}</td>"
            f"<td class='center'><strong>{count}</strong></td>"
            f"<td class='center'>{type_percentage(count, report.total_issues)}</td>"
            "</tr>"
        )
    parts.append("    </tbody>")
    parts.append("  </table>")

    severities = report.sorted_severities()
    parts.append("  <h3>Issues by Severity</h3>")
    parts.append("  <table>")
    parts.append("    <thead><tr><th>Severity</th><th>Count</th></tr></thead>")
    parts.append("    <tbody>")
    for sev in severities:
        parts.append(
            f"      <tr><td>{_sev_badge(sev)}</td>"
            f"<td class='center'><strong>{len(report.issues_by_severity[sev])}</strong></td></tr>"
        )
    parts.append("    </tbody>")
    parts.append("  </table>")
    for sev in severities:
        findings = report.issues_by_severity[sev]
        if findings:
            parts.append(_render_severity(sev, findings))
    parts.append("</section>")

    # Hotspots
    parts.append("<section>")
    parts.append("  <h2>🛡️ Security Hotspots</h2>")
    if report.total_hotspots > 0:
        parts.append(f"  <p>Total Hotspots: <strong>{report.total_hotspots}</strong></p>")
        parts.append("  <table>")
        parts.append("    <thead><tr><th>Priority</th><th>Count</th></tr></thead>")
        parts.append("    <tbody>")
        for priority in sorted(report.hotspots_by_priority):
            parts.append(
                f"      <tr><td>{priority_emoji(priority)} {escape(priority)}</td>"
                f"<td class='center'><strong>{report.hotspots_by_priority[priority]}</strong></td></tr>"
            )
        parts.append("    </tbody>")
        parts.append("  </table>")
        if report.hotspots:
            parts.append("  <h3>Hotspot Details</h3>")
            parts.append("  <table>")
            parts.append(
                "    <thead><tr><th>#</th><th>Priority</th><th>Category</th><th>Location</th><th>Status</th></tr></thead>"
            )
            parts.append("    <tbody>")
            for idx, h in enumerate(report.hotspots[:HOTSPOTS_SHOWN], start=1):
                p = h.vulnerability_probability
                parts.append(
                    "      <tr>"
                    f"<td class='center'>{idx}</td>"
                    f"<td>{priority_emoji(p)} {escape(p)}</td>"
                    f"<td>{escape(h.security_category)}</td>"
                    f"<td><code>{escape(h.component)}:{h.line}</code></td>"
                    f"<td class='center'>{escape(h.status)}</td>"
                    "</tr>"
                )
            parts.append("    </tbody>")
            parts.append("  </table>")
            if len(report.hotspots) > HOTSPOTS_SHOWN:
                parts.append(
                    f"  <p class='note'>Showing first {HOTSPOTS_SHOWN} of {len(report.hotspots)} hotspots.</p>"
                )
    else:
        parts.append("  <p>✅ No Security Hotspots Found</p>")
    parts.append("</section>")

    # Summary
    parts.append("<section>")
    parts.append("  <h2>📝 Summary</h2>")
    if status == "OK":
        parts.append("  <table class='kv'>")
        parts.append(_kv("Quality Gate", "✅ <strong>PASSED</strong>"))
        parts.append(_kv("Bugs", f"{escape(m.bugs)} ({escape(m.reliability_rating)})"))
        parts.append(_kv("Vulnerabilities", f"{escape(m.vulnerabilities)} ({escape(m.security_rating)})"))
        parts.append(_kv("Code Smells", f"{escape(m.code_smells)} ({escape(m.maintainability_rating)})"))
        parts.append("  </table>")
    else:
        parts.append("  <div class='gate gate-error'>⚠️ Action Required</div>")
        parts.append(f"  <p>Quality Gate: <strong>{escape(quality_gate_text(status))}</strong></p>")
        parts.append("  <p>Please review and fix the issues above.</p>")
    parts.append("</section>")

    parts.append("<footer class='muted'>")
    parts.append(
        f"  Report generated by <strong>SonarQube Report Generator</strong> &middot; "
        f"{escape(format_time(report.generated_at))}"
    )
    parts.append("</footer>")
    parts.append("</main>")
    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts) + "\n"


def _render_severity(sev: str, findings: Sequence[Finding]) -> str:
    parts: List[str] = []
    parts.append("  <details open>")
    parts.append(f"    <summary>{_sev_badge(sev)} Issues ({len(findings)})</summary>")

    for idx, f in enumerate(findings[:DETAILED_PER_SEVERITY], start=1):
        parts.append("    <div class='finding'>")
        parts.append(f"      <h4>{idx}. {escape(f.message)}</h4>")
        parts.append("      <table class='kv'>")
        parts.append(_kv("File", f"<code>{escape(f.component)}</code>"))
        parts.append(_kv("Line", escape(line_range(f.line, f.end_line))))
        parts.append(_kv("Type", escape(f.type)))
        parts.append(_kv("Rule", f"<code>{escape(f.rule)}</code>"))
        if f.effort:
            parts.append(_kv("Effort", escape(f.effort)))
        parts.append("      </table>")
        if f.code_snippet:
            parts.append("      <p><strong>📝 Problematic Code:</strong></p>")
            lang_cls = f" class='language-{escape(f.language, quote=True)}'" if f.language else ""
            parts.append(f"      <pre><code{lang_cls}>{escape(f.code_snippet)}</code></pre>")
        if f.how_to_fix:
            parts.append("      <p><strong>💡 How to Fix:</strong></p>")
            parts.append(f"      <blockquote>{escape(truncate(f.how_to_fix, HOW_TO_FIX_MAX_CHARS))}</blockquote>")
        parts.append("    </div>")

    if len(findings) > DETAILED_PER_SEVERITY:
        parts.append(
            f"    <p class='note'>Showing detailed view for first {DETAILED_PER_SEVERITY} "
            f"of {len(findings)} {escape(sev)} issues.</p>"
        )
        parts.append("    <table>")
        parts.append("      <thead><tr><th>#</th><th>File</th><th>Line</th><th>Message</th></tr></thead>")
        parts.append("      <tbody>")
        extra = findings[DETAILED_PER_SEVERITY:LISTED_PER_SEVERITY]
        for idx, f in enumerate(extra, start=DETAILED_PER_SEVERITY + 1):
            parts.append(
                "        <tr>"
                f"<td class='center'>{idx}</td>"
                f"<td><code>{escape(f.component)}</code></td>"
                f"<td class='center'>{f.line}</td>"
                f"<td>{escape(truncate(f.message, TABLE_MESSAGE_MAX_CHARS))}</td>"
                "</tr>"
            )
        parts.append("      </tbody>")
        parts.append("    </table>")
        if len(findings) > LISTED_PER_SEVERITY:
            parts.append(
                f"    <p class='note'>Showing {LISTED_PER_SEVERITY} of {len(findings)} "
                f"{escape(sev)} issues. See SonarQube for full list.</p>"
            )

    parts.append("  </details>")
    return "\n".join(parts)


def _kv(label: str, value_html: str) -> str:
    return f"    <tr><th>{escape(label)}</th><td>{value_html}</td></tr>"


def _kpi(label: str, value: str, rating: str) -> str:
    return (
        "    <div class='kpi'>"
        f"<div class='kpi-label'>{escape(label)}</div>"
        f"<div class='kpi-value'>{escape(value)}</div>"
        f"<div class='kpi-rating'>{rating_emoji(rating)} Rating: <strong>{escape(rating)}</strong></div>"
        "</div>"
    )


def _sev_badge(sev: str) -> str:
    cls = {
        "BLOCKER": "sev sev-blocker",
        "CRITICAL": "sev sev-critical",
        "MAJOR": "sev sev-major",
        "MINOR": "sev sev-minor",
        "INFO": "sev sev-info",
    }.get(sev, "sev")
    return f"<span class='{cls}'>{escape(severity_badge(sev))}</span>"


_CSS = """
:root {
  --bg: #ffffff;
  --panel: #f6f8fa;
  --text: #111827;
  --muted: #4b5563;
  --border: rgba(17,24,39,0.12);
  --ok: #15803d;
  --warn: #b45309;
  --error: #b91c1c;
}

body {
  margin: 0;
  background: var(--bg);
  color: var(--text);
  font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, "Apple Color Emoji", "Segoe UI Emoji";
  line-height: 1.4;
}

.container {
  max-width: 1100px;
  margin: 0 auto;
  padding: 24px;
}

.header h1 {
  margin: 0 0 8px 0;
  font-size: 28px;
}

.subhead, .muted, .note {
  color: var(--muted);
}

section {
  margin-top: 24px;
  padding-top: 8px;
  border-top: 1px solid var(--border);
}

table {
  border-collapse: collapse;
  margin: 8px 0 16px 0;
}

th, td {
  border: 1px solid var(--border);
  padding: 6px 10px;
  text-align: left;
  vertical-align: top;
}

thead th, table.kv th {
  background: var(--panel);
}

.center {
  text-align: center;
}

.kpi-grid {
  display: grid;
  grid-template-columns: repeat(3, minmax(0, 1fr));
  gap: 12px;
}

.kpi {
  background: var(--panel);
  border: 1px solid var(--border);
  border-radius: 8px;
  padding: 12px;
  text-align: center;
}

.kpi-value {
  font-size: 32px;
  font-weight: 700;
}

.gate {
  display: inline-block;
  font-size: 20px;
  font-weight: 700;
  padding: 8px 16px;
  border-radius: 8px;
  color: #ffffff;
}

.gate-ok { background: var(--ok); }
.gate-warn { background: var(--warn); }
.gate-error { background: var(--error); }

.sev {
  font-weight: 600;
  white-space: nowrap;
}

.sev-blocker, .sev-critical { color: var(--error); }
.sev-major { color: var(--warn); }

details {
  margin: 12px 0;
}

summary {
  cursor: pointer;
  font-weight: 600;
}

.finding {
  margin: 12px 0 12px 16px;
  padding-bottom: 8px;
  border-bottom: 1px dashed var(--border);
}

pre {
  background: var(--panel);
  border: 1px solid var(--border);
  padding: 8px;
  overflow-x: auto;
}

blockquote {
  margin: 0;
  padding-left: 12px;
  border-left: 3px solid var(--border);
  white-space: pre-wrap;
}

footer {
  margin-top: 32px;
  font-size: 13px;
}

@media print {
  .container { max-width: none; padding: 0; }
  section { break-inside: avoid-page; }
}
"""
