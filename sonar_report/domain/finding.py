"""sonar_report.domain.finding

Report-side representation of SonarQube issues and security hotspots.

The upstream API returns loosely-typed JSON. Everything downstream of the
report generator (renderers, history, tests) works with these dataclasses
instead, so field names and defaults live in exactly one place.

Findings are frozen. Enrichment (code snippet, fix guidance) produces a new
instance via :meth:`Finding.with_enrichment`; nothing mutates a finding that
another stage may already hold.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

# Severity tiers, most severe first.
SEVERITY_ORDER = ("BLOCKER", "CRITICAL", "MAJOR", "MINOR", "INFO")

_LANGUAGE_BY_EXT: Dict[str, str] = {
    ".go": "go",
    ".java": "java",
    ".js": "javascript",
    ".ts": "typescript",
    ".py": "python",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".c": "c",
    ".h": "c",
    ".swift": "swift",
    ".kt": "kotlin",
    ".rs": "rust",
    ".scala": "scala",
    ".vue": "vue",
    ".jsx": "jsx",
    ".tsx": "tsx",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".sql": "sql",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".sh": "bash",
}


def _safe_int(v: Any) -> int:
    if v is None or isinstance(v, bool):
        return 0
    try:
        return int(v)
    except (TypeError, ValueError):
        return 0


def _str(v: Any) -> str:
    return "" if v is None else str(v)


def severity_rank(severity: str) -> int:
    """Sort key for severity tiers; unknown severities sort last."""
    try:
        return SEVERITY_ORDER.index(severity)
    except ValueError:
        return len(SEVERITY_ORDER)


def component_file_name(component: str) -> str:
    """'project:src/app/main.py' -> 'src/app/main.py'."""
    if ":" in component:
        return component.split(":", 1)[1]
    return posixpath.basename(component)


def language_for_file(path: str) -> str:
    """Code-fence language tag for a file path ('' when unknown)."""
    ext = posixpath.splitext(path or "")[1].lower()
    return _LANGUAGE_BY_EXT.get(ext, "")


@dataclass(frozen=True)
class Finding:
    """One SonarQube issue as shown in the report."""

    key: str
    type: str
    severity: str
    message: str
    component: str
    rule: str
    line: int = 0
    end_line: int = 0
    effort: str = ""
    language: str = ""

    # ---- Enrichment (empty = not available) ----
    code_snippet: str = ""
    how_to_fix: str = ""

    @classmethod
    def from_issue(cls, issue: Mapping[str, Any]) -> "Finding":
        """Build a Finding from an /api/issues/search entry."""
        raw_component = _str(issue.get("component"))
        line = _safe_int(issue.get("line"))
        text_range = issue.get("textRange")
        end_line = line
        if isinstance(text_range, Mapping):
            end_line = _safe_int(text_range.get("endLine"))

        return cls(
            key=_str(issue.get("key")),
            type=_str(issue.get("type")),
            severity=_str(issue.get("severity")),
            message=_str(issue.get("message")),
            component=component_file_name(raw_component),
            rule=_str(issue.get("rule")),
            line=line,
            end_line=end_line,
            effort=_str(issue.get("effort")),
            language=language_for_file(raw_component),
        )

    def with_enrichment(self, *, code_snippet: str = "", how_to_fix: str = "") -> "Finding":
        return replace(self, code_snippet=code_snippet, how_to_fix=how_to_fix)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "key": self.key,
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
            "component": self.component,
            "rule": self.rule,
        }
        if self.line:
            out["line"] = self.line
        if self.end_line:
            out["end_line"] = self.end_line
        if self.effort:
            out["effort"] = self.effort
        if self.code_snippet:
            out["code_snippet"] = self.code_snippet
        if self.how_to_fix:
            out["how_to_fix"] = self.how_to_fix
        if self.language:
            out["language"] = self.language
        return out


@dataclass(frozen=True)
class Hotspot:
    """One security hotspot as shown in the report."""

    key: str
    security_category: str
    vulnerability_probability: str
    status: str
    message: str
    component: str
    line: int = 0

    @classmethod
    def from_api(cls, hotspot: Mapping[str, Any]) -> "Hotspot":
        """Build a Hotspot from an /api/hotspots/search entry."""
        return cls(
            key=_str(hotspot.get("key")),
            security_category=_str(hotspot.get("securityCategory")),
            vulnerability_probability=_str(hotspot.get("vulnerabilityProbability")),
            status=_str(hotspot.get("status")),
            message=_str(hotspot.get("message")),
            component=component_file_name(_str(hotspot.get("component"))),
            line=_safe_int(hotspot.get("line")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "key": self.key,
            "security_category": self.security_category,
            "vulnerability_probability": self.vulnerability_probability,
            "status": self.status,
            "message": self.message,
            "component": self.component,
        }
        if self.line:
            out["line"] = self.line
        return out


def optional_str(v: Any) -> Optional[str]:
    """None for missing/blank values, otherwise str(v)."""
    if v is None:
        return None
    s = str(v)
    return s if s.strip() else None
