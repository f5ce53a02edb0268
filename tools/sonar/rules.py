"""tools.sonar.rules

Pure parsing logic for SonarQube rule metadata.

- `api.py` is responsible for HTTP calls.
- This module turns a `/api/rules/show` rule object into short, readable
  "how to fix" guidance for the report.

Why this exists:
`/api/issues/search` gives you *issues*, but remediation advice lives on the
*rule*. The report fetches each rule once and extracts a fix excerpt here.

Notes:
- Rule descriptions are prose (Markdown on older servers, HTML on newer
  ones). HTML is not guaranteed to be well-formed, so tags are removed with a
  regex rather than parsed.
- The patterns below are heuristics. When none match, the description itself
  is returned (truncated), which is always a usable answer.
"""

from __future__ import annotations

import html
import re
from typing import Any, Dict, List, Mapping, Optional

MAX_GUIDANCE_CHARS = 500

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")

# Order matters: the first pattern that matches wins.
HOW_TO_FIX_PATTERNS: List[re.Pattern[str]] = [
    re.compile(r"how\s+to\s+fix[:\s]+(.+?)(?:\n\n|$)", re.IGNORECASE),
    re.compile(r"compliant\s+solution[:\s]+(.+?)(?:\n\n|$)", re.IGNORECASE),
    re.compile(r"noncompliant\s+code\s+example.+?compliant\s+solution[:\s]+(.+?)(?:\n\n|$)", re.IGNORECASE),
]

# Newer servers split descriptions into sections; prefer the fix section.
_SECTION_PREFERENCE = ("how_to_fix", "resources", "root_cause", "introduction", "default")


def strip_html_tags(text: str) -> str:
    """Remove tags and decode entities, keeping line structure."""
    return html.unescape(_TAG_RE.sub("", text or ""))


def strip_html(text: str) -> str:
    """Remove tags, decode entities and collapse whitespace to single spaces."""
    return _WS_RE.sub(" ", strip_html_tags(text)).strip()


def truncate_text(text: str, max_chars: int = MAX_GUIDANCE_CHARS) -> str:
    """Truncate to max_chars, ending with '...' when shortened."""
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 3] + "..."


def extract_how_to_fix(description: str) -> str:
    """Extract a "how to fix" excerpt from a rule description.

    Returns the first matching pattern's capture group (trimmed), or the
    description truncated to MAX_GUIDANCE_CHARS.
    """
    text = description or ""
    for pattern in HOW_TO_FIX_PATTERNS:
        m = pattern.search(text)
        if m:
            return m.group(1).strip()
    return truncate_text(text)


def _section_text(sections: Any) -> str:
    if not isinstance(sections, list):
        return ""

    by_key: Dict[str, str] = {}
    for s in sections:
        if not isinstance(s, Mapping):
            continue
        key = str(s.get("key") or "")
        content = s.get("content")
        if key and isinstance(content, str) and content.strip() and key not in by_key:
            by_key[key] = content

    for key in _SECTION_PREFERENCE:
        if key in by_key:
            body = strip_html(by_key[key])
            # Keep the section name in front so the fix patterns can anchor on it.
            return f"How to fix: {body}" if key == "how_to_fix" else body
    return ""


def rule_description_text(rule: Optional[Mapping[str, Any]]) -> str:
    """Best plain-text description for a rule object from /api/rules/show.

    Preference: mdDesc, then htmlDesc, then descriptionSections. Every source
    is stripped of tags and entity-decoded; mdDesc keeps its line breaks so
    blank lines still end a paragraph.
    """
    if not isinstance(rule, Mapping):
        return ""

    md = rule.get("mdDesc")
    if isinstance(md, str) and md.strip():
        text = strip_html_tags(md).strip()
        if text:
            return text

    html_desc = rule.get("htmlDesc")
    if isinstance(html_desc, str) and html_desc.strip():
        return strip_html(html_desc)

    return _section_text(rule.get("descriptionSections"))


def guidance_from_rule(rule: Optional[Mapping[str, Any]]) -> str:
    """Rule object -> "how to fix" guidance ('' when the rule has no text)."""
    return extract_how_to_fix(rule_description_text(rule))
