from __future__ import annotations

"""pipeline.report.locations

Decide which lines of which file best illustrate an issue, and turn fetched
source lines into a snippet.

SonarQube attributes some issues to a file header (line 0/1, e.g. "file has
too many lines" or cognitive complexity reported at the top of a module).
When the issue also carries flow locations deeper in the file, those make a
far more useful snippet, so they win.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple

from tools.sonar.rules import strip_html_tags

logger = logging.getLogger(__name__)

HEADER_LINE_LIMIT = 5
CONTEXT_LINES = 3
FILE_HEAD_LINES = 10

PROBLEM_PREFIX = "> "
CONTEXT_PREFIX = "  "


class SourceFetcher(Protocol):
    def get_source_code(self, component: str, from_line: int, to_line: int) -> List[Tuple[int, str]]: ...


@dataclass(frozen=True)
class SnippetRange:
    """Resolved location: component key plus 1-based inclusive line range."""

    component: str
    start_line: int
    end_line: int


def _int(v: Any) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return 0


def _first_flow_location(issue: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    flows = issue.get("flows")
    if not isinstance(flows, list) or not flows:
        return None
    first = flows[0]
    locations = first.get("locations") if isinstance(first, Mapping) else None
    if not isinstance(locations, list) or not locations:
        return None
    loc = locations[0]
    return loc if isinstance(loc, Mapping) else None


def resolve_snippet_range(issue: Mapping[str, Any]) -> SnippetRange:
    """Pick the component and line range to show for an issue.

    Default: the issue's own line (or text range). If that points at the file
    header (start <= 5) and the first flow location starts below line 5, use
    the flow location instead.
    """
    component = str(issue.get("component") or "")
    start = _int(issue.get("line"))
    end = start

    text_range = issue.get("textRange")
    if isinstance(text_range, Mapping):
        start = _int(text_range.get("startLine"))
        end = _int(text_range.get("endLine"))

    if start <= HEADER_LINE_LIMIT:
        loc = _first_flow_location(issue)
        loc_range = loc.get("textRange") if loc is not None else None
        if isinstance(loc_range, Mapping) and _int(loc_range.get("startLine")) > HEADER_LINE_LIMIT:
            start = _int(loc_range.get("startLine"))
            end = _int(loc_range.get("endLine"))
            if loc.get("component"):
                component = str(loc["component"])

    if end < start:
        end = start
    return SnippetRange(component=component, start_line=start, end_line=end)


def format_snippet(lines: Sequence[Tuple[int, str]], *, mark_from: int = 0, mark_to: int = -1) -> str:
    """Render source lines as '> 12: code' (problem) / '  11: code' (context)."""
    out: List[str] = []
    for line_no, code in lines:
        prefix = PROBLEM_PREFIX if mark_from <= line_no <= mark_to else CONTEXT_PREFIX
        out.append(f"{prefix}{line_no}: {strip_html_tags(code)}")
    return "\n".join(out)


def fetch_code_snippet(client: SourceFetcher, issue: Mapping[str, Any]) -> str:
    """Fetch and format the snippet for an issue ('' when nothing is available).

    Errors propagate to the caller; enrichment decides how to absorb them.
    """
    rng = resolve_snippet_range(issue)
    if not rng.component:
        return ""

    if rng.start_line == 0:
        # Whole-file issues (e.g. missing trailing newline): show the file head.
        lines = client.get_source_code(rng.component, 1, FILE_HEAD_LINES)
        return format_snippet(lines)

    from_line = max(1, rng.start_line - CONTEXT_LINES)
    to_line = rng.end_line + CONTEXT_LINES
    lines = client.get_source_code(rng.component, from_line, to_line)
    return format_snippet(lines, mark_from=rng.start_line, mark_to=rng.end_line)
