from __future__ import annotations

"""pipeline.report.labels

Display labels shared by the Markdown and HTML renderers.
"""

from datetime import datetime

SEVERITY_EMOJI = {
    "BLOCKER": "🔴",
    "CRITICAL": "🟠",
    "MAJOR": "🟡",
    "MINOR": "🔵",
    "INFO": "⚪",
}

RATING_EMOJI = {
    "A": "🟢",
    "B": "🟡",
    "C": "🟠",
    "D": "🔴",
    "E": "⛔",
}

PRIORITY_EMOJI = {
    "HIGH": "🔴",
    "MEDIUM": "🟡",
    "LOW": "🟢",
}

TYPE_EMOJI = {
    "BUG": "🐛",
    "VULNERABILITY": "🔓",
}

_GATE_TEXT = {"OK": "PASSED", "WARN": "WARNING", "ERROR": "FAILED"}
_GATE_EMOJI = {"OK": "✅", "WARN": "⚠️"}

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def severity_badge(severity: str) -> str:
    emoji = SEVERITY_EMOJI.get(severity)
    return f"{emoji} {severity}" if emoji else severity


def rating_emoji(rating: str) -> str:
    return RATING_EMOJI.get(rating, "⚪")


def priority_emoji(priority: str) -> str:
    return PRIORITY_EMOJI.get(priority, "⚪")


def type_emoji(issue_type: str) -> str:
    return TYPE_EMOJI.get(issue_type, "🧹")


def quality_gate_text(status: str) -> str:
    """'OK' -> 'PASSED', 'WARN' -> 'WARNING', 'ERROR' -> 'FAILED'; else unchanged."""
    return _GATE_TEXT.get(status, status)


def status_emoji(status: str) -> str:
    """Emoji for a gate or condition status; anything not OK/WARN is a failure."""
    return _GATE_EMOJI.get(status, "❌")


def format_time(dt: datetime) -> str:
    return dt.strftime(TIME_FORMAT)


def truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def line_range(line: int, end_line: int) -> str:
    if end_line and end_line != line:
        return f"{line} - {end_line}"
    return str(line)
