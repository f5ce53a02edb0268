from __future__ import annotations

"""pipeline.report.metrics

Formatting of raw SonarQube measures into display strings.

Pure functions only (no I/O).
"""

import re
from typing import Any, Dict, Iterable, Mapping

from sonar_report.domain import MetricsSummary

_RATING_LETTERS: Dict[str, str] = {
    "1": "A",
    "1.0": "A",
    "2": "B",
    "2.0": "B",
    "3": "C",
    "3.0": "C",
    "4": "D",
    "4.0": "D",
    "5": "E",
    "5.0": "E",
}

_LEADING_INT_RE = re.compile(r"^\s*(-?\d+)")

HOURS_PER_WORKDAY = 8


def rating_to_letter(rating: str) -> str:
    """'1'..'5' (optionally '.0') -> 'A'..'E'; anything else unchanged."""
    return _RATING_LETTERS.get(rating, rating)


def format_percentage(value: str) -> str:
    if value == "":
        return ""
    return f"{value}%"


def _parse_minutes(minutes: Any) -> int:
    if isinstance(minutes, int) and not isinstance(minutes, bool):
        return minutes
    m = _LEADING_INT_RE.match(str(minutes or ""))
    return int(m.group(1)) if m else 0


def format_debt(minutes: Any) -> str:
    """Technical debt in minutes -> '45min', '1h 30min', '3d 1h'.

    Durations of a day or more are expressed in 8-hour workdays.
    """
    m = _parse_minutes(minutes)
    if m <= 0:
        return "0min"
    if m < 60:
        return f"{m}min"

    hours, mins = divmod(m, 60)
    if hours < 24:
        return f"{hours}h {mins}min" if mins else f"{hours}h"

    days, rem_hours = divmod(hours, HOURS_PER_WORKDAY)
    return f"{days}d {rem_hours}h" if rem_hours else f"{days}d"


def type_percentage(count: int, total: int) -> str:
    """Share of *count* in *total* as '12.5%' ('0%' when total is 0)."""
    if not total:
        return "0%"
    return f"{count / total * 100:.1f}%"


def build_metrics_summary(measures: Iterable[Mapping[str, Any]]) -> MetricsSummary:
    """Raw /api/measures/component measures -> MetricsSummary."""
    values: Dict[str, str] = {}
    for m in measures:
        metric = m.get("metric")
        if isinstance(metric, str):
            value = m.get("value")
            if value is None and isinstance(m.get("period"), Mapping):
                # New-code metrics carry their value in the period block.
                value = m["period"].get("value")
            values[metric] = "" if value is None else str(value)

    def get(key: str, default: str) -> str:
        return values.get(key, default)

    return MetricsSummary(
        bugs=get("bugs", "0"),
        vulnerabilities=get("vulnerabilities", "0"),
        code_smells=get("code_smells", "0"),
        coverage=format_percentage(get("coverage", "0")),
        duplicated_lines_density=format_percentage(get("duplicated_lines_density", "0")),
        lines_of_code=get("ncloc", "0"),
        technical_debt=format_debt(get("sqale_index", "0")),
        reliability_rating=rating_to_letter(get("reliability_rating", "1")),
        security_rating=rating_to_letter(get("security_rating", "1")),
        maintainability_rating=rating_to_letter(get("sqale_rating", "1")),
        new_bugs=get("new_bugs", ""),
        new_vulnerabilities=get("new_vulnerabilities", ""),
        new_code_smells=get("new_code_smells", ""),
        new_coverage=format_percentage(get("new_coverage", "")),
        new_duplicated_lines=format_percentage(get("new_duplicated_lines_density", "")),
    )
