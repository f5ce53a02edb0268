"""sonar_report.io

Filesystem contracts and IO helpers.

Design principle
----------------
Where reports go on disk (and the shape of the history index) is a public
contract shared by the CLI and anything that archives reports. This package
owns those rules so they evolve in one place.
"""

from __future__ import annotations

from .fs import read_json, write_json_atomic, write_text_atomic
from .history import INDEX_FILENAME, ReportHistory, ReportRecord

__all__ = [
    "INDEX_FILENAME",
    "ReportHistory",
    "ReportRecord",
    "read_json",
    "write_json_atomic",
    "write_text_atomic",
]
