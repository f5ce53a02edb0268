"""sonar_report.io.history

On-disk report history.

Layout
------
::

    <base_path>/
      index.json                                   # list of ReportRecord, newest first
      <project_key>-<YYYYmmdd-HHMMSS>-<id>.md
      <project_key>-<YYYYmmdd-HHMMSS>-<id>.html

The index is the source of truth for what exists. Report files are written
before the index entry that points at them.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping

from sonar_report.domain import ReportModel

from .fs import read_json, write_json_atomic, write_text_atomic

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"

FORMAT_EXTENSIONS: Dict[str, str] = {"md": "md", "html": "html", "json": "json"}


@dataclass(frozen=True)
class ReportRecord:
    """One saved report."""

    id: str
    project_key: str
    project_name: str
    branch: str
    format: str
    file_name: str
    file_path: str
    file_size: int
    generated_at: str  # ISO 8601, UTC

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ReportRecord":
        return cls(
            id=str(d.get("id") or ""),
            project_key=str(d.get("project_key") or ""),
            project_name=str(d.get("project_name") or ""),
            branch=str(d.get("branch") or ""),
            format=str(d.get("format") or ""),
            file_name=str(d.get("file_name") or ""),
            file_path=str(d.get("file_path") or ""),
            file_size=int(d.get("file_size") or 0),
            generated_at=str(d.get("generated_at") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def generated_at_dt(self) -> datetime:
        try:
            dt = datetime.fromisoformat(self.generated_at)
        except ValueError:
            return datetime.min.replace(tzinfo=timezone.utc)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt


class ReportHistory:
    """Report file storage plus a JSON index of saved reports.

    All methods are safe to call from multiple threads.
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._records: List[ReportRecord] = self._load()

    @property
    def index_path(self) -> Path:
        return self.base_path / INDEX_FILENAME

    # -------------------------
    # index IO
    # -------------------------

    def _load(self) -> List[ReportRecord]:
        if not self.index_path.exists():
            return []
        try:
            raw = read_json(self.index_path)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable report index %s: %s", self.index_path, e)
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring report index with unexpected shape: %s", self.index_path)
            return []
        return [ReportRecord.from_dict(r) for r in raw if isinstance(r, Mapping)]

    def _save(self) -> None:
        self._records.sort(key=lambda r: r.generated_at_dt, reverse=True)
        write_json_atomic(self.index_path, [r.to_dict() for r in self._records])

    # -------------------------
    # public API
    # -------------------------

    def save(self, report: ReportModel, content: str, fmt: str) -> ReportRecord:
        """Write the rendered report and add it to the index."""
        ext = FORMAT_EXTENSIONS.get(fmt, "md")
        now = datetime.now(timezone.utc)
        record_id = uuid.uuid4().hex[:8]
        file_name = f"{report.project_key}-{now.strftime('%Y%m%d-%H%M%S')}-{record_id}.{ext}"
        file_path = self.base_path / file_name

        with self._lock:
            write_text_atomic(file_path, content)
            record = ReportRecord(
                id=record_id,
                project_key=report.project_key,
                project_name=report.project_name,
                branch=report.branch,
                format=ext,
                file_name=file_name,
                file_path=str(file_path),
                file_size=file_path.stat().st_size,
                generated_at=now.isoformat(),
            )
            self._records.insert(0, record)
            self._save()

        logger.info("Saved report %s (%s, %d bytes)", record.id, file_name, record.file_size)
        return record

    def list(self) -> List[ReportRecord]:
        with self._lock:
            return list(self._records)

    def get(self, record_id: str) -> ReportRecord:
        with self._lock:
            for r in self._records:
                if r.id == record_id:
                    return r
        raise KeyError(f"report not found: {record_id}")

    def file_path(self, record_id: str) -> Path:
        return Path(self.get(record_id).file_path)

    def delete(self, record_id: str) -> None:
        with self._lock:
            for i, r in enumerate(self._records):
                if r.id == record_id:
                    _remove_quietly(Path(r.file_path))
                    del self._records[i]
                    self._save()
                    return
        raise KeyError(f"report not found: {record_id}")

    def clear(self) -> int:
        """Delete every report. Returns how many were removed."""
        with self._lock:
            n = len(self._records)
            for r in self._records:
                _remove_quietly(Path(r.file_path))
            self._records = []
            self._save()
        return n

    def clean_old(self, days: int) -> int:
        """Delete reports older than *days*. Returns how many were removed."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        with self._lock:
            keep: List[ReportRecord] = []
            removed = 0
            for r in self._records:
                if r.generated_at_dt > cutoff:
                    keep.append(r)
                else:
                    _remove_quietly(Path(r.file_path))
                    removed += 1
            self._records = keep
            self._save()
        return removed


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not delete report file %s: %s", path, e)
