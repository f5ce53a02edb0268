"""sonar_report.io.fs

Atomic file writes for rendered reports and the history index.

A browser, a CI artifact step or the next CLI run may read these files at any
time. Content is written to a sibling temp file and moved into place with
os.replace(), so readers see either the old file or the complete new one.
"""

from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any, Iterator, TextIO


@contextmanager
def atomic_open(path: Path, *, encoding: str = "utf-8") -> Iterator[TextIO]:
    """Yield a text handle whose content replaces *path* on clean exit.

    On error the target is left untouched and the temp file is removed.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding) as fh:
            yield fh
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        with suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def write_text_atomic(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    with atomic_open(path, encoding=encoding) as fh:
        fh.write(text)


def write_json_atomic(path: Path, data: Any, *, indent: int = 2, sort_keys: bool = False) -> None:
    """Pretty JSON (UTF-8, not ASCII-escaped) with a trailing newline."""
    with atomic_open(path) as fh:
        json.dump(data, fh, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
        fh.write("\n")


def read_json(path: Path, *, encoding: str = "utf-8") -> Any:
    return json.loads(Path(path).read_text(encoding=encoding))
