"""Filesystem helpers shared by the persistence layer."""

from __future__ import annotations

import os
import re
import tempfile
from datetime import datetime
from pathlib import Path

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) if needed and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str) -> str:
    """Replace characters that are not allowed in file names."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name).strip()


def session_timestamp(now: datetime | None = None) -> str:
    """Human-readable local timestamp with path-unsafe characters removed.

    >>> session_timestamp(datetime(2026, 10, 19, 14, 30, 5))
    '10-19-2026_2-30-05PM'
    """
    now = now or datetime.now()
    stamp = f"{now.month}/{now.day}/{now.year}, {now.strftime('%I').lstrip('0') or '12'}:{now:%M:%S %p}"
    return stamp.replace("/", "-").replace(":", "-").replace(" ", "").replace(",", "_")


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write *content* to *path* via a temp file + rename so readers never see a partial file."""
    ensure_dir(path.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp-", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
