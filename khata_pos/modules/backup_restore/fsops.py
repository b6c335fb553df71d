"""
modules/backup_restore/fsops.py

File helpers for backup files: a destination folder check and an atomic
text write (temp file next to the target, fsync, os.replace).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["ensure_writable_dir", "atomic_write_text", "read_text"]


def ensure_writable_dir(path: str) -> None:
    p = Path(path)
    if not p.exists():
        raise RuntimeError(f"Destination folder does not exist: {p}")
    if not p.is_dir():
        raise RuntimeError(f"Destination path is not a folder: {p}")
    if not os.access(str(p), os.W_OK | os.X_OK):
        raise RuntimeError(f"Destination folder is not writable: {p}")


def atomic_write_text(dest: str | Path, text: str) -> Path:
    """
    Write `text` to `dest` so readers see either the old file or the
    complete new one, never a partial write.
    """
    dest_p = Path(dest).resolve()
    dest_p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".khata_", suffix=".part", dir=str(dest_p.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, str(dest_p))
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return dest_p


def read_text(src: str | Path) -> str:
    with open(src, "r", encoding="utf-8") as f:
        return f.read()
